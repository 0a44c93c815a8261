"""Booking transaction manager: validates and commits a reservation.

The steps run in a fixed order and each one fails fast with a typed error:

1. court exists and is active, its venue is approved
2. slot count within [1, 4]
3. booking date inside the policy's advance window
4. day is open, duration matches the day config, range inside operating hours
5. availability re-derived and the exact range covered by available slots
6. total amount = slot count x slot price, split into commission and owner earnings
7. insert, flush, re-check for overlaps, commit

Steps 1-7 share one unit of work. A concurrent request that reserved an
overlapping interval first makes step 7 fail (unique index or post-flush
check) and the whole transaction is aborted.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from courtslot.domain.availability import Slot, covering_slots
from courtslot.domain.policy import PolicySettings
from courtslot.domain.schedule import operating_window
from courtslot.domain.timeofday import format_hhmm, parse_hhmm
from courtslot.domain.unavailability import blocking_windows
from courtslot.errors import AvailabilityConflict, NotFoundError, PolicyViolation, ValidationError
from courtslot.models.booking import Booking
from courtslot.services.availability import SlotAvailabilityEngine
from courtslot.storage.repositories import to_blackout, to_schedule
from courtslot.storage.uow import AbstractUnitOfWork, UniquenessViolation

logger = logging.getLogger(__name__)

MIN_SLOTS_PER_BOOKING = 1
MAX_SLOTS_PER_BOOKING = 4


@dataclass(frozen=True)
class BookingRequest:
    court_id: int
    requester_id: int
    booking_date: date
    start_time: str
    end_time: str
    slot_count: int


class BookingTransactionManager:
    def __init__(self, uow: AbstractUnitOfWork, policy: PolicySettings) -> None:
        self._uow = uow
        self._policy = policy

    async def create_booking(self, request: BookingRequest, now: datetime | None = None) -> Booking:
        """Validate ``request`` and commit it as a CONFIRMED booking.

        Raises:
            ValidationError: malformed times, slot count or duration.
            NotFoundError: court or venue missing or not bookable.
            PolicyViolation: outside the advance window or operating hours.
            AvailabilityConflict: range already booked or blacked out.
        """
        now = now or datetime.now()
        start = parse_hhmm(request.start_time)
        end = parse_hhmm(request.end_time, allow_midnight_end=True)
        if end <= start:
            raise ValidationError(
                "End time must be after start time",
                start_time=request.start_time,
                end_time=request.end_time,
            )

        try:
            async with self._uow as uow:
                booking = await self._create_in_unit(uow, request, start, end, now)
        except UniquenessViolation as e:
            logger.warning(
                "Booking rejected at commit for court %s on %s %s-%s",
                request.court_id,
                request.booking_date,
                request.start_time,
                request.end_time,
            )
            raise self._lost_race(request) from e

        logger.info(
            "Booking %s confirmed: court %s on %s %s-%s for requester %s",
            booking.id,
            booking.court_id,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
            booking.requester_id,
        )
        return booking

    async def _create_in_unit(
        self,
        uow: AbstractUnitOfWork,
        request: BookingRequest,
        start: int,
        end: int,
        now: datetime,
    ) -> Booking:
        court = await uow.courts.get(request.court_id, for_update=True)
        if court is None or not court.is_active:
            raise NotFoundError("Court not found or not available", court_id=request.court_id)
        venue = await uow.courts.get_venue(court.venue_id)
        if venue is None or not venue.is_bookable:
            raise NotFoundError("Venue not available for booking", venue_id=court.venue_id)

        if not MIN_SLOTS_PER_BOOKING <= request.slot_count <= MAX_SLOTS_PER_BOOKING:
            raise ValidationError(
                f"You can book between {MIN_SLOTS_PER_BOOKING} and "
                f"{MAX_SLOTS_PER_BOOKING} consecutive slots",
                slot_count=request.slot_count,
            )

        self._policy.check_booking_window(request.booking_date, start, now)

        schedule = to_schedule(court)
        config = schedule.config_for(request.booking_date)
        window = operating_window(schedule, request.booking_date)
        if config is None or window is None:
            raise PolicyViolation(
                f"Court is closed on {request.booking_date.strftime('%A')}",
                date=request.booking_date.isoformat(),
            )

        expected_minutes = request.slot_count * config.slot_duration_hours * 60
        if end - start != expected_minutes:
            raise ValidationError(
                "Invalid booking duration",
                expected_hours=expected_minutes // 60,
                requested_minutes=end - start,
                slot_duration_hours=config.slot_duration_hours,
            )

        opens, closes = window
        if start < opens or end > closes:
            raise PolicyViolation(
                "Booking time is outside operating hours",
                opens_at=format_hhmm(opens),
                closes_at=format_hhmm(closes),
            )

        engine = SlotAvailabilityEngine(uow.courts, uow.bookings, uow.unavailability)
        slots = await engine.availability_for_court(court, request.booking_date)
        covering = covering_slots(slots, start, end)
        if covering is None:
            raise ValidationError(
                "Requested time does not line up with the court's slots",
                slot_starts=[s.start_time for s in slots],
            )
        blocked = [s for s in covering if not s.is_available]
        if blocked:
            await self._raise_blocked(uow, request, start, end, blocked)

        total_amount = request.slot_count * schedule.price_for(config)

        booking = Booking(
            court_id=court.id,
            venue_id=court.venue_id,
            requester_id=request.requester_id,
            booking_date=request.booking_date,
            start_minute=start,
            end_minute=end,
            slot_count=request.slot_count,
            slot_duration_hours=config.slot_duration_hours,
            total_amount=total_amount,
            commission_amount=self._policy.commission(total_amount),
            owner_earnings=self._policy.owner_earnings(total_amount),
        )
        uow.bookings.add(booking)
        await uow.flush()

        clashes = await uow.bookings.overlapping(
            court.id, request.booking_date, start, end, exclude_id=booking.id
        )
        if clashes:
            raise self._lost_race(request)
        return booking

    async def _raise_blocked(
        self,
        uow: AbstractUnitOfWork,
        request: BookingRequest,
        start: int,
        end: int,
        blocked: list[Slot],
    ) -> None:
        hours = [f"{s.start_time}-{s.end_time}" for s in blocked]
        if await uow.bookings.overlapping(request.court_id, request.booking_date, start, end):
            raise AvailabilityConflict("This time slot is already booked", blocked_hours=hours)

        rows = await uow.unavailability.for_court_on(request.court_id, request.booking_date)
        blackouts = [to_blackout(row) for row in rows]
        windows = [
            b.describe() for b in blocking_windows(blackouts, request.booking_date, start, end)
        ]
        raise AvailabilityConflict(
            "Court is unavailable during this time", blocked_hours=hours, unavailable=windows
        )

    @staticmethod
    def _lost_race(request: BookingRequest) -> AvailabilityConflict:
        return AvailabilityConflict(
            "Selected time slot was just booked by someone else; refresh availability and retry",
            requested=f"{request.start_time}-{request.end_time}",
            date=request.booking_date.isoformat(),
        )
