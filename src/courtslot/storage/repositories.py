"""Storage reads and writes for courts, blackouts and the booking ledger.

Repositories only load and persist rows. The ``to_schedule``/``to_blackout``
helpers turn rows into the plain domain values the slot engine works on.
"""

from datetime import date, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.domain.availability import BookedInterval
from courtslot.domain.schedule import DayConfig, WeeklySchedule
from courtslot.domain.unavailability import Blackout
from courtslot.enums import BookingStatus, CourtStatus, DayOfWeek
from courtslot.models.booking import Booking
from courtslot.models.unavailability import CourtUnavailability
from courtslot.models.venue import Court, CourtDayConfig, Venue


def to_schedule(court: Court) -> WeeklySchedule:
    return WeeklySchedule(
        days=tuple(
            DayConfig(
                day_of_week=row.day,
                is_open=row.is_open,
                start_minute=row.start_minute,
                slot_duration_hours=row.slot_duration_hours,
                slot_count=row.slot_count,
                price=row.price,
            )
            for row in court.day_configs
        ),
        default_price=court.default_price,
    )


def to_blackout(row: CourtUnavailability) -> Blackout:
    return Blackout(
        start_at=row.start_at,
        end_at=row.end_at,
        is_recurring=row.is_recurring,
        recurring_days=frozenset(row.days),
        reason=row.reason,
        id=row.id,
    )


def to_interval(booking: Booking) -> BookedInterval:
    return BookedInterval(start_minute=booking.start_minute, end_minute=booking.end_minute)


class CourtRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, court_id: int, *, for_update: bool = False) -> Court | None:
        stmt = select(Court).where(Court.id == court_id)
        if for_update:
            # Serialises booking creators per court on stores with row locks
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def for_venue(self, venue_id: int) -> list[Court]:
        """Active courts of a venue, by name."""
        stmt = (
            select(Court)
            .where(Court.venue_id == venue_id, Court.status == CourtStatus.ACTIVE)
            .order_by(Court.name)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_venue(self, venue_id: int) -> Venue | None:
        return await self._session.get(Venue, venue_id)

    def add(self, court: Court) -> None:
        self._session.add(court)

    def replace_schedule(self, court: Court, configs: tuple[DayConfig, ...]) -> None:
        """Overwrite the court's seven day rows in place."""
        existing = {row.day_of_week: row for row in court.day_configs}
        for config in configs:
            row = existing.get(int(config.day_of_week))
            if row is None:
                row = CourtDayConfig(day_of_week=int(config.day_of_week))
                court.day_configs.append(row)
            row.is_open = config.is_open
            row.start_minute = config.start_minute
            row.slot_duration_hours = config.slot_duration_hours
            row.slot_count = config.slot_count
            row.price = config.price


class UnavailabilityRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, unavailability_id: int) -> CourtUnavailability | None:
        return await self._session.get(CourtUnavailability, unavailability_id)

    async def for_court_on(self, court_id: int, day: date) -> list[CourtUnavailability]:
        """Recurring records plus one-off records touching ``day``."""
        day_start = datetime.combine(day, datetime.min.time())
        day_end = day_start + timedelta(days=1)
        weekday = str(int(DayOfWeek.of(day)))
        stmt = (
            select(CourtUnavailability)
            .where(CourtUnavailability.court_id == court_id)
            .where(
                (
                    CourtUnavailability.is_recurring.is_(False)
                    & (CourtUnavailability.start_at < day_end)
                    & (CourtUnavailability.end_at > day_start)
                )
                | (
                    CourtUnavailability.is_recurring.is_(True)
                    & CourtUnavailability.recurring_days.contains(weekday)
                )
            )
            .order_by(CourtUnavailability.start_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def for_court(self, court_id: int) -> list[CourtUnavailability]:
        stmt = (
            select(CourtUnavailability)
            .where(CourtUnavailability.court_id == court_id)
            .order_by(CourtUnavailability.start_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    def add(self, row: CourtUnavailability) -> None:
        self._session.add(row)

    async def delete(self, row: CourtUnavailability) -> None:
        await self._session.delete(row)


class BookingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, booking_id: int) -> Booking | None:
        return await self._session.get(Booking, booking_id)

    async def active_for_court_date(self, court_id: int, day: date) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(
                Booking.court_id == court_id,
                Booking.booking_date == day,
                Booking.status != BookingStatus.CANCELLED,
            )
            .order_by(Booking.start_minute)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def overlapping(
        self,
        court_id: int,
        day: date,
        start_minute: int,
        end_minute: int,
        exclude_id: int | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.court_id == court_id,
            Booking.booking_date == day,
            Booking.status != BookingStatus.CANCELLED,
            Booking.start_minute < end_minute,
            Booking.end_minute > start_minute,
        )
        if exclude_id is not None:
            stmt = stmt.where(Booking.id != exclude_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    def add(self, booking: Booking) -> None:
        self._session.add(booking)

    async def mark_cancelled(
        self, booking_id: int, reason: str | None, cancelled_at: datetime
    ) -> bool:
        """Conditional CONFIRMED -> CANCELLED. False if the row was not confirmed."""
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == BookingStatus.CONFIRMED)
            .values(
                status=BookingStatus.CANCELLED,
                cancellation_reason=reason,
                cancelled_at=cancelled_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self._session.get(Booking, booking_id, populate_existing=True)
        return True

    async def for_requester(
        self,
        requester_id: int,
        *,
        today: date,
        upcoming: bool = False,
        past: bool = False,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(Booking.requester_id == requester_id)
        if upcoming:
            stmt = stmt.where(
                Booking.booking_date >= today, Booking.status == BookingStatus.CONFIRMED
            ).order_by(Booking.booking_date, Booking.start_minute)
        elif past:
            stmt = stmt.where(Booking.booking_date < today).order_by(
                Booking.booking_date.desc(), Booking.start_minute.desc()
            )
        else:
            if status is not None:
                stmt = stmt.where(Booking.status == status)
            stmt = stmt.order_by(Booking.booking_date.desc(), Booking.start_minute.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def for_venue(
        self,
        venue_id: int,
        *,
        court_id: int | None = None,
        on_date: date | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(Booking.venue_id == venue_id)
        if court_id is not None:
            stmt = stmt.where(Booking.court_id == court_id)
        if on_date is not None:
            stmt = stmt.where(Booking.booking_date == on_date)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.order_by(Booking.booking_date, Booking.start_minute)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
