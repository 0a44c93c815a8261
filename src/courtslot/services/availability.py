"""Slot availability engine: the read path for a court's day grid."""

import logging
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.domain.availability import Slot, consecutive_groups, mark_availability
from courtslot.domain.schedule import slots_for_date
from courtslot.errors import NotFoundError
from courtslot.models.venue import Court
from courtslot.storage.repositories import (
    BookingRepository,
    CourtRepository,
    UnavailabilityRepository,
    to_blackout,
    to_interval,
    to_schedule,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DAYS = 7


class SlotAvailabilityEngine:
    """Combines a court's weekly template, its bookings and its blackouts.

    Reads only; takes no locks and tolerates data going stale between the
    read and a later write. The booking manager re-runs it inside its
    transaction before committing.
    """

    def __init__(
        self,
        courts: CourtRepository,
        bookings: BookingRepository,
        unavailability: UnavailabilityRepository,
        max_days: int = DEFAULT_MAX_DAYS,
    ) -> None:
        self._courts = courts
        self._bookings = bookings
        self._unavailability = unavailability
        self._max_days = max_days

    @classmethod
    def from_session(
        cls, session: AsyncSession, max_days: int = DEFAULT_MAX_DAYS
    ) -> "SlotAvailabilityEngine":
        return cls(
            CourtRepository(session),
            BookingRepository(session),
            UnavailabilityRepository(session),
            max_days=max_days,
        )

    async def _active_court(self, court_id: int) -> Court:
        court = await self._courts.get(court_id)
        if court is None or not court.is_active:
            raise NotFoundError("Court not found", court_id=court_id)
        return court

    async def availability(self, court_id: int, day: date) -> list[Slot]:
        """Ordered slots for ``day``, each flagged available or not."""
        court = await self._active_court(court_id)
        return await self.availability_for_court(court, day)

    async def availability_for_court(self, court: Court, day: date) -> list[Slot]:
        candidates = slots_for_date(to_schedule(court), day)
        if not candidates:
            return []

        booked = [to_interval(b) for b in await self._bookings.active_for_court_date(court.id, day)]
        blackouts = [to_blackout(u) for u in await self._unavailability.for_court_on(court.id, day)]
        logger.debug(
            "Court %s on %s: %d candidate slots, %d bookings, %d blackouts",
            court.id,
            day,
            len(candidates),
            len(booked),
            len(blackouts),
        )
        return mark_availability(candidates, booked, blackouts, day)

    async def consecutive_groups(self, court_id: int, day: date, count: int) -> list[list[Slot]]:
        """Windows of ``count`` back-to-back available slots, for multi-slot bookings."""
        slots = await self.availability(court_id, day)
        return consecutive_groups(slots, count)

    async def availability_for_days(
        self, court_id: int, start_date: date, days: int = 3
    ) -> dict[date, list[Slot]]:
        court = await self._active_court(court_id)
        days = max(1, min(days, self._max_days))
        result: dict[date, list[Slot]] = {}
        for offset in range(days):
            day = start_date + timedelta(days=offset)
            result[day] = await self.availability_for_court(court, day)
        return result
