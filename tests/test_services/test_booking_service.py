"""Tests for the booking transaction manager."""

import asyncio
from collections.abc import AsyncGenerator
from dataclasses import replace
from datetime import date, datetime
from itertools import combinations
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from courtslot.database import Base, enforce_sqlite_foreign_keys
from courtslot.domain.availability import mark_availability
from courtslot.domain.policy import PolicySettings
from courtslot.domain.schedule import default_week, slots_for_date
from courtslot.enums import BookingStatus, CourtStatus, UnavailabilityReason, VenueStatus
from courtslot.errors import AvailabilityConflict, NotFoundError, PolicyViolation, ValidationError
from courtslot.models.booking import Booking
from courtslot.models.unavailability import CourtUnavailability
from courtslot.models.venue import Court
from courtslot.services.availability import SlotAvailabilityEngine
from courtslot.services.booking import BookingRequest, BookingTransactionManager
from courtslot.storage.repositories import CourtRepository, to_schedule
from courtslot.storage.uow import SqlAlchemyUnitOfWork
from tests.conftest import create_court, test_session

MONDAY = date(2024, 6, 10)
NOW = datetime(2024, 6, 9, 12, 0)


async def _book(
    court_id: int,
    start: str = "14:00",
    end: str = "16:00",
    slot_count: int = 2,
    *,
    day: date = MONDAY,
    requester_id: int = 1,
    now: datetime = NOW,
    policy: PolicySettings | None = None,
) -> Booking:
    async with test_session() as session:
        manager = BookingTransactionManager(SqlAlchemyUnitOfWork(session), policy or PolicySettings())
        request = BookingRequest(
            court_id=court_id,
            requester_id=requester_id,
            booking_date=day,
            start_time=start,
            end_time=end,
            slot_count=slot_count,
        )
        return await manager.create_booking(request, now=now)


async def _availability(court_id: int, day: date = MONDAY) -> dict[str, bool]:
    async with test_session() as session:
        slots = await SlotAvailabilityEngine.from_session(session).availability(court_id, day)
    return {s.start_time: s.is_available for s in slots}


async def _ledger_count() -> int:
    async with test_session() as session:
        return await session.scalar(select(func.count()).select_from(Booking))


@pytest.mark.asyncio
async def test_book_two_slots() -> None:
    court = await create_court()

    booking = await _book(court.id)

    assert booking.id is not None
    assert booking.status is BookingStatus.CONFIRMED
    assert booking.total_amount == 1000.0
    assert booking.commission_amount == 100.0
    assert booking.owner_earnings == 900.0
    assert booking.start_time == "14:00"
    assert booking.end_time == "16:00"
    assert booking.slot_duration_hours == 1
    assert booking.venue_id == court.venue_id


@pytest.mark.asyncio
async def test_booked_slots_become_unavailable() -> None:
    court = await create_court()
    await _book(court.id)

    availability = await _availability(court.id)

    assert availability["14:00"] is False
    assert availability["15:00"] is False
    assert availability["13:00"] is True
    assert availability["16:00"] is True
    assert list(availability.values()).count(False) == 2


@pytest.mark.asyncio
async def test_overlapping_request_rejected_with_blocked_hours() -> None:
    court = await create_court()
    await _book(court.id)

    with pytest.raises(AvailabilityConflict, match="already booked") as exc_info:
        await _book(court.id, "15:00", "16:00", 1, requester_id=2)

    assert exc_info.value.context["blocked_hours"] == ["15:00-16:00"]
    assert await _ledger_count() == 1


@pytest.mark.asyncio
async def test_adjacent_booking_allowed() -> None:
    court = await create_court()
    await _book(court.id)

    booking = await _book(court.id, "16:00", "17:00", 1, requester_id=2)

    assert booking.total_amount == 500.0
    assert await _ledger_count() == 2


@pytest.mark.asyncio
async def test_day_price_overrides_court_default() -> None:
    week = list(default_week(None))
    week[0] = replace(week[0], price=750.0)
    court = await create_court(schedule=tuple(week), price=400.0)

    monday = await _book(court.id, "10:00", "11:00", 1)
    tuesday = await _book(court.id, "10:00", "11:00", 1, day=date(2024, 6, 11))

    assert monday.total_amount == 750.0
    assert tuesday.total_amount == 400.0


@pytest.mark.asyncio
async def test_multi_hour_slots() -> None:
    week = tuple(replace(c, slot_duration_hours=2, slot_count=5) for c in default_week(300.0))
    court = await create_court(schedule=week)

    booking = await _book(court.id, "12:00", "16:00", 2)
    assert booking.total_amount == 600.0
    assert booking.slot_duration_hours == 2

    with pytest.raises(ValidationError, match="does not line up"):
        await _book(court.id, "11:00", "13:00", 1)


class TestPreconditions:
    @pytest.mark.asyncio
    async def test_unknown_court(self) -> None:
        with pytest.raises(NotFoundError):
            await _book(999)

    @pytest.mark.asyncio
    async def test_inactive_court(self) -> None:
        court = await create_court()
        async with test_session() as session:
            row = await session.get(Court, court.id)
            row.status = CourtStatus.INACTIVE
            await session.commit()

        with pytest.raises(NotFoundError):
            await _book(court.id)

    @pytest.mark.asyncio
    async def test_venue_not_approved(self) -> None:
        court = await create_court(venue_status=VenueStatus.PENDING)
        with pytest.raises(NotFoundError, match="Venue"):
            await _book(court.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slot_count", [0, 5])
    async def test_slot_count_out_of_range(self, slot_count: int) -> None:
        court = await create_court()
        with pytest.raises(ValidationError, match="between 1 and 4"):
            await _book(court.id, slot_count=slot_count)

    @pytest.mark.asyncio
    async def test_bad_time_format(self) -> None:
        court = await create_court()
        with pytest.raises(ValidationError, match="HH:MM"):
            await _book(court.id, "2pm", "16:00")

    @pytest.mark.asyncio
    async def test_end_before_start(self) -> None:
        court = await create_court()
        with pytest.raises(ValidationError, match="End time must be after"):
            await _book(court.id, "16:00", "14:00")

    @pytest.mark.asyncio
    async def test_duration_mismatch(self) -> None:
        court = await create_court()
        with pytest.raises(ValidationError, match="Invalid booking duration") as exc_info:
            await _book(court.id, "14:00", "17:00", 2)
        assert exc_info.value.context["expected_hours"] == 2

    @pytest.mark.asyncio
    async def test_beyond_advance_window(self) -> None:
        court = await create_court()
        with pytest.raises(PolicyViolation, match="days in advance") as exc_info:
            await _book(court.id, day=date(2024, 6, 17))
        assert exc_info.value.context["max_advance_days"] == 7

    @pytest.mark.asyncio
    async def test_start_in_past(self) -> None:
        court = await create_court()
        with pytest.raises(PolicyViolation, match="in the past"):
            await _book(court.id, now=datetime(2024, 6, 10, 15, 0))

    @pytest.mark.asyncio
    async def test_outside_operating_hours(self) -> None:
        court = await create_court()
        with pytest.raises(PolicyViolation, match="operating hours") as exc_info:
            await _book(court.id, "20:00", "22:00", 2)
        assert exc_info.value.context["opens_at"] == "10:00"
        assert exc_info.value.context["closes_at"] == "21:00"

    @pytest.mark.asyncio
    async def test_closed_day(self) -> None:
        week = list(default_week(500.0))
        week[0] = replace(week[0], is_open=False)
        court = await create_court(schedule=tuple(week))

        with pytest.raises(PolicyViolation, match="closed on Monday"):
            await _book(court.id)

    @pytest.mark.asyncio
    async def test_failures_leave_ledger_empty(self) -> None:
        court = await create_court()
        for args in [("2pm", "16:00", 2), ("14:00", "17:00", 2), ("20:00", "22:00", 2)]:
            with pytest.raises((ValidationError, PolicyViolation)):
                await _book(court.id, *args)
        assert await _ledger_count() == 0


@pytest.mark.asyncio
async def test_blackout_blocks_booking() -> None:
    court = await create_court()
    async with test_session() as session:
        session.add(
            CourtUnavailability(
                court_id=court.id,
                venue_id=court.venue_id,
                start_at=datetime(2024, 6, 10, 15, 0),
                end_at=datetime(2024, 6, 10, 17, 0),
                reason=UnavailabilityReason.PRIVATE_EVENT,
                created_by=99,
            )
        )
        session.add(
            CourtUnavailability(
                court_id=court.id,
                venue_id=court.venue_id,
                start_at=datetime(2024, 6, 10, 18, 0),
                end_at=datetime(2024, 6, 10, 19, 0),
                created_by=99,
            )
        )
        await session.commit()

    with pytest.raises(AvailabilityConflict, match="unavailable") as exc_info:
        await _book(court.id)

    assert exc_info.value.context["blocked_hours"] == ["15:00-16:00"]
    assert len(exc_info.value.context["unavailable"]) == 1
    assert "private_event" in exc_info.value.context["unavailable"][0]
    assert await _ledger_count() == 0


@pytest.mark.asyncio
async def test_recurring_blackout_blocks_matching_weekday_only() -> None:
    court = await create_court()
    row = CourtUnavailability(
        court_id=court.id,
        venue_id=court.venue_id,
        start_at=datetime(2024, 1, 1, 14, 0),
        end_at=datetime(2024, 1, 1, 15, 0),
        is_recurring=True,
        created_by=99,
    )
    row.days = [0]
    async with test_session() as session:
        session.add(row)
        await session.commit()

    with pytest.raises(AvailabilityConflict):
        await _book(court.id)
    booking = await _book(court.id, day=date(2024, 6, 11))
    assert booking.status is BookingStatus.CONFIRMED


class TestLostRace:
    """Both requests read a stale grid; the store decides the winner."""

    @pytest.fixture(autouse=True)
    def stale_reads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def everything_free(self, court, day):  # noqa: ANN001
            return mark_availability(slots_for_date(to_schedule(court), day), [], [], day)

        monkeypatch.setattr(SlotAvailabilityEngine, "availability_for_court", everything_free)

    @pytest.mark.asyncio
    async def test_identical_interval_hits_unique_index(self) -> None:
        court = await create_court()
        await _book(court.id)

        with pytest.raises(AvailabilityConflict, match="retry"):
            await _book(court.id, requester_id=2)

        assert await _ledger_count() == 1

    @pytest.mark.asyncio
    async def test_partial_overlap_caught_after_flush(self) -> None:
        court = await create_court()
        await _book(court.id)

        with pytest.raises(AvailabilityConflict, match="retry"):
            await _book(court.id, "15:00", "17:00", 2, requester_id=2)

        assert await _ledger_count() == 1

    @pytest.mark.asyncio
    async def test_cancelled_interval_does_not_count(self) -> None:
        court = await create_court()
        first = await _book(court.id)
        async with test_session() as session:
            row = await session.get(Booking, first.id)
            row.status = BookingStatus.CANCELLED
            await session.commit()

        second = await _book(court.id, requester_id=2)

        assert second.id != first.id
        assert await _ledger_count() == 2


@pytest.mark.asyncio
async def test_schedule_change_does_not_touch_existing_bookings() -> None:
    court = await create_court()
    booking = await _book(court.id)

    new_week = tuple(
        replace(c, start_minute=9 * 60, slot_duration_hours=2, slot_count=6, price=900.0)
        for c in default_week()
    )
    async with test_session() as session:
        repo = CourtRepository(session)
        row = await repo.get(court.id)
        repo.replace_schedule(row, new_week)
        await session.commit()

    async with test_session() as session:
        stored = await session.get(Booking, booking.id)
    assert stored.start_time == "14:00"
    assert stored.end_time == "16:00"
    assert stored.slot_duration_hours == 1
    assert stored.total_amount == 1000.0

    availability = await _availability(court.id)
    assert availability == {
        "09:00": True,
        "11:00": True,
        "13:00": False,
        "15:00": False,
        "17:00": True,
        "19:00": True,
    }


class TestConcurrentRequests:
    """Overlapping requests racing on separate connections to one database file."""

    @pytest.fixture
    async def race_session(self, tmp_path: Path) -> AsyncGenerator[async_sessionmaker, None]:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
        enforce_sqlite_foreign_keys(engine)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield async_sessionmaker(engine, expire_on_commit=False)
        await engine.dispose()

    @staticmethod
    async def _attempt(
        sessionmaker: async_sessionmaker, court_id: int, start: str, end: str, slot_count: int
    ) -> Booking:
        async with sessionmaker() as session:
            manager = BookingTransactionManager(SqlAlchemyUnitOfWork(session), PolicySettings())
            request = BookingRequest(
                court_id=court_id,
                requester_id=1,
                booking_date=MONDAY,
                start_time=start,
                end_time=end,
                slot_count=slot_count,
            )
            return await manager.create_booking(request, now=NOW)

    @pytest.mark.asyncio
    async def test_exactly_one_overlapping_request_wins(
        self, race_session: async_sessionmaker
    ) -> None:
        court = await create_court(sessionmaker=race_session)
        # every request covers 15:00-16:00
        requests = [
            ("14:00", "16:00", 2),
            ("15:00", "16:00", 1),
            ("15:00", "17:00", 2),
            ("14:00", "16:00", 2),
            ("15:00", "16:00", 1),
            ("15:00", "17:00", 2),
            ("14:00", "16:00", 2),
            ("15:00", "16:00", 1),
        ]

        results = await asyncio.gather(
            *(self._attempt(race_session, court.id, *r) for r in requests),
            return_exceptions=True,
        )

        won = [r for r in results if isinstance(r, Booking)]
        lost = [r for r in results if not isinstance(r, Booking)]
        assert len(won) == 1
        assert len(lost) == len(requests) - 1
        assert all(isinstance(e, AvailabilityConflict) for e in lost)

        async with race_session() as session:
            rows = (
                await session.scalars(
                    select(Booking).where(Booking.status == BookingStatus.CONFIRMED)
                )
            ).all()
        assert [row.id for row in rows] == [won[0].id]
        for a, b in combinations(rows, 2):
            assert a.end_minute <= b.start_minute or b.end_minute <= a.start_minute
