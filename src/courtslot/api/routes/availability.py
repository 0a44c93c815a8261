"""Availability API routes: per-date slot grids for a court."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.config import get_settings
from courtslot.database import get_db
from courtslot.schemas.availability import DayAvailabilityRead, SlotRead
from courtslot.services.availability import SlotAvailabilityEngine

router = APIRouter(prefix="/api/courts", tags=["availability"])


def _engine(session: AsyncSession) -> SlotAvailabilityEngine:
    return SlotAvailabilityEngine.from_session(
        session, max_days=get_settings().max_availability_days
    )


@router.get("/{court_id}/availability", response_model=list[SlotRead])
async def get_availability(
    court_id: int,
    on_date: date = Query(alias="date"),
    session: AsyncSession = Depends(get_db),
) -> list[SlotRead]:
    """Every slot of the day in order, booked and blocked ones included."""
    slots = await _engine(session).availability(court_id, on_date)
    return [SlotRead.model_validate(s) for s in slots]


@router.get("/{court_id}/availability/range", response_model=list[DayAvailabilityRead])
async def get_availability_range(
    court_id: int,
    start_date: date | None = None,
    days: int = Query(default=3, ge=1),
    session: AsyncSession = Depends(get_db),
) -> list[DayAvailabilityRead]:
    """Slot grids for consecutive days starting at `start_date` (default: today)."""
    by_day = await _engine(session).availability_for_days(
        court_id, start_date or date.today(), days
    )
    return [
        DayAvailabilityRead(day=day, slots=[SlotRead.model_validate(s) for s in slots])
        for day, slots in by_day.items()
    ]


@router.get("/{court_id}/availability/consecutive", response_model=list[list[SlotRead]])
async def get_consecutive_slots(
    court_id: int,
    on_date: date = Query(alias="date"),
    count: int = Query(default=2, ge=1, le=4),
    session: AsyncSession = Depends(get_db),
) -> list[list[SlotRead]]:
    """Runs of `count` back-to-back free slots, for multi-slot bookings."""
    groups = await _engine(session).consecutive_groups(court_id, on_date, count)
    return [[SlotRead.model_validate(s) for s in group] for group in groups]
