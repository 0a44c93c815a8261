"""Court API routes: court lifecycle, weekly schedule and blackout windows."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.api.deps import get_requester_id
from courtslot.config import get_settings
from courtslot.database import get_db
from courtslot.domain.schedule import default_week, validate_weekly_schedule
from courtslot.enums import CourtStatus, VenueStatus
from courtslot.errors import NotFoundError
from courtslot.models.unavailability import CourtUnavailability
from courtslot.models.venue import Court, Venue
from courtslot.schemas.court import CourtCreate, CourtRead, CourtUpdate, ScheduleUpdate
from courtslot.schemas.unavailability import UnavailabilityCreate, UnavailabilityRead
from courtslot.storage.repositories import CourtRepository, UnavailabilityRepository

router = APIRouter(prefix="/api", tags=["courts"])
logger = logging.getLogger(__name__)


async def _get_active_court(repo: CourtRepository, court_id: int) -> Court:
    court = await repo.get(court_id)
    if court is None or not court.is_active:
        raise NotFoundError("Court not found", court_id=court_id)
    return court


async def _get_venue(repo: CourtRepository, venue_id: int) -> Venue:
    venue = await repo.get_venue(venue_id)
    if venue is None or venue.status is VenueStatus.DEACTIVATED:
        raise NotFoundError("Venue not found", venue_id=venue_id)
    return venue


async def _get_venue_court(repo: CourtRepository, venue_id: int, court_id: int) -> Court:
    await _get_venue(repo, venue_id)
    court = await _get_active_court(repo, court_id)
    if court.venue_id != venue_id:
        raise NotFoundError("Court not found", court_id=court_id)
    return court


@router.post("/venues/{venue_id}/courts", response_model=CourtRead, status_code=201)
async def create_court(
    venue_id: int,
    body: CourtCreate,
    session: AsyncSession = Depends(get_db),
) -> Court:
    """Create a court. Without a schedule it opens daily 10:00-21:00 in 1-hour slots."""
    repo = CourtRepository(session)
    await _get_venue(repo, venue_id)

    default_price = body.default_price
    if default_price is None:
        default_price = get_settings().default_court_price

    if body.schedule:
        configs = validate_weekly_schedule(c.to_domain() for c in body.schedule)
    else:
        configs = default_week(default_price)

    court = Court(
        venue_id=venue_id,
        name=body.name,
        sport_type=body.sport_type,
        description=body.description,
        default_price=default_price,
    )
    repo.add(court)
    repo.replace_schedule(court, configs)
    await session.commit()
    await session.refresh(court)
    logger.info("Created court %s '%s' at venue %s", court.id, court.name, venue_id)
    return court


@router.get("/venues/{venue_id}/courts", response_model=list[CourtRead])
async def list_courts(
    venue_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[Court]:
    repo = CourtRepository(session)
    await _get_venue(repo, venue_id)
    return await repo.for_venue(venue_id)


@router.patch("/venues/{venue_id}/courts/{court_id}", response_model=CourtRead)
async def update_court(
    venue_id: int,
    court_id: int,
    body: CourtUpdate,
    session: AsyncSession = Depends(get_db),
) -> Court:
    """Update name, sport, description or default price.

    A new default price only affects slots priced after the change.
    """
    repo = CourtRepository(session)
    court = await _get_venue_court(repo, venue_id, court_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(court, field, value)
    await session.commit()
    await session.refresh(court)
    logger.info("Updated court %s at venue %s", court_id, venue_id)
    return court


@router.delete("/venues/{venue_id}/courts/{court_id}", status_code=204)
async def deactivate_court(
    venue_id: int,
    court_id: int,
    session: AsyncSession = Depends(get_db),
) -> None:
    """Soft delete: the court stops taking bookings, its history stays."""
    repo = CourtRepository(session)
    court = await _get_venue_court(repo, venue_id, court_id)
    court.status = CourtStatus.INACTIVE
    await session.commit()
    logger.info("Deactivated court %s at venue %s", court_id, venue_id)


@router.get("/courts/{court_id}", response_model=CourtRead)
async def get_court(
    court_id: int,
    session: AsyncSession = Depends(get_db),
) -> Court:
    return await _get_active_court(CourtRepository(session), court_id)


@router.put("/courts/{court_id}/schedule", response_model=CourtRead)
async def update_schedule(
    court_id: int,
    body: ScheduleUpdate,
    session: AsyncSession = Depends(get_db),
) -> Court:
    """Replace the weekly schedule.

    Only future slot generation changes; existing bookings keep their times
    and amounts.
    """
    repo = CourtRepository(session)
    court = await _get_active_court(repo, court_id)
    configs = validate_weekly_schedule(c.to_domain() for c in body.schedule)
    repo.replace_schedule(court, configs)
    await session.commit()
    await session.refresh(court)
    logger.info("Replaced weekly schedule of court %s", court_id)
    return court


@router.post(
    "/courts/{court_id}/unavailability",
    response_model=UnavailabilityRead,
    status_code=201,
)
async def create_unavailability(
    court_id: int,
    body: UnavailabilityCreate,
    requester_id: int = Depends(get_requester_id),
    session: AsyncSession = Depends(get_db),
) -> CourtUnavailability:
    """Block a one-off datetime range or a recurring daily window.

    Existing bookings inside the window are left as they are.
    """
    court = await _get_active_court(CourtRepository(session), court_id)
    row = CourtUnavailability(
        court_id=court.id,
        venue_id=court.venue_id,
        start_at=body.start_at,
        end_at=body.end_at,
        is_recurring=body.is_recurring,
        reason=body.reason,
        description=body.description,
        created_by=requester_id,
    )
    row.days = body.recurring_days if body.is_recurring else []
    UnavailabilityRepository(session).add(row)
    await session.commit()
    await session.refresh(row)
    logger.info(
        "Court %s unavailable %s to %s (%s, recurring=%s)",
        court_id,
        row.start_at,
        row.end_at,
        row.reason.value,
        row.is_recurring,
    )
    return row


@router.get("/courts/{court_id}/unavailability", response_model=list[UnavailabilityRead])
async def list_unavailability(
    court_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[CourtUnavailability]:
    await _get_active_court(CourtRepository(session), court_id)
    return await UnavailabilityRepository(session).for_court(court_id)


@router.delete("/courts/{court_id}/unavailability/{unavailability_id}", status_code=204)
async def delete_unavailability(
    court_id: int,
    unavailability_id: int,
    session: AsyncSession = Depends(get_db),
) -> None:
    repo = UnavailabilityRepository(session)
    row = await repo.get(unavailability_id)
    if row is None or row.court_id != court_id:
        raise NotFoundError(
            "Unavailability record not found", unavailability_id=unavailability_id
        )

    await repo.delete(row)
    await session.commit()
    logger.info("Removed unavailability %s from court %s", unavailability_id, court_id)
