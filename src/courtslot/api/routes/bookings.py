"""Booking API routes: create, inspect and cancel reservations."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courtslot.api.deps import get_policy, get_requester_id
from courtslot.database import get_db
from courtslot.domain.policy import PolicySettings
from courtslot.enums import BookingStatus
from courtslot.errors import NotFoundError, PermissionDenied
from courtslot.models.booking import Booking
from courtslot.schemas.booking import BookingCancel, BookingCreate, BookingRead
from courtslot.services.booking import BookingRequest, BookingTransactionManager
from courtslot.services.cancellation import CancellationService
from courtslot.storage.repositories import BookingRepository
from courtslot.storage.uow import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api", tags=["bookings"])


@router.post("/bookings", response_model=BookingRead, status_code=201)
async def create_booking(
    body: BookingCreate,
    requester_id: int = Depends(get_requester_id),
    policy: PolicySettings = Depends(get_policy),
    session: AsyncSession = Depends(get_db),
) -> Booking:
    """Reserve one to four consecutive slots.

    A 409 means the slots were taken (possibly by a request that committed a
    moment earlier); fetch availability again before retrying.
    """
    manager = BookingTransactionManager(SqlAlchemyUnitOfWork(session), policy)
    return await manager.create_booking(
        BookingRequest(
            court_id=body.court_id,
            requester_id=requester_id,
            booking_date=body.booking_date,
            start_time=body.start_time,
            end_time=body.end_time,
            slot_count=body.slot_count,
        )
    )


@router.get("/bookings/me", response_model=list[BookingRead])
async def list_my_bookings(
    upcoming: bool = False,
    past: bool = False,
    status: BookingStatus | None = None,
    requester_id: int = Depends(get_requester_id),
    session: AsyncSession = Depends(get_db),
) -> list[Booking]:
    """The requester's bookings; `upcoming` and `past` take precedence over `status`."""
    return await BookingRepository(session).for_requester(
        requester_id,
        today=date.today(),
        upcoming=upcoming,
        past=past,
        status=status,
    )


@router.get("/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int,
    requester_id: int = Depends(get_requester_id),
    session: AsyncSession = Depends(get_db),
) -> Booking:
    booking = await BookingRepository(session).get(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found", booking_id=booking_id)
    if booking.requester_id != requester_id:
        raise PermissionDenied("You do not have permission to view this booking")
    return booking


@router.patch("/bookings/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: int,
    body: BookingCancel | None = None,
    requester_id: int = Depends(get_requester_id),
    policy: PolicySettings = Depends(get_policy),
    session: AsyncSession = Depends(get_db),
) -> Booking:
    service = CancellationService(SqlAlchemyUnitOfWork(session), policy)
    reason = body.reason if body else None
    return await service.cancel(booking_id, requester_id, reason)


@router.get("/venues/{venue_id}/bookings", response_model=list[BookingRead])
async def list_venue_bookings(
    venue_id: int,
    court_id: int | None = None,
    on_date: date | None = Query(default=None, alias="date"),
    status: BookingStatus | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[Booking]:
    """Bookings at a venue, ordered by date and start time."""
    return await BookingRepository(session).for_venue(
        venue_id, court_id=court_id, on_date=on_date, status=status
    )
