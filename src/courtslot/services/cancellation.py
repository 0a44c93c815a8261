"""Cancellation service: cutoff policy and the CONFIRMED -> CANCELLED transition."""

import logging
from datetime import datetime

from courtslot.domain.policy import PolicySettings
from courtslot.domain.timeofday import at_minute
from courtslot.errors import CutoffViolation, NotFoundError, PermissionDenied
from courtslot.models.booking import Booking
from courtslot.storage.uow import AbstractUnitOfWork

logger = logging.getLogger(__name__)


class CancellationService:
    def __init__(self, uow: AbstractUnitOfWork, policy: PolicySettings) -> None:
        self._uow = uow
        self._policy = policy

    async def cancel(
        self,
        booking_id: int,
        requester_id: int,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """Cancel a confirmed booking owned by ``requester_id``.

        The status change is a conditional update, so two racing cancels leave
        exactly one winner and the loser gets the same error as any repeat call.
        Cancelling frees the interval for later availability queries.
        """
        now = now or datetime.now()
        async with self._uow as uow:
            booking = await uow.bookings.get(booking_id)
            if booking is None:
                raise NotFoundError("Booking not found", booking_id=booking_id)
            if booking.requester_id != requester_id:
                raise PermissionDenied("You can only cancel your own bookings", booking_id=booking_id)
            if booking.status.is_terminal:
                raise self._not_cancellable(booking)

            starts_at = at_minute(booking.booking_date, booking.start_minute)
            if not self._policy.can_cancel(starts_at, now):
                raise CutoffViolation(
                    f"Bookings must be cancelled at least "
                    f"{self._policy.cancellation_cutoff_hours} hours before the start time",
                    cutoff_hours=self._policy.cancellation_cutoff_hours,
                    starts_at=starts_at.isoformat(timespec="minutes"),
                )

            if not await uow.bookings.mark_cancelled(booking.id, reason, now):
                raise self._not_cancellable(booking)

        logger.info(
            "Booking %s cancelled by requester %s (court %s, %s %s-%s)",
            booking.id,
            requester_id,
            booking.court_id,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
        )
        return booking

    @staticmethod
    def _not_cancellable(booking: Booking) -> CutoffViolation:
        return CutoffViolation("Only confirmed bookings can be cancelled", booking_id=booking.id)
