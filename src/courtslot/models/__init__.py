from courtslot.models.booking import Booking
from courtslot.models.unavailability import CourtUnavailability
from courtslot.models.venue import Court, CourtDayConfig, Venue

__all__ = [
    "Booking",
    "Court",
    "CourtDayConfig",
    "CourtUnavailability",
    "Venue",
]
