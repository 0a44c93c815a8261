from courtslot.schemas.availability import DayAvailabilityRead, SlotRead
from courtslot.schemas.booking import BookingCancel, BookingCreate, BookingRead
from courtslot.schemas.court import (
    CourtCreate,
    CourtRead,
    CourtUpdate,
    DayConfigIn,
    DayConfigRead,
    ScheduleUpdate,
)
from courtslot.schemas.unavailability import UnavailabilityCreate, UnavailabilityRead

__all__ = [
    "BookingCancel",
    "BookingCreate",
    "BookingRead",
    "CourtCreate",
    "CourtRead",
    "CourtUpdate",
    "DayAvailabilityRead",
    "DayConfigIn",
    "DayConfigRead",
    "ScheduleUpdate",
    "SlotRead",
    "UnavailabilityCreate",
    "UnavailabilityRead",
]
