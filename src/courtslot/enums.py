"""Closed enumerations shared by the domain, storage and API layers."""

import enum
from datetime import date


class DayOfWeek(enum.IntEnum):
    """Day of week numbered like ``date.weekday()`` (Monday is 0)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> "DayOfWeek":
        return cls(day.weekday())

    @classmethod
    def parse(cls, value: "int | str | DayOfWeek") -> "DayOfWeek":
        """Accept a day number (0-6) or a lowercase day name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and not value.isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown day of week: {value!r}") from None
        return cls(int(value))

    @property
    def label(self) -> str:
        return self.name.lower()


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self is not BookingStatus.CONFIRMED


class VenueStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"


class CourtStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UnavailabilityReason(str, enum.Enum):
    MAINTENANCE = "maintenance"
    PRIVATE_EVENT = "private_event"
    HOLIDAY = "holiday"
    OTHER = "other"


SLOT_DURATIONS_HOURS = (1, 2, 3, 4)
