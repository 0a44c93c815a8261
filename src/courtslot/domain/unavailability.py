"""Owner-declared blackout windows and the overlap predicate."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TypeVar

from courtslot.domain.timeofday import MINUTES_PER_DAY, at_minute, format_hhmm, minute_of
from courtslot.enums import DayOfWeek, UnavailabilityReason

T = TypeVar("T", int, datetime)


def overlaps(a_start: T, a_end: T, b_start: T, b_end: T) -> bool:
    """Half-open overlap: ``[a_start, a_end)`` and ``[b_start, b_end)`` share time."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class Blackout:
    start_at: datetime
    end_at: datetime
    is_recurring: bool = False
    recurring_days: frozenset[DayOfWeek] = field(default_factory=frozenset)
    reason: UnavailabilityReason = UnavailabilityReason.MAINTENANCE
    id: int | None = None

    def daily_window(self) -> tuple[int, int]:
        """Time-of-day window of a recurring blackout, in minutes."""
        start = minute_of(self.start_at)
        end = minute_of(self.end_at)
        if end <= start:
            # e.g. 22:00 -> 00:00 means "until midnight"
            end = MINUTES_PER_DAY
        return start, end

    def blocks(self, day: date, start_minute: int, end_minute: int) -> bool:
        if self.is_recurring:
            if DayOfWeek.of(day) not in self.recurring_days:
                return False
            window_start, window_end = self.daily_window()
            return overlaps(start_minute, end_minute, window_start, window_end)
        return overlaps(
            at_minute(day, start_minute),
            at_minute(day, end_minute),
            self.start_at,
            self.end_at,
        )

    def describe(self) -> str:
        if self.is_recurring:
            start, end = self.daily_window()
            days = ", ".join(d.label for d in sorted(self.recurring_days))
            return f"{format_hhmm(start)}-{format_hhmm(end)} every {days} ({self.reason.value})"
        return (
            f"{self.start_at.isoformat(timespec='minutes')} to "
            f"{self.end_at.isoformat(timespec='minutes')} ({self.reason.value})"
        )


def blocking_windows(
    blackouts: Iterable[Blackout], day: date, start_minute: int, end_minute: int
) -> list[Blackout]:
    return [b for b in blackouts if b.blocks(day, start_minute, end_minute)]


def is_blocked(
    blackouts: Iterable[Blackout], day: date, start_minute: int, end_minute: int
) -> bool:
    return any(b.blocks(day, start_minute, end_minute) for b in blackouts)
