"""Reconcile the weekly template against bookings and blackouts."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from courtslot.domain.schedule import CandidateSlot
from courtslot.domain.timeofday import format_hhmm
from courtslot.domain.unavailability import Blackout, is_blocked, overlaps


@dataclass(frozen=True)
class BookedInterval:
    start_minute: int
    end_minute: int


@dataclass(frozen=True)
class Slot:
    start_minute: int
    end_minute: int
    price: float
    is_available: bool

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end_minute)


def mark_availability(
    candidates: Sequence[CandidateSlot],
    booked: Iterable[BookedInterval],
    blackouts: Iterable[Blackout],
    day: date,
) -> list[Slot]:
    """Flag each candidate slot available or not, keeping every slot.

    ``booked`` must contain only non-cancelled bookings for ``day``. A slot is
    unavailable if it overlaps any booking, otherwise if any blackout covers it.
    """
    booked = list(booked)
    blackouts = list(blackouts)
    slots = []
    for candidate in sorted(candidates, key=lambda c: c.start_minute):
        available = not any(
            overlaps(candidate.start_minute, candidate.end_minute, b.start_minute, b.end_minute)
            for b in booked
        )
        if available and is_blocked(blackouts, day, candidate.start_minute, candidate.end_minute):
            available = False
        slots.append(
            Slot(
                start_minute=candidate.start_minute,
                end_minute=candidate.end_minute,
                price=candidate.price,
                is_available=available,
            )
        )
    return slots


def consecutive_groups(slots: Sequence[Slot], count: int) -> list[list[Slot]]:
    """Every window of ``count`` available slots that are truly back to back."""
    if count < 1:
        return []
    groups = []
    for i in range(len(slots) - count + 1):
        group = list(slots[i : i + count])
        if not all(s.is_available for s in group):
            continue
        if any(prev.end_minute != nxt.start_minute for prev, nxt in zip(group, group[1:])):
            continue
        groups.append(group)
    return groups


def covering_slots(slots: Sequence[Slot], start_minute: int, end_minute: int) -> list[Slot] | None:
    """Slots that exactly tile ``[start_minute, end_minute)``, or None if they don't."""
    covering = [s for s in slots if start_minute <= s.start_minute and s.end_minute <= end_minute]
    if not covering or covering[0].start_minute != start_minute:
        return None
    if covering[-1].end_minute != end_minute:
        return None
    if any(prev.end_minute != nxt.start_minute for prev, nxt in zip(covering, covering[1:])):
        return None
    return covering
