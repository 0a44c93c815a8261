"""Booking policy: advance window, cancellation cutoff and commission."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from courtslot.config import Settings
from courtslot.domain.timeofday import at_minute, format_hhmm
from courtslot.errors import PolicyViolation


@dataclass(frozen=True)
class PolicySettings:
    commission_pct: float = 10.0
    min_advance_hours: int = 0
    max_advance_days: int = 7
    cancellation_cutoff_hours: int = 2

    @classmethod
    def from_settings(cls, settings: Settings) -> "PolicySettings":
        return cls(
            commission_pct=settings.commission_pct,
            min_advance_hours=settings.min_advance_hours,
            max_advance_days=settings.max_advance_days,
            cancellation_cutoff_hours=settings.cancellation_cutoff_hours,
        )

    def earliest_start(self, now: datetime) -> datetime:
        return now + timedelta(hours=self.min_advance_hours)

    def latest_date(self, now: datetime) -> date:
        return now.date() + timedelta(days=self.max_advance_days)

    def is_date_allowed(self, booking_date: date, start_minute: int, now: datetime) -> bool:
        """True if a booking starting at ``start_minute`` on ``booking_date`` is bookable now."""
        start_at = at_minute(booking_date, start_minute)
        return start_at >= self.earliest_start(now) and booking_date <= self.latest_date(now)

    def check_booking_window(self, booking_date: date, start_minute: int, now: datetime) -> None:
        """Raise ``PolicyViolation`` explaining why ``is_date_allowed`` said no."""
        if self.is_date_allowed(booking_date, start_minute, now):
            return
        if booking_date > self.latest_date(now):
            raise PolicyViolation(
                f"Bookings can only be made up to {self.max_advance_days} days in advance",
                max_advance_days=self.max_advance_days,
                latest_date=self.latest_date(now).isoformat(),
            )
        if self.min_advance_hours:
            message = f"Bookings must be made at least {self.min_advance_hours} hours in advance"
        else:
            message = "Booking start time is in the past"
        raise PolicyViolation(
            message,
            min_advance_hours=self.min_advance_hours,
            requested=f"{booking_date.isoformat()} {format_hhmm(start_minute)}",
        )

    def can_cancel(self, start_at: datetime, now: datetime) -> bool:
        return now <= start_at - timedelta(hours=self.cancellation_cutoff_hours)

    def commission(self, amount: float) -> float:
        return round(amount * self.commission_pct / 100, 2)

    def owner_earnings(self, amount: float) -> float:
        return round(amount - self.commission(amount), 2)
