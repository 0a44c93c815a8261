"""Weekly schedule template and slot generation.

A court publishes one ``DayConfig`` per day of week. Slots for a concrete date
are generated from the config in force for that date's weekday: ``slot_count``
back-to-back intervals of ``slot_duration_hours`` starting at ``start_minute``.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from courtslot.domain.timeofday import MINUTES_PER_DAY, format_hhmm
from courtslot.enums import SLOT_DURATIONS_HOURS, DayOfWeek
from courtslot.errors import ValidationError

MAX_SLOTS_PER_DAY = 24

DEFAULT_START_MINUTE = 10 * 60
DEFAULT_SLOT_COUNT = 11  # 10:00 to 21:00


@dataclass(frozen=True)
class DayConfig:
    day_of_week: DayOfWeek
    is_open: bool = True
    start_minute: int = DEFAULT_START_MINUTE
    slot_duration_hours: int = 1
    slot_count: int = DEFAULT_SLOT_COUNT
    price: float | None = None

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.slot_duration_hours * 60 * self.slot_count


@dataclass(frozen=True)
class CandidateSlot:
    start_minute: int
    end_minute: int
    price: float

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end_minute)


@dataclass(frozen=True)
class WeeklySchedule:
    days: tuple[DayConfig, ...]
    default_price: float = 0.0

    def config_for(self, day: date) -> DayConfig | None:
        weekday = DayOfWeek.of(day)
        for config in self.days:
            if config.day_of_week == weekday:
                return config
        return None

    def price_for(self, config: DayConfig) -> float:
        return config.price if config.price is not None else self.default_price


def validate_weekly_schedule(configs: Iterable[DayConfig]) -> tuple[DayConfig, ...]:
    """Check a full week of configs and return them ordered Monday first.

    Raises:
        ValidationError: naming the offending day.
    """
    configs = tuple(configs)
    if len(configs) != 7:
        raise ValidationError(
            "Must provide configurations for all 7 days", days_provided=len(configs)
        )

    seen: set[DayOfWeek] = set()
    for config in configs:
        day = config.day_of_week.label
        if config.day_of_week in seen:
            raise ValidationError(f"Duplicate day configuration found: {day}", day=day)
        seen.add(config.day_of_week)

        if not config.is_open:
            continue
        if config.slot_duration_hours not in SLOT_DURATIONS_HOURS:
            raise ValidationError(
                f"Invalid slot duration for {day}: must be one of {list(SLOT_DURATIONS_HOURS)} hours",
                day=day,
            )
        if not 1 <= config.slot_count <= MAX_SLOTS_PER_DAY:
            raise ValidationError(
                f"Number of slots for {day} must be between 1 and {MAX_SLOTS_PER_DAY}", day=day
            )
        if config.price is not None and config.price < 0:
            raise ValidationError(f"Price for {day} cannot be negative", day=day)
        if not 0 <= config.start_minute < MINUTES_PER_DAY:
            raise ValidationError(f"Invalid start time for {day}", day=day)
        if config.end_minute > MINUTES_PER_DAY:
            raise ValidationError(
                f"Invalid configuration for {day}: last slot ends at "
                f"{config.end_minute // 60}:{config.end_minute % 60:02d}, past 24:00",
                day=day,
            )

    return tuple(sorted(configs, key=lambda c: c.day_of_week))


def default_week(price: float | None = None) -> tuple[DayConfig, ...]:
    return tuple(DayConfig(day_of_week=day, price=price) for day in DayOfWeek)


def slots_for_date(schedule: WeeklySchedule, day: date) -> list[CandidateSlot]:
    """Generate the candidate slots for ``day``; empty if closed or unconfigured."""
    config = schedule.config_for(day)
    if config is None or not config.is_open:
        return []

    price = schedule.price_for(config)
    step = config.slot_duration_hours * 60
    return [
        CandidateSlot(
            start_minute=config.start_minute + i * step,
            end_minute=config.start_minute + (i + 1) * step,
            price=price,
        )
        for i in range(config.slot_count)
    ]


def operating_window(schedule: WeeklySchedule, day: date) -> tuple[int, int] | None:
    config = schedule.config_for(day)
    if config is None or not config.is_open:
        return None
    return config.start_minute, config.end_minute
