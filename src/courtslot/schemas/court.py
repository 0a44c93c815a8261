from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from courtslot.domain.schedule import DayConfig
from courtslot.domain.timeofday import parse_hhmm
from courtslot.enums import CourtStatus, DayOfWeek

HHMM_PATTERN = r"^([01]?\d|2[0-4]):[0-5]\d$"


class DayConfigIn(BaseModel):
    day_of_week: DayOfWeek
    is_open: bool = True
    start_time: str = Field(default="10:00", pattern=HHMM_PATTERN)
    slot_duration_hours: int = Field(default=1, ge=1, le=4)
    slot_count: int = Field(default=11, ge=1, le=24)
    price: float | None = Field(default=None, ge=0)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day(cls, value: object) -> DayOfWeek:
        return DayOfWeek.parse(value)  # type: ignore[arg-type]

    def to_domain(self) -> DayConfig:
        return DayConfig(
            day_of_week=self.day_of_week,
            is_open=self.is_open,
            start_minute=parse_hhmm(self.start_time),
            slot_duration_hours=self.slot_duration_hours,
            slot_count=self.slot_count,
            price=self.price,
        )


class DayConfigRead(BaseModel):
    day_of_week: int
    day_name: str
    is_open: bool
    start_time: str
    slot_duration_hours: int
    slot_count: int
    price: float | None

    model_config = {"from_attributes": True}


class CourtCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    sport_type: str = Field(max_length=30)
    description: str | None = Field(default=None, max_length=500)
    default_price: float | None = Field(default=None, ge=0)
    schedule: list[DayConfigIn] | None = None


class CourtUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    sport_type: str | None = Field(default=None, max_length=30)
    description: str | None = Field(default=None, max_length=500)
    default_price: float | None = Field(default=None, ge=0)


class ScheduleUpdate(BaseModel):
    schedule: list[DayConfigIn]


class CourtRead(BaseModel):
    id: int
    venue_id: int
    name: str
    sport_type: str
    description: str | None
    default_price: float
    status: CourtStatus
    day_configs: list[DayConfigRead]
    created_at: datetime

    model_config = {"from_attributes": True}
