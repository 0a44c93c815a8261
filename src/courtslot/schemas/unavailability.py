from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from courtslot.enums import DayOfWeek, UnavailabilityReason


class UnavailabilityCreate(BaseModel):
    start_at: datetime
    end_at: datetime
    is_recurring: bool = False
    recurring_days: list[DayOfWeek] = Field(default_factory=list)
    reason: UnavailabilityReason = UnavailabilityReason.MAINTENANCE
    description: str | None = Field(default=None, max_length=500)

    @field_validator("recurring_days", mode="before")
    @classmethod
    def _parse_days(cls, value: object) -> object:
        if isinstance(value, list):
            return [DayOfWeek.parse(v) for v in value]
        return value

    @field_validator("start_at", "end_at")
    @classmethod
    def _to_local_naive(cls, value: datetime) -> datetime:
        # Slots are naive local times; convert offsets instead of dropping them
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _check_window(self) -> "UnavailabilityCreate":
        if self.end_at <= self.start_at:
            raise ValueError("End date/time must be after start date/time")
        if self.is_recurring and not self.recurring_days:
            raise ValueError("At least one day must be selected for recurring unavailability")
        return self


class UnavailabilityRead(BaseModel):
    id: int
    court_id: int
    venue_id: int
    start_at: datetime
    end_at: datetime
    is_recurring: bool
    recurring_days: list[int] = Field(validation_alias="days")
    reason: UnavailabilityReason
    description: str | None
    created_by: int
    created_at: datetime

    model_config = {"from_attributes": True}
