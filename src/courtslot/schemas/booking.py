from datetime import date, datetime

from pydantic import BaseModel, Field

from courtslot.enums import BookingStatus
from courtslot.schemas.court import HHMM_PATTERN


class BookingCreate(BaseModel):
    court_id: int
    booking_date: date
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    slot_count: int


class BookingCancel(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class BookingRead(BaseModel):
    id: int
    court_id: int
    venue_id: int
    requester_id: int
    booking_date: date
    start_time: str
    end_time: str
    slot_count: int
    slot_duration_hours: int
    total_amount: float
    commission_amount: float
    owner_earnings: float
    status: BookingStatus
    cancellation_reason: str | None
    cancelled_at: datetime | None
    completed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
