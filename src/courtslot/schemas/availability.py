from datetime import date

from pydantic import BaseModel


class SlotRead(BaseModel):
    start_time: str
    end_time: str
    price: float
    is_available: bool

    model_config = {"from_attributes": True}


class DayAvailabilityRead(BaseModel):
    day: date
    slots: list[SlotRead]
