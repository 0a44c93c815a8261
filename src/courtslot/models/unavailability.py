from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from courtslot.database import Base
from courtslot.enums import DayOfWeek, UnavailabilityReason


class CourtUnavailability(Base):
    __tablename__ = "court_unavailabilities"
    __table_args__ = (Index("ix_unavailability_court_range", "court_id", "start_at", "end_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"))
    venue_id: Mapped[int] = mapped_column(ForeignKey("venues.id"), index=True)
    # For recurring records only the time-of-day parts are meaningful
    start_at: Mapped[datetime]
    end_at: Mapped[datetime]
    is_recurring: Mapped[bool] = mapped_column(default=False)
    recurring_days: Mapped[str] = mapped_column(String(20), default="")  # "0,2,4"
    reason: Mapped[UnavailabilityReason] = mapped_column(
        Enum(
            UnavailabilityReason,
            name="unavailability_reason",
            values_callable=lambda e: [x.value for x in e],
        ),
        default=UnavailabilityReason.MAINTENANCE,
    )
    description: Mapped[str | None] = mapped_column(Text, default=None)
    created_by: Mapped[int]
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    @property
    def days(self) -> list[DayOfWeek]:
        if not self.recurring_days:
            return []
        return [DayOfWeek(int(d)) for d in self.recurring_days.split(",")]

    @days.setter
    def days(self, value: list[DayOfWeek]) -> None:
        self.recurring_days = ",".join(str(int(d)) for d in sorted(set(value)))
