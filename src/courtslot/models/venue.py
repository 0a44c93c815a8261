from datetime import datetime

from sqlalchemy import Enum, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from courtslot.database import Base
from courtslot.domain.timeofday import format_hhmm
from courtslot.enums import CourtStatus, DayOfWeek, VenueStatus


def _values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


class Venue(Base):
    __tablename__ = "venues"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    owner_id: Mapped[int]
    status: Mapped[VenueStatus] = mapped_column(
        Enum(VenueStatus, name="venue_status", values_callable=_values),
        default=VenueStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    @property
    def is_bookable(self) -> bool:
        return self.status is VenueStatus.APPROVED


class Court(Base):
    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(primary_key=True)
    venue_id: Mapped[int] = mapped_column(ForeignKey("venues.id"), index=True)
    name: Mapped[str] = mapped_column(String(50))
    sport_type: Mapped[str] = mapped_column(String(30))  # tennis, badminton, padel, ...
    description: Mapped[str | None] = mapped_column(Text, default=None)
    default_price: Mapped[float] = mapped_column(Float)
    status: Mapped[CourtStatus] = mapped_column(
        Enum(CourtStatus, name="court_status", values_callable=_values),
        default=CourtStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    day_configs: Mapped[list["CourtDayConfig"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CourtDayConfig.day_of_week",
    )

    @property
    def is_active(self) -> bool:
        return self.status is CourtStatus.ACTIVE


class CourtDayConfig(Base):
    __tablename__ = "court_day_configs"
    __table_args__ = (UniqueConstraint("court_id", "day_of_week", name="uq_court_day"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"))
    day_of_week: Mapped[int]  # 0=Monday, 6=Sunday
    is_open: Mapped[bool] = mapped_column(default=True)
    start_minute: Mapped[int] = mapped_column(default=600)  # minutes past midnight
    slot_duration_hours: Mapped[int] = mapped_column(default=1)  # 1-4
    slot_count: Mapped[int] = mapped_column(default=11)
    price: Mapped[float | None] = mapped_column(Float, default=None)

    @property
    def day(self) -> DayOfWeek:
        return DayOfWeek(self.day_of_week)

    @property
    def day_name(self) -> str:
        return self.day.label

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_minute)
