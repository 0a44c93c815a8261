from datetime import date, datetime

from sqlalchemy import Enum, Float, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from courtslot.database import Base
from courtslot.domain.timeofday import format_hhmm
from courtslot.enums import BookingStatus

_ACTIVE = text("status != 'cancelled'")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # No two active bookings may claim the same interval on a court.
        # Partial overlaps are caught by the post-flush check in the booking service.
        Index(
            "uq_bookings_active_interval",
            "court_id",
            "booking_date",
            "start_minute",
            "end_minute",
            unique=True,
            sqlite_where=_ACTIVE,
            postgresql_where=_ACTIVE,
        ),
        Index("ix_bookings_court_date_start", "court_id", "booking_date", "start_minute"),
        Index("ix_bookings_requester", "requester_id", "status", "booking_date"),
        Index("ix_bookings_venue_date", "venue_id", "booking_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"))
    venue_id: Mapped[int] = mapped_column(ForeignKey("venues.id"))
    requester_id: Mapped[int]
    booking_date: Mapped[date]
    start_minute: Mapped[int]
    end_minute: Mapped[int]
    slot_count: Mapped[int]
    slot_duration_hours: Mapped[int]
    total_amount: Mapped[float] = mapped_column(Float)
    # Split fixed at booking time from the commission percentage then in force
    commission_amount: Mapped[float] = mapped_column(Float, default=0.0)
    owner_earnings: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda e: [x.value for x in e],
        ),
        default=BookingStatus.CONFIRMED,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(String(500), default=None)
    cancelled_at: Mapped[datetime | None] = mapped_column(default=None)
    completed_at: Mapped[datetime | None] = mapped_column(default=None)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end_minute)
