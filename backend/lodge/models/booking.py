"""Booking, room assignment and advisory lock models."""
from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodge.db.base import Base
from lodge.models.mixins import TimestampMixin
from lodge.models.room import Room


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.DRAFT, BookingStatus.CONFIRMED})


class Booking(TimestampMixin, Base):
    """A stay booked for one representative guest across one or more rooms."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_bookings_date_order"),
        Index("ix_bookings_dates", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False
    )
    start_date: Mapped[datetime.date] = mapped_column(nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guest_email: Mapped[str | None] = mapped_column(String(320))
    guest_phone: Mapped[str | None] = mapped_column(String(64))
    guest_org: Mapped[str | None] = mapped_column(String(200))
    pax_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_adults: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_adult_leaders: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_students: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_children: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_infants: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pax_babies: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    room_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    guest_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    addon_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(String(1024))

    rooms: Mapped[list["BookingRoom"]] = relationship(
        "BookingRoom",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class BookingRoom(TimestampMixin, Base):
    """Assignment of a room to a booking for the booking's date range."""

    __tablename__ = "booking_rooms"
    __table_args__ = (Index("ix_booking_rooms_room", "room_id"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.room_id", ondelete="RESTRICT"), nullable=False
    )
    assigned_pax: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    room_rate: Mapped[Decimal] = mapped_column(Numeric(12, 0), nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 0), nullable=False)

    booking: Mapped[Booking] = relationship("Booking", back_populates="rooms")
    room: Mapped[Room] = relationship("Room")


class BookingLock(Base):
    """Short-lived advisory claim on a room/date window by one session."""

    __tablename__ = "booking_locks"
    __table_args__ = (
        Index("ix_booking_locks_room_expiry", "room_id", "expires_at"),
        Index("ix_booking_locks_session", "session_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.room_id", ondelete="CASCADE"), nullable=False
    )
    start_date: Mapped[datetime.date] = mapped_column(nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(nullable=False)
    expires_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
