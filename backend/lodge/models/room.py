"""Room inventory models."""
from __future__ import annotations

import enum
from decimal import Decimal

from sqlalchemy import Boolean, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from lodge.db.base import Base
from lodge.models.mixins import TimestampMixin


class RoomUsageType(str, enum.Enum):
    """How a room is let: shared dormitory style or private."""

    SHARED = "shared"
    PRIVATE = "private"


class RoomType(str, enum.Enum):
    """Room size classes used by the rate card."""

    LARGE = "large"
    MEDIUM_A = "medium_a"
    MEDIUM_B = "medium_b"
    SMALL_A = "small_a"
    SMALL_B = "small_b"
    SMALL_C = "small_c"


class Room(TimestampMixin, Base):
    """A bookable room with its flat nightly rate."""

    __tablename__ = "rooms"

    room_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    floor: Mapped[str] = mapped_column(String(32), nullable=False, default="1")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    room_type: Mapped[RoomType] = mapped_column(Enum(RoomType), nullable=False)
    room_rate: Mapped[Decimal] = mapped_column(Numeric(12, 0), nullable=False)
    usage_type: Mapped[RoomUsageType] = mapped_column(
        Enum(RoomUsageType), default=RoomUsageType.SHARED, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(512))
