"""Pydantic schemas for bookings and conflict validation."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from lodge.models import BookingStatus
from lodge.schemas.pricing import AddonSelection, GuestCountIn


class RoomWindow(BaseModel):
    """Rooms and dates under validation; date order is checked by the validator."""

    room_ids: list[str] = Field(min_length=1)
    start_date: datetime.date
    end_date: datetime.date


class ConflictCheckRequest(RoomWindow):
    exclude_booking_id: uuid.UUID | None = None


class BookingValidateRequest(RoomWindow):
    guest_count: int
    guest_name: str | None = None
    exclude_booking_id: uuid.UUID | None = None


class LockRequest(RoomWindow):
    session_id: str = Field(min_length=1, max_length=128)


class ResolveRequest(RoomWindow):
    original_booking_id: uuid.UUID | None = None
    guest_count: int | None = Field(default=None, ge=0)


class BookingCreate(RoomWindow):
    """Payload for committing a booking."""

    guests: GuestCountIn
    guest_name: str
    guest_email: str | None = None
    guest_phone: str | None = None
    guest_org: str | None = None
    notes: str | None = Field(default=None, max_length=1024)
    addons: list[AddonSelection] = Field(default_factory=list)
    status: BookingStatus = BookingStatus.CONFIRMED


class BookingConflictRead(BaseModel):
    room_id: str
    conflicting_booking_id: str
    conflicting_guest_name: str
    overlap_start: datetime.date
    overlap_end: datetime.date
    overlap_nights: int

    model_config = ConfigDict(from_attributes=True)


class BookingValidationRead(BaseModel):
    is_valid: bool
    can_proceed: bool
    conflicts: list[BookingConflictRead]
    warnings: list[str]
    errors: list[str]

    model_config = ConfigDict(from_attributes=True)


class RealtimeUpdateRead(BaseModel):
    success: bool
    conflicts: list[BookingConflictRead]
    updated_at: datetime.datetime
    message: str
    poll_interval_seconds: int

    model_config = ConfigDict(from_attributes=True)


class LockRead(BaseModel):
    lock_acquired: bool
    lock_expires_at: datetime.datetime | None = None
    other_active_sessions: int

    model_config = ConfigDict(from_attributes=True)


class ResolutionOptionRead(BaseModel):
    type: Literal["alternative_rooms", "alternative_dates"]
    description: str
    data: dict[str, Any]

    model_config = ConfigDict(from_attributes=True)


class ConflictResolutionRead(BaseModel):
    has_new_conflicts: bool
    conflicts: list[BookingConflictRead]
    resolution_options: list[ResolutionOptionRead]

    model_config = ConfigDict(from_attributes=True)


class BookingRoomRead(BaseModel):
    room_id: str
    assigned_pax: int
    room_rate: Decimal
    nights: int
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingRead(BaseModel):
    """Serialized booking representation."""

    id: uuid.UUID
    status: BookingStatus
    start_date: datetime.date
    end_date: datetime.date
    nights: int
    guest_name: str
    guest_email: str | None = None
    guest_phone: str | None = None
    guest_org: str | None = None
    pax_total: int
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total_amount: Decimal
    notes: str | None = None
    rooms: list[BookingRoomRead] = Field(default_factory=list)
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
