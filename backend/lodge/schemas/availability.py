"""Pydantic schemas for room availability and occupancy."""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class AvailableRoomRead(BaseModel):
    room_id: str
    name: str
    capacity: int

    model_config = ConfigDict(from_attributes=True)


class PartialAvailabilityRead(AvailableRoomRead):
    available_dates: list[datetime.date]
    conflict_dates: list[datetime.date]


class AvailabilitySuggestionRead(BaseModel):
    type: Literal["alternative_dates", "split_booking"]
    description: str
    start_date: datetime.date | None
    end_date: datetime.date | None
    room_ids: list[str]

    model_config = ConfigDict(from_attributes=True)


class AvailabilitySearchRead(BaseModel):
    """Rooms free for a whole stay, with fallbacks when none fits."""

    start_date: datetime.date
    end_date: datetime.date
    guest_count: int
    is_available: bool
    available_rooms: list[AvailableRoomRead]
    partially_available_rooms: list[PartialAvailabilityRead]
    occupancy_rate: int
    suggestions: list[AvailabilitySuggestionRead]

    model_config = ConfigDict(from_attributes=True)


class NightlyOccupancyRead(BaseModel):
    date: datetime.date
    total_rooms: int
    available_rooms: int
    occupied_room_ids: list[str]
    occupancy_rate: int

    model_config = ConfigDict(from_attributes=True)
