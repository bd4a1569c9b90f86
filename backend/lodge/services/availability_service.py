"""Room availability search and nightly occupancy."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from lodge.core.config import Settings, get_settings
from lodge.core.dates import DateLike, DateRange, format_local_date, today as local_today
from lodge.core.errors import InvalidStayParameters
from lodge.services.booking_store import AssignmentRecord, BookingStore, RoomRecord

logger = logging.getLogger(__name__)

_SUGGESTION_LIMIT = 5


@dataclass(slots=True)
class PartialAvailability:
    """A room free on some nights of the stay but not all of them."""

    room_id: str
    name: str
    capacity: int
    available_dates: list[datetime.date]
    conflict_dates: list[datetime.date]


@dataclass(slots=True)
class AvailabilitySuggestion:
    type: Literal["alternative_dates", "split_booking"]
    description: str
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    room_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AvailabilitySearch:
    start_date: datetime.date
    end_date: datetime.date
    guest_count: int
    available_rooms: list[RoomRecord] = field(default_factory=list)
    partially_available_rooms: list[PartialAvailability] = field(default_factory=list)
    occupancy_rate: int = 0
    suggestions: list[AvailabilitySuggestion] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return bool(self.available_rooms)


@dataclass(slots=True)
class NightlyOccupancy:
    date: datetime.date
    total_rooms: int
    occupied_room_ids: list[str]

    @property
    def available_rooms(self) -> int:
        return self.total_rooms - len(self.occupied_room_ids)

    @property
    def occupancy_rate(self) -> int:
        return _percentage(len(self.occupied_room_ids), self.total_rooms)


class AvailabilityChecker:
    """Answer "which rooms are free" questions from the booking store.

    Store failures propagate as :class:`StoreQueryFailure`; an empty result
    always means the rooms really are free.
    """

    def __init__(
        self,
        store: BookingStore,
        *,
        settings: Settings | None = None,
        today_provider: Callable[[], datetime.date] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._today = today_provider or (
            lambda: local_today(self._settings.local_timezone)
        )

    async def search(
        self,
        start_date: DateLike,
        end_date: DateLike,
        guest_count: int,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> AvailabilitySearch:
        """Find rooms that can hold ``guest_count`` guests for the whole stay.

        When no single room fits, up to five suggestions are added: a split
        over several free rooms, then the same stay shifted earlier or later
        by up to ``AVAILABILITY_SHIFT_DAYS`` days.
        """
        if guest_count < 1:
            raise InvalidStayParameters("Guest count must be at least 1")
        stay = DateRange.parse(start_date, end_date)
        shift = max(0, self._settings.availability_shift_days)

        rooms = await self._store.list_active_rooms()
        # one query covers the stay and every shifted window
        assignments = await self._store.list_overlapping_assignments(
            [room.room_id for room in rooms],
            stay.start_date - datetime.timedelta(days=shift),
            stay.end_date + datetime.timedelta(days=shift),
            exclude_booking_id,
        )

        busy = _busy_nights(stay, assignments)
        result = AvailabilitySearch(
            start_date=stay.start_date,
            end_date=stay.end_date,
            guest_count=guest_count,
        )
        free_rooms: list[RoomRecord] = []
        for room in rooms:
            taken = busy.get(room.room_id, set())
            if not taken:
                free_rooms.append(room)
                if room.capacity >= guest_count:
                    result.available_rooms.append(room)
            elif len(taken) < stay.nights and room.capacity >= guest_count:
                nights = stay.dates()
                result.partially_available_rooms.append(
                    PartialAvailability(
                        room_id=room.room_id,
                        name=room.name,
                        capacity=room.capacity,
                        available_dates=[day for day in nights if day not in taken],
                        conflict_dates=[day for day in nights if day in taken],
                    )
                )

        occupied_nights = sum(len(nights) for nights in busy.values())
        result.occupancy_rate = _percentage(occupied_nights, len(rooms) * stay.nights)

        if not result.available_rooms:
            result.suggestions = self._suggestions(
                stay, guest_count, rooms, free_rooms, assignments, shift
            )
        logger.info(
            "Availability %s to %s for %d guest(s): %d room(s) free, %d suggestion(s)",
            format_local_date(stay.start_date),
            format_local_date(stay.end_date),
            guest_count,
            len(result.available_rooms),
            len(result.suggestions),
        )
        return result

    async def nightly_occupancy(
        self, start_date: DateLike, end_date: DateLike
    ) -> list[NightlyOccupancy]:
        """Return the occupied active rooms for each night of ``[start, end)``."""
        window = DateRange.parse(start_date, end_date)
        if window.nights > self._settings.occupancy_max_nights:
            raise InvalidStayParameters(
                f"Occupancy range cannot exceed {self._settings.occupancy_max_nights} nights"
            )
        rooms = await self._store.list_active_rooms()
        assignments = await self._store.list_overlapping_assignments(
            [room.room_id for room in rooms], window.start_date, window.end_date
        )
        busy = _busy_nights(window, assignments)
        occupancy: list[NightlyOccupancy] = []
        for day in window.dates():
            occupancy.append(
                NightlyOccupancy(
                    date=day,
                    total_rooms=len(rooms),
                    occupied_room_ids=sorted(
                        room.room_id for room in rooms if day in busy.get(room.room_id, ())
                    ),
                )
            )
        return occupancy

    def _suggestions(
        self,
        stay: DateRange,
        guest_count: int,
        rooms: Sequence[RoomRecord],
        free_rooms: Sequence[RoomRecord],
        assignments: Sequence[AssignmentRecord],
        shift: int,
    ) -> list[AvailabilitySuggestion]:
        suggestions: list[AvailabilitySuggestion] = []
        split = _split_rooms(free_rooms, guest_count)
        if split:
            suggestions.append(
                AvailabilitySuggestion(
                    type="split_booking",
                    description=(
                        f"Split across {len(split)} rooms with "
                        f"{sum(room.capacity for room in split)} beds"
                    ),
                    start_date=stay.start_date,
                    end_date=stay.end_date,
                    room_ids=[room.room_id for room in split],
                )
            )

        today = self._today()
        for offset in range(1, shift + 1):
            for days in (-offset, offset):
                window = stay.shifted(days)
                if window.start_date < today:
                    continue
                busy = _busy_nights(window, assignments)
                fitting = [
                    room.room_id
                    for room in rooms
                    if room.capacity >= guest_count and not busy.get(room.room_id)
                ]
                if not fitting:
                    continue
                direction = "earlier" if days < 0 else "later"
                suggestions.append(
                    AvailabilitySuggestion(
                        type="alternative_dates",
                        description=(
                            f"{offset} day(s) {direction}: "
                            f"{format_local_date(window.start_date)} to "
                            f"{format_local_date(window.end_date)}"
                        ),
                        start_date=window.start_date,
                        end_date=window.end_date,
                        room_ids=fitting,
                    )
                )
                if len(suggestions) >= _SUGGESTION_LIMIT:
                    return suggestions
        return suggestions


def _busy_nights(
    stay: DateRange, assignments: Sequence[AssignmentRecord]
) -> dict[str, set[datetime.date]]:
    busy: dict[str, set[datetime.date]] = defaultdict(set)
    for assignment in assignments:
        start = max(stay.start_date, assignment.start_date)
        end = min(stay.end_date, assignment.end_date)
        if start < end:
            busy[assignment.room_id].update(DateRange(start, end).dates())
    return busy


def _split_rooms(
    free_rooms: Sequence[RoomRecord], guest_count: int
) -> list[RoomRecord]:
    """Pick the fewest free rooms, largest first, that together hold everyone."""
    chosen: list[RoomRecord] = []
    beds = 0
    for room in sorted(free_rooms, key=lambda item: (-item.capacity, item.room_id)):
        if beds >= guest_count:
            break
        chosen.append(room)
        beds += room.capacity
    if beds < guest_count or len(chosen) < 2:
        return []
    return chosen


def _percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    ratio = Decimal(part * 100) / Decimal(whole)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
