"""Double-booking detection, capacity checks and advisory booking locks."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from lodge.core.config import Settings, get_settings
from lodge.core.dates import (
    DateLike,
    DateRange,
    format_local_date,
    overlap_window,
    parse_local_date,
    today as local_today,
)
from lodge.core.errors import InvalidStayParameters, StoreQueryFailure
from lodge.services.booking_store import BookingStore, RoomRecord

logger = logging.getLogger(__name__)

CONFLICT_ERROR = "Overlapping booking detected"


@dataclass(slots=True)
class BookingConflict:
    room_id: str
    conflicting_booking_id: str
    conflicting_guest_name: str
    overlap_start: datetime.date
    overlap_end: datetime.date
    overlap_nights: int


@dataclass(slots=True)
class BookingValidation:
    """Outcome of a validation call; ``can_proceed`` gates the commit."""

    is_valid: bool
    conflicts: list[BookingConflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def can_proceed(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class RealtimeUpdateResult:
    success: bool
    conflicts: list[BookingConflict]
    updated_at: datetime.datetime
    message: str


@dataclass(slots=True)
class LockResult:
    lock_acquired: bool
    lock_expires_at: datetime.datetime | None
    other_active_sessions: int


@dataclass(slots=True)
class ResolutionOption:
    type: Literal["alternative_rooms", "alternative_dates"]
    description: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ConflictResolution:
    has_new_conflicts: bool
    conflicts: list[BookingConflict] = field(default_factory=list)
    resolution_options: list[ResolutionOption] = field(default_factory=list)


@dataclass(slots=True)
class BookingCandidate:
    """Stay details checked right before a booking is committed."""

    room_ids: list[str]
    start_date: DateLike
    end_date: DateLike
    guest_count: int
    guest_name: str | None = None


class BookingConflictValidator:
    """Validate booking candidates against the persistent store.

    Every call is one-shot. Store failures are reported as validation errors
    so a failed query can never be mistaken for a clear calendar.
    """

    def __init__(
        self,
        store: BookingStore,
        *,
        settings: Settings | None = None,
        today_provider: Callable[[], datetime.date] | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._today = today_provider or (
            lambda: local_today(self._settings.local_timezone)
        )
        self._clock = clock or (lambda: datetime.datetime.now(datetime.UTC))

    async def validate_booking_exclusively(
        self,
        room_ids: Sequence[str],
        start_date: DateLike,
        end_date: DateLike,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> BookingValidation:
        if not room_ids:
            return BookingValidation(
                is_valid=False, errors=["At least one room must be selected"]
            )
        try:
            stay = DateRange.parse(start_date, end_date)
        except InvalidStayParameters as exc:
            return BookingValidation(is_valid=False, errors=[str(exc)])

        try:
            assignments = await self._store.list_overlapping_assignments(
                list(room_ids), stay.start_date, stay.end_date, exclude_booking_id
            )
        except StoreQueryFailure as exc:
            logger.exception("Overlap check failed for rooms %s", ", ".join(room_ids))
            return BookingValidation(is_valid=False, errors=[str(exc)])

        conflicts: list[BookingConflict] = []
        for assignment in assignments:
            window = overlap_window(
                stay.start_date,
                stay.end_date,
                assignment.start_date,
                assignment.end_date,
            )
            if window is None:
                continue
            overlap_start, overlap_end, nights = window
            conflicts.append(
                BookingConflict(
                    room_id=assignment.room_id,
                    conflicting_booking_id=str(assignment.booking_id),
                    conflicting_guest_name=assignment.guest_name,
                    overlap_start=overlap_start,
                    overlap_end=overlap_end,
                    overlap_nights=nights,
                )
            )

        if not conflicts:
            return BookingValidation(is_valid=True)
        return BookingValidation(
            is_valid=False,
            conflicts=conflicts,
            warnings=_conflict_warnings(conflicts),
            errors=[CONFLICT_ERROR],
        )

    async def perform_realtime_check(
        self,
        room_ids: Sequence[str],
        start_date: DateLike,
        end_date: DateLike,
        current_booking_id: uuid.UUID | None = None,
    ) -> RealtimeUpdateResult:
        validation = await self.validate_booking_exclusively(
            room_ids, start_date, end_date, current_booking_id
        )
        if validation.is_valid:
            message = "No overlapping bookings"
        elif validation.conflicts:
            message = f"{len(validation.conflicts)} overlapping booking(s) found"
        else:
            message = "; ".join(validation.errors)
        return RealtimeUpdateResult(
            success=validation.is_valid,
            conflicts=validation.conflicts,
            updated_at=self._clock(),
            message=message,
        )

    async def final_validation_before_commit(
        self,
        candidate: BookingCandidate,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> BookingValidation:
        """Union the conflict, capacity and business-rule checks.

        All three checks always run so every problem is reported at once.
        """
        conflict = await self.validate_booking_exclusively(
            candidate.room_ids,
            candidate.start_date,
            candidate.end_date,
            exclude_booking_id,
        )
        capacity_errors, capacity_warnings = await self.validate_capacity(
            candidate.room_ids, candidate.guest_count
        )
        rule_errors, rule_warnings = self.validate_business_rules(candidate)

        errors = _unique([*conflict.errors, *capacity_errors, *rule_errors])
        warnings = [*conflict.warnings, *capacity_warnings, *rule_warnings]
        return BookingValidation(
            is_valid=not errors,
            conflicts=conflict.conflicts,
            warnings=warnings,
            errors=errors,
        )

    async def validate_capacity(
        self, room_ids: Sequence[str], guest_count: int
    ) -> tuple[list[str], list[str]]:
        errors: list[str] = []
        warnings: list[str] = []
        if not room_ids:
            return errors, warnings
        try:
            rooms = await self._store.list_active_rooms(list(room_ids))
        except StoreQueryFailure as exc:
            logger.exception("Capacity check failed for rooms %s", ", ".join(room_ids))
            return [str(exc)], warnings

        known = {room.room_id for room in rooms}
        unavailable = [room_id for room_id in room_ids if room_id not in known]
        if unavailable:
            errors.append(f"Rooms not available for booking: {', '.join(unavailable)}")

        total_capacity = sum(room.capacity for room in rooms)
        if guest_count > total_capacity:
            errors.append(
                f"Guest count {guest_count} exceeds the combined room capacity of "
                f"{total_capacity}"
            )
        elif total_capacity and guest_count / total_capacity > self._settings.capacity_warning_ratio:
            utilization = round(guest_count / total_capacity * 100)
            warnings.append(f"Room utilization is high ({utilization}%)")
        return errors, warnings

    def validate_business_rules(
        self, candidate: BookingCandidate
    ) -> tuple[list[str], list[str]]:
        errors: list[str] = []
        warnings: list[str] = []
        try:
            start = parse_local_date(candidate.start_date)
            end = parse_local_date(candidate.end_date)
        except InvalidStayParameters as exc:
            errors.append(str(exc))
        else:
            if start < self._today():
                errors.append("Check-in date cannot be in the past")
            if start >= end:
                errors.append("Check-out date must be after the check-in date")
            elif (end - start).days > self._settings.long_stay_warning_nights:
                warnings.append(
                    f"Long stay: more than {self._settings.long_stay_warning_nights} nights"
                )

        if candidate.guest_count <= 0:
            errors.append("Guest count must be at least 1")
        elif candidate.guest_count > self._settings.large_group_warning_guests:
            warnings.append(
                f"Large group: more than {self._settings.large_group_warning_guests} guests"
            )

        if not (candidate.guest_name or "").strip():
            errors.append("Representative name is required")
        return errors, warnings

    async def handle_concurrent_access(
        self,
        session_id: str,
        room_ids: Sequence[str],
        start_date: DateLike,
        end_date: DateLike,
    ) -> LockResult:
        """Ask the store for a short exclusive claim on the rooms.

        The lock is advisory. Commits re-check overlaps regardless.
        """
        stay = DateRange.parse(start_date, end_date)
        if not room_ids:
            raise InvalidStayParameters("At least one room must be selected")
        now = self._clock()
        expires_at = now + datetime.timedelta(
            minutes=self._settings.booking_lock_ttl_minutes
        )
        try:
            grant = await self._store.acquire_lock(
                session_id=session_id,
                room_ids=list(room_ids),
                start_date=stay.start_date,
                end_date=stay.end_date,
                expires_at=expires_at,
                now=now,
            )
        except StoreQueryFailure:
            logger.exception("Lock acquisition failed for session %s", session_id)
            return LockResult(
                lock_acquired=False, lock_expires_at=None, other_active_sessions=0
            )
        return LockResult(
            lock_acquired=grant.acquired,
            lock_expires_at=expires_at if grant.acquired else None,
            other_active_sessions=grant.other_sessions,
        )

    async def detect_and_resolve_conflicts(
        self,
        original_booking_id: uuid.UUID | None,
        room_ids: Sequence[str],
        start_date: DateLike,
        end_date: DateLike,
        guest_count: int | None = None,
    ) -> ConflictResolution:
        validation = await self.validate_booking_exclusively(
            room_ids, start_date, end_date, original_booking_id
        )
        if not validation.conflicts:
            # a failed check is reported as conflicted with nothing to offer
            return ConflictResolution(has_new_conflicts=not validation.is_valid)

        stay = DateRange.parse(start_date, end_date)
        options: list[ResolutionOption] = []
        try:
            rooms = await self._alternative_rooms(
                room_ids, stay, original_booking_id, guest_count
            )
            windows = await self._alternative_dates(room_ids, stay, original_booking_id)
        except StoreQueryFailure:
            logger.exception("Alternative search failed for rooms %s", ", ".join(room_ids))
            rooms, windows = [], []

        if rooms:
            options.append(
                ResolutionOption(
                    type="alternative_rooms",
                    description=(
                        f"Rooms {', '.join(room.room_id for room in rooms)} are free "
                        f"for {format_local_date(stay.start_date)} to "
                        f"{format_local_date(stay.end_date)}"
                    ),
                    data={
                        "room_ids": [room.room_id for room in rooms],
                        "total_capacity": sum(room.capacity for room in rooms),
                    },
                )
            )
        if windows:
            options.append(
                ResolutionOption(
                    type="alternative_dates",
                    description=f"{len(windows)} alternative date range(s) for the same rooms",
                    data={
                        "date_ranges": [
                            {
                                "start_date": format_local_date(window.start_date),
                                "end_date": format_local_date(window.end_date),
                            }
                            for window in windows
                        ]
                    },
                )
            )
        return ConflictResolution(
            has_new_conflicts=True,
            conflicts=validation.conflicts,
            resolution_options=options,
        )

    async def _alternative_rooms(
        self,
        room_ids: Sequence[str],
        stay: DateRange,
        exclude_booking_id: uuid.UUID | None,
        guest_count: int | None,
    ) -> list[RoomRecord]:
        if guest_count is None:
            requested = await self._store.list_active_rooms(list(room_ids))
            required = sum(room.capacity for room in requested)
        else:
            required = guest_count
        required = max(required, 1)

        candidates = [
            room
            for room in await self._store.list_active_rooms()
            if room.room_id not in room_ids
        ]
        if not candidates:
            return []
        busy = {
            assignment.room_id
            for assignment in await self._store.list_overlapping_assignments(
                [room.room_id for room in candidates],
                stay.start_date,
                stay.end_date,
                exclude_booking_id,
            )
        }
        free = [room for room in candidates if room.room_id not in busy]

        single = sorted(
            (room for room in free if room.capacity >= required),
            key=lambda room: (room.capacity, room.room_id),
        )
        if single:
            return single[:1]

        chosen: list[RoomRecord] = []
        capacity = 0
        for room in sorted(free, key=lambda room: (-room.capacity, room.room_id)):
            chosen.append(room)
            capacity += room.capacity
            if capacity >= required:
                return chosen
        return []

    async def _alternative_dates(
        self,
        room_ids: Sequence[str],
        stay: DateRange,
        exclude_booking_id: uuid.UUID | None,
    ) -> list[DateRange]:
        search_days = self._settings.alternative_date_search_days
        limit = self._settings.alternative_date_limit
        span = datetime.timedelta(days=search_days)
        assignments = await self._store.list_overlapping_assignments(
            list(room_ids),
            stay.start_date - span,
            stay.end_date + span,
            exclude_booking_id,
        )
        booked = [
            DateRange(assignment.start_date, assignment.end_date)
            for assignment in assignments
        ]
        earliest = self._today()

        windows: list[DateRange] = []
        for distance in range(1, search_days + 1):
            for offset in (-distance, distance):
                window = stay.shifted(offset)
                if window.start_date < earliest:
                    continue
                if any(window.overlaps(existing) for existing in booked):
                    continue
                windows.append(window)
                if len(windows) >= limit:
                    return windows
        return windows


def _conflict_warnings(conflicts: Sequence[BookingConflict]) -> list[str]:
    by_room: dict[str, list[BookingConflict]] = {}
    for conflict in conflicts:
        by_room.setdefault(conflict.room_id, []).append(conflict)
    warnings = [
        f"Room {room_id} already has {len(items)} overlapping booking(s)"
        for room_id, items in by_room.items()
    ]
    warnings.extend(
        f"Room {conflict.room_id}: {conflict.conflicting_guest_name} "
        f"{format_local_date(conflict.overlap_start)} to "
        f"{format_local_date(conflict.overlap_end)} "
        f"({conflict.overlap_nights} night(s))"
        for conflict in conflicts
    )
    return warnings


def _unique(messages: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(messages))


__all__ = [
    "BookingCandidate",
    "BookingConflict",
    "BookingConflictValidator",
    "BookingValidation",
    "CONFLICT_ERROR",
    "ConflictResolution",
    "LockResult",
    "RealtimeUpdateResult",
    "ResolutionOption",
]
