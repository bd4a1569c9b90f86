"""Persistent-store queries used by the booking conflict validator."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.errors import StoreQueryFailure
from lodge.models import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingLock,
    BookingRoom,
    BookingStatus,
    Room,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssignmentRecord:
    """An existing room assignment of an active booking."""

    booking_id: uuid.UUID
    room_id: str
    guest_name: str
    start_date: datetime.date
    end_date: datetime.date
    status: BookingStatus


@dataclass(frozen=True, slots=True)
class RoomRecord:
    room_id: str
    name: str
    capacity: int


@dataclass(frozen=True, slots=True)
class LockGrant:
    acquired: bool
    other_sessions: int


class BookingStore(Protocol):
    """Queries the conflict validator needs from the persistent store.

    Implementations raise :class:`StoreQueryFailure` when the store cannot
    answer; they never report a failed query as an empty result.
    """

    async def list_overlapping_assignments(
        self,
        room_ids: Sequence[str],
        start_date: datetime.date,
        end_date: datetime.date,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[AssignmentRecord]: ...

    async def list_active_rooms(
        self, room_ids: Sequence[str] | None = None
    ) -> list[RoomRecord]: ...

    async def acquire_lock(
        self,
        *,
        session_id: str,
        room_ids: Sequence[str],
        start_date: datetime.date,
        end_date: datetime.date,
        expires_at: datetime.datetime,
        now: datetime.datetime,
    ) -> LockGrant: ...


class SqlAlchemyBookingStore:
    """Booking store backed by the relational database."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_overlapping_assignments(
        self,
        room_ids: Sequence[str],
        start_date: datetime.date,
        end_date: datetime.date,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[AssignmentRecord]:
        if not room_ids:
            return []
        stmt = (
            select(
                BookingRoom.booking_id,
                BookingRoom.room_id,
                Booking.guest_name,
                Booking.start_date,
                Booking.end_date,
                Booking.status,
            )
            .join(Booking, Booking.id == BookingRoom.booking_id)
            .where(
                BookingRoom.room_id.in_(room_ids),
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.start_date < end_date,
                Booking.end_date > start_date,
            )
            .order_by(BookingRoom.room_id, Booking.start_date, Booking.id)
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Booking overlap query failed: {exc}") from exc
        return [AssignmentRecord(*row) for row in result.all()]

    async def list_active_rooms(
        self, room_ids: Sequence[str] | None = None
    ) -> list[RoomRecord]:
        stmt = (
            select(Room.room_id, Room.name, Room.capacity)
            .where(Room.is_active.is_(True))
            .order_by(Room.room_id)
        )
        if room_ids is not None:
            stmt = stmt.where(Room.room_id.in_(room_ids))
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Room query failed: {exc}") from exc
        return [RoomRecord(*row) for row in result.all()]

    async def acquire_lock(
        self,
        *,
        session_id: str,
        room_ids: Sequence[str],
        start_date: datetime.date,
        end_date: datetime.date,
        expires_at: datetime.datetime,
        now: datetime.datetime,
    ) -> LockGrant:
        """Claim the rooms for ``session_id`` in one transaction.

        The room rows are locked ``FOR UPDATE`` before competing locks are
        counted, so two sessions racing for the same rooms are serialized by
        the database. A session re-acquiring replaces its own earlier claim.
        """
        try:
            await self._session.execute(
                delete(BookingLock).where(BookingLock.expires_at <= now)
            )
            await self._session.execute(
                select(Room.room_id)
                .where(Room.room_id.in_(room_ids))
                .with_for_update()
            )
            competing = await self._session.execute(
                select(BookingLock.session_id)
                .where(
                    BookingLock.room_id.in_(room_ids),
                    BookingLock.session_id != session_id,
                    BookingLock.expires_at > now,
                    BookingLock.start_date < end_date,
                    BookingLock.end_date > start_date,
                )
                .distinct()
            )
            other_sessions = len(competing.scalars().all())
            if other_sessions:
                await self._session.commit()
                return LockGrant(acquired=False, other_sessions=other_sessions)

            await self._session.execute(
                delete(BookingLock).where(
                    BookingLock.session_id == session_id,
                    BookingLock.room_id.in_(room_ids),
                )
            )
            self._session.add_all(
                [
                    BookingLock(
                        session_id=session_id,
                        room_id=room_id,
                        start_date=start_date,
                        end_date=end_date,
                        expires_at=expires_at,
                    )
                    for room_id in dict.fromkeys(room_ids)
                ]
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StoreQueryFailure(f"Booking lock acquisition failed: {exc}") from exc
        logger.debug(
            "Lock granted to %s for rooms %s until %s",
            session_id,
            ", ".join(room_ids),
            expires_at.isoformat(),
        )
        return LockGrant(acquired=True, other_sessions=0)
