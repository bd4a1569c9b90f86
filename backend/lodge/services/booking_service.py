"""Booking lifecycle: validated commit, lookup and cancellation."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.dates import DateRange
from lodge.core.errors import BookingRejected, ConflictDetected, StoreQueryFailure
from lodge.models import Booking, BookingRoom, BookingStatus, Room
from lodge.services.booking_store import SqlAlchemyBookingStore
from lodge.services.conflict_service import (
    BookingCandidate,
    BookingConflictValidator,
)
from lodge.services.pricing_service import (
    GuestCount,
    PriceBreakdown,
    RoomUsage,
    to_money,
)

logger = logging.getLogger(__name__)

_CANCELLABLE_STATUSES = {BookingStatus.DRAFT, BookingStatus.CONFIRMED}


async def ensure_bookable(
    validator: BookingConflictValidator, candidate: BookingCandidate
) -> None:
    """Raise ``ConflictDetected`` or ``BookingRejected`` unless the candidate passes."""
    validation = await validator.final_validation_before_commit(candidate)
    if not validation.can_proceed:
        if validation.conflicts:
            raise ConflictDetected(validation)
        raise BookingRejected(validation)


async def create_booking(
    session: AsyncSession,
    *,
    validator: BookingConflictValidator,
    candidate: BookingCandidate,
    rooms: Sequence[RoomUsage],
    guests: GuestCount,
    price: PriceBreakdown,
    guest_email: str | None = None,
    guest_phone: str | None = None,
    guest_org: str | None = None,
    notes: str | None = None,
    status: BookingStatus = BookingStatus.CONFIRMED,
) -> Booking:
    """Validate and persist a booking.

    The room rows are locked and overlaps checked again inside the insert
    transaction, so a booking committed by another session after the first
    validation is still caught. Raises ``ConflictDetected`` on overlap and
    ``BookingRejected`` for any other validation error.
    """
    await ensure_bookable(validator, candidate)

    stay = DateRange.parse(candidate.start_date, candidate.end_date)
    room_ids = [room.room_id for room in rooms]
    try:
        await session.execute(
            select(Room.room_id).where(Room.room_id.in_(room_ids)).with_for_update()
        )
        recheck = await BookingConflictValidator(
            SqlAlchemyBookingStore(session)
        ).validate_booking_exclusively(room_ids, stay.start_date, stay.end_date)
        if not recheck.is_valid:
            await session.rollback()
            if recheck.conflicts:
                raise ConflictDetected(recheck)
            raise BookingRejected(recheck)

        booking = Booking(
            status=status,
            start_date=stay.start_date,
            end_date=stay.end_date,
            nights=stay.nights,
            guest_name=(candidate.guest_name or "").strip(),
            guest_email=guest_email,
            guest_phone=guest_phone,
            guest_org=guest_org,
            pax_total=guests.total,
            pax_adults=guests.adult,
            pax_adult_leaders=guests.adult_leader,
            pax_students=guests.student,
            pax_children=guests.child,
            pax_infants=guests.infant,
            pax_babies=guests.baby,
            room_amount=price.room_amount,
            guest_amount=price.guest_amount,
            addon_amount=price.addon_amount,
            total_amount=price.total,
            notes=notes,
        )
        for room, pax in zip(rooms, _assign_pax(rooms, guests.total)):
            rate = to_money(room.room_rate)
            booking.rooms.append(
                BookingRoom(
                    room_id=room.room_id,
                    assigned_pax=pax,
                    room_rate=rate,
                    nights=stay.nights,
                    amount=rate * stay.nights,
                )
            )
        session.add(booking)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreQueryFailure(f"Booking insert failed: {exc}") from exc

    logger.info(
        "Booking %s created for rooms %s (%s to %s)",
        booking.id,
        ", ".join(room_ids),
        stay.start_date.isoformat(),
        stay.end_date.isoformat(),
    )
    created = await get_booking(session, booking.id)
    if created is None:
        raise StoreQueryFailure(f"Booking {booking.id} vanished after commit")
    return created


async def get_booking(
    session: AsyncSession, booking_id: uuid.UUID
) -> Booking | None:
    result = await session.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalars().unique().one_or_none()


async def cancel_booking(
    session: AsyncSession, booking_id: uuid.UUID
) -> Booking | None:
    """Cancel a booking so its rooms stop counting as occupied."""
    booking = await get_booking(session, booking_id)
    if booking is None:
        return None
    if booking.status not in _CANCELLABLE_STATUSES:
        raise ValueError(f"Booking in status {booking.status.value} cannot be cancelled")
    booking.status = BookingStatus.CANCELLED
    await session.commit()
    await session.refresh(booking)
    return booking


def _assign_pax(rooms: Sequence[RoomUsage], total: int) -> list[int]:
    """Fill rooms in order up to capacity; any overflow goes to the last room."""
    remaining = total
    assigned: list[int] = []
    for room in rooms:
        pax = min(room.capacity, remaining)
        assigned.append(pax)
        remaining -= pax
    if remaining and assigned:
        assigned[-1] += remaining
    return assigned
