"""Booking validation, locking and lifecycle endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from lodge.api import deps
from lodge.api.v1.pricing import RepositoryDep, build_stay
from lodge.core.config import Settings
from lodge.core.errors import BookingRejected, ConflictDetected, StoreQueryFailure
from lodge.models import ACTIVE_BOOKING_STATUSES
from lodge.schemas.booking import (
    BookingConflictRead,
    BookingCreate,
    BookingRead,
    BookingValidateRequest,
    BookingValidationRead,
    ConflictCheckRequest,
    ConflictResolutionRead,
    LockRead,
    LockRequest,
    RealtimeUpdateRead,
    ResolveRequest,
)
from lodge.schemas.pricing import PricingCalculateRequest
from lodge.services import booking_service
from lodge.services.conflict_service import BookingCandidate, BookingConflictValidator
from lodge.services.pricing_service import RateTablePricing

router = APIRouter(prefix="/bookings", tags=["bookings"])

ValidatorDep = Annotated[BookingConflictValidator, Depends(deps.get_conflict_validator)]


@router.post(
    "/validate",
    response_model=BookingValidationRead,
    summary="Run every pre-commit check for a booking candidate",
)
async def validate_booking(
    payload: BookingValidateRequest, validator: ValidatorDep
) -> BookingValidationRead:
    validation = await validator.final_validation_before_commit(
        BookingCandidate(
            room_ids=payload.room_ids,
            start_date=payload.start_date,
            end_date=payload.end_date,
            guest_count=payload.guest_count,
            guest_name=payload.guest_name,
        ),
        payload.exclude_booking_id,
    )
    return BookingValidationRead.model_validate(validation)


@router.post(
    "/conflict-status",
    response_model=RealtimeUpdateRead,
    summary="Poll for overlapping bookings",
)
async def conflict_status(
    payload: ConflictCheckRequest,
    validator: ValidatorDep,
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> RealtimeUpdateRead:
    result = await validator.perform_realtime_check(
        payload.room_ids,
        payload.start_date,
        payload.end_date,
        payload.exclude_booking_id,
    )
    return RealtimeUpdateRead(
        success=result.success,
        conflicts=[BookingConflictRead.model_validate(item) for item in result.conflicts],
        updated_at=result.updated_at,
        message=result.message,
        poll_interval_seconds=settings.realtime_poll_seconds,
    )


@router.post("/locks", response_model=LockRead, summary="Claim rooms for a session")
async def acquire_lock(payload: LockRequest, validator: ValidatorDep) -> LockRead:
    try:
        result = await validator.handle_concurrent_access(
            payload.session_id,
            payload.room_ids,
            payload.start_date,
            payload.end_date,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return LockRead.model_validate(result)


@router.post(
    "/resolve",
    response_model=ConflictResolutionRead,
    summary="Suggest alternative rooms or dates for a conflicting booking",
)
async def resolve_conflicts(
    payload: ResolveRequest, validator: ValidatorDep
) -> ConflictResolutionRead:
    try:
        resolution = await validator.detect_and_resolve_conflicts(
            payload.original_booking_id,
            payload.room_ids,
            payload.start_date,
            payload.end_date,
            payload.guest_count,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ConflictResolutionRead.model_validate(resolution)


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
)
async def create_booking(
    payload: BookingCreate,
    session: deps.SessionDep,
    repository: RepositoryDep,
    pricing: Annotated[RateTablePricing, Depends(deps.get_rate_table_pricing)],
    validator: ValidatorDep,
) -> BookingRead:
    if payload.status not in ACTIVE_BOOKING_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New bookings must be draft or confirmed",
        )
    candidate = BookingCandidate(
        room_ids=payload.room_ids,
        start_date=payload.start_date,
        end_date=payload.end_date,
        guest_count=payload.guests.total,
        guest_name=payload.guest_name,
    )
    try:
        await booking_service.ensure_bookable(validator, candidate)
        stay = await build_stay(
            session,
            repository,
            PricingCalculateRequest(
                room_ids=payload.room_ids,
                start_date=payload.start_date,
                end_date=payload.end_date,
                guests=payload.guests,
                addons=payload.addons,
            ),
        )
        price = await pricing.quote(stay)
        booking = await booking_service.create_booking(
            session,
            validator=validator,
            candidate=candidate,
            rooms=stay.rooms,
            guests=stay.guests,
            price=price,
            guest_email=payload.guest_email,
            guest_phone=payload.guest_phone,
            guest_org=payload.guest_org,
            notes=payload.notes,
            status=payload.status,
        )
    except ConflictDetected as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=BookingValidationRead.model_validate(exc.validation).model_dump(
                mode="json"
            ),
        ) from exc
    except BookingRejected as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=BookingValidationRead.model_validate(exc.validation).model_dump(
                mode="json"
            ),
        ) from exc
    except StoreQueryFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return BookingRead.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(booking_id: uuid.UUID, session: deps.SessionDep) -> BookingRead:
    booking = await booking_service.get_booking(session, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return BookingRead.model_validate(booking)


@router.post(
    "/{booking_id}/cancel", response_model=BookingRead, summary="Cancel booking"
)
async def cancel_booking(
    booking_id: uuid.UUID, session: deps.SessionDep
) -> BookingRead:
    try:
        booking = await booking_service.cancel_booking(session, booking_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return BookingRead.model_validate(booking)
