"""Room availability endpoints."""

from __future__ import annotations

import datetime
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lodge.api import deps
from lodge.core.errors import StoreQueryFailure
from lodge.schemas.availability import AvailabilitySearchRead, NightlyOccupancyRead
from lodge.services.availability_service import AvailabilityChecker

router = APIRouter(prefix="/rooms", tags=["rooms"])

CheckerDep = Annotated[AvailabilityChecker, Depends(deps.get_availability_checker)]


@router.get(
    "/availability",
    response_model=AvailabilitySearchRead,
    summary="Search rooms free for a whole stay",
)
async def search_availability(
    checker: CheckerDep,
    start_date: Annotated[datetime.date, Query()],
    end_date: Annotated[datetime.date, Query()],
    guest_count: Annotated[int, Query(ge=1)] = 1,
    exclude_booking_id: Annotated[uuid.UUID | None, Query()] = None,
) -> AvailabilitySearchRead:
    try:
        result = await checker.search(start_date, end_date, guest_count, exclude_booking_id)
    except StoreQueryFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return AvailabilitySearchRead.model_validate(result)


@router.get(
    "/occupancy",
    response_model=list[NightlyOccupancyRead],
    summary="Occupied rooms per night",
)
async def nightly_occupancy(
    checker: CheckerDep,
    start_date: Annotated[datetime.date, Query()],
    end_date: Annotated[datetime.date, Query()],
) -> list[NightlyOccupancyRead]:
    try:
        nights = await checker.nightly_occupancy(start_date, end_date)
    except StoreQueryFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return [NightlyOccupancyRead.model_validate(night) for night in nights]
