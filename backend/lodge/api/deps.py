"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.config import Settings, get_settings
from lodge.core.errors import StoreQueryFailure
from lodge.db.session import get_session
from lodge.services.availability_service import AvailabilityChecker
from lodge.services.booking_store import SqlAlchemyBookingStore
from lodge.services.conflict_service import BookingConflictValidator
from lodge.services.pricing_service import RateTablePricing
from lodge.services.rate_repository import SqlAlchemyRateRepository
from lodge.services.rule_pricing_service import RulePricing


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_app_settings() -> Settings:
    return get_settings()


def get_rate_repository(session: SessionDep) -> SqlAlchemyRateRepository:
    return SqlAlchemyRateRepository(session)


def get_rate_table_pricing(
    repository: Annotated[SqlAlchemyRateRepository, Depends(get_rate_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RateTablePricing:
    return RateTablePricing(repository, weekend_days=settings.weekend_days)


async def get_rule_pricing(
    repository: Annotated[SqlAlchemyRateRepository, Depends(get_rate_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RulePricing:
    """Build the rule engine from the currently active pricing rules."""
    try:
        rules = await repository.list_active_rules()
    except StoreQueryFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return RulePricing(rules, weekend_days=settings.weekend_days)


def get_booking_store(session: SessionDep) -> SqlAlchemyBookingStore:
    return SqlAlchemyBookingStore(session)


BookingStoreDep = Annotated[SqlAlchemyBookingStore, Depends(get_booking_store)]


def get_conflict_validator(
    store: BookingStoreDep,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> BookingConflictValidator:
    return BookingConflictValidator(store, settings=settings)


def get_availability_checker(
    store: BookingStoreDep,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AvailabilityChecker:
    return AvailabilityChecker(store, settings=settings)
