"""Pricing-related API endpoints."""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.api import deps
from lodge.core.dates import DateRange
from lodge.core.errors import StoreQueryFailure
from lodge.schemas.pricing import (
    AddOnRead,
    PriceBreakdownRead,
    PricingCalculateRequest,
    PricingCalculationRead,
    PricingRuleRead,
    RuleQuoteRequest,
    SimulationRead,
    SimulationRequest,
)
from lodge.services import addon_service, simulation_service
from lodge.services.pricing_service import GuestCount, RateTablePricing, StayQuote
from lodge.services.rate_repository import SqlAlchemyRateRepository
from lodge.services.rule_pricing_service import RulePricing

router = APIRouter(prefix="/pricing", tags=["pricing"])

RepositoryDep = Annotated[SqlAlchemyRateRepository, Depends(deps.get_rate_repository)]


async def build_stay(
    session: AsyncSession,
    repository: SqlAlchemyRateRepository,
    payload: PricingCalculateRequest,
) -> StayQuote:
    """Resolve room ids and add-on selections into a priceable stay."""
    rooms = await repository.get_room_usages(payload.room_ids)
    addons = await addon_service.resolve_addon_items(session, payload.addons)
    return StayQuote(
        rooms=rooms,
        guests=GuestCount(**payload.guests.model_dump()),
        date_range=DateRange(payload.start_date, payload.end_date),
        addons=addons,
    )


def _unavailable(exc: StoreQueryFailure) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get(
    "/addons",
    response_model=list[AddOnRead],
    summary="List the active add-on catalog",
)
async def list_addons(session: deps.SessionDep) -> list[AddOnRead]:
    try:
        addons = await addon_service.list_active_addons(session)
    except StoreQueryFailure as exc:
        raise _unavailable(exc) from exc
    return [AddOnRead.model_validate(addon) for addon in addons]


@router.post(
    "/calculate",
    response_model=PriceBreakdownRead,
    summary="Price a stay from the rate table",
)
async def calculate_price(
    payload: PricingCalculateRequest,
    session: deps.SessionDep,
    repository: RepositoryDep,
    pricing: Annotated[RateTablePricing, Depends(deps.get_rate_table_pricing)],
) -> PriceBreakdownRead:
    try:
        stay = await build_stay(session, repository, payload)
        breakdown = await pricing.quote(stay)
    except StoreQueryFailure as exc:
        raise _unavailable(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PriceBreakdownRead.model_validate(breakdown)


@router.post(
    "/rules/quote",
    response_model=PricingCalculationRead,
    summary="Quick rule-driven estimate for one room",
)
async def quote_with_rules(
    payload: RuleQuoteRequest,
    repository: RepositoryDep,
    rules: Annotated[RulePricing, Depends(deps.get_rule_pricing)],
) -> PricingCalculationRead:
    try:
        (room,) = await repository.get_room_usages([payload.room_id])
        calculation = rules.calculate_price(
            room.room_id,
            room.room_type,
            payload.base_price if payload.base_price is not None else room.room_rate,
            payload.start_date,
            payload.end_date,
            payload.guest_count,
        )
    except StoreQueryFailure as exc:
        raise _unavailable(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PricingCalculationRead.model_validate(calculation)


@router.get(
    "/rules/applicable",
    response_model=list[PricingRuleRead],
    summary="Rules applied on a date, in application order",
)
async def list_applicable_rules(
    rules: Annotated[RulePricing, Depends(deps.get_rule_pricing)],
    date: Annotated[datetime.date, Query()],
    room_type: Annotated[str | None, Query()] = None,
    day_of_week: Annotated[int | None, Query(ge=0, le=6)] = None,
) -> list[PricingRuleRead]:
    applicable = rules.get_applicable_rules(room_type, date, day_of_week)
    return [PricingRuleRead.model_validate(rule) for rule in applicable]


@router.post(
    "/simulate",
    response_model=SimulationRead,
    summary="Compare a base stay with variations",
)
async def simulate_pricing(
    payload: SimulationRequest,
    session: deps.SessionDep,
    repository: RepositoryDep,
    rate_table: Annotated[RateTablePricing, Depends(deps.get_rate_table_pricing)],
    rules: Annotated[RulePricing, Depends(deps.get_rule_pricing)],
) -> SimulationRead:
    strategy = rules if payload.strategy == rules.name else rate_table
    try:
        base = await build_stay(session, repository, payload.base)
        variations = [
            await build_stay(session, repository, variation)
            for variation in payload.variations
        ]
        result = await simulation_service.simulate(strategy, base, variations)
    except StoreQueryFailure as exc:
        raise _unavailable(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SimulationRead.model_validate(result)
