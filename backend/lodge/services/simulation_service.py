"""Price what-if scenarios side by side."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from lodge.services.pricing_service import (
    ZERO,
    PriceBreakdown,
    PricingStrategy,
    StayQuote,
    to_money,
)


@dataclass(slots=True)
class ScenarioEfficiency:
    price_per_guest: Decimal | None
    price_per_night: Decimal
    capacity_utilization: int | None


@dataclass(slots=True)
class ScenarioResult:
    scenario_id: str
    stay: StayQuote
    breakdown: PriceBreakdown
    total_guests: int
    total_capacity: int
    efficiency: ScenarioEfficiency


@dataclass(slots=True)
class ScenarioComparison:
    cheapest_scenario_id: str
    cheapest_total: Decimal
    most_expensive_scenario_id: str
    most_expensive_total: Decimal
    average_total: Decimal
    price_range: Decimal
    variation_count: int


@dataclass(slots=True)
class SimulationResult:
    base: ScenarioResult
    variations: list[ScenarioResult] = field(default_factory=list)
    comparison: ScenarioComparison | None = None

    @property
    def scenarios(self) -> list[ScenarioResult]:
        return [self.base, *self.variations]


async def price_scenario(
    strategy: PricingStrategy, stay: StayQuote, scenario_id: str
) -> ScenarioResult:
    breakdown = await strategy.quote(stay)
    total_guests = stay.guests.total
    total_capacity = sum(room.capacity for room in stay.rooms)
    efficiency = ScenarioEfficiency(
        price_per_guest=(
            to_money(breakdown.total / total_guests) if total_guests else None
        ),
        price_per_night=to_money(breakdown.total / stay.date_range.nights),
        capacity_utilization=(
            round(total_guests / total_capacity * 100) if total_capacity else None
        ),
    )
    return ScenarioResult(
        scenario_id=scenario_id,
        stay=stay,
        breakdown=breakdown,
        total_guests=total_guests,
        total_capacity=total_capacity,
        efficiency=efficiency,
    )


async def simulate(
    strategy: PricingStrategy,
    base: StayQuote,
    variations: Sequence[StayQuote] = (),
) -> SimulationResult:
    """Price ``base`` and each variation with the same strategy and compare.

    Variations are labelled ``variation_1``, ``variation_2`` and so on. Ties
    for cheapest or most expensive go to the earliest scenario.
    """
    result = SimulationResult(base=await price_scenario(strategy, base, "base"))
    for index, variation in enumerate(variations, start=1):
        result.variations.append(
            await price_scenario(strategy, variation, f"variation_{index}")
        )
    result.comparison = compare_scenarios(result.scenarios, len(result.variations))
    return result


def compare_scenarios(
    scenarios: Sequence[ScenarioResult], variation_count: int
) -> ScenarioComparison:
    cheapest = min(scenarios, key=lambda scenario: scenario.breakdown.total)
    most_expensive = max(scenarios, key=lambda scenario: scenario.breakdown.total)
    total = sum((scenario.breakdown.total for scenario in scenarios), ZERO)
    return ScenarioComparison(
        cheapest_scenario_id=cheapest.scenario_id,
        cheapest_total=cheapest.breakdown.total,
        most_expensive_scenario_id=most_expensive.scenario_id,
        most_expensive_total=most_expensive.breakdown.total,
        average_total=to_money(total / len(scenarios)),
        price_range=most_expensive.breakdown.total - cheapest.breakdown.total,
        variation_count=variation_count,
    )
