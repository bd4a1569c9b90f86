"""Pricing schema definitions."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lodge.models import AddOnCategory, AgeGroup, DayType, PricingRuleType, SeasonType


class GuestCountIn(BaseModel):
    """Guests per age group."""

    adult: int = Field(default=0, ge=0)
    adult_leader: int = Field(default=0, ge=0)
    student: int = Field(default=0, ge=0)
    child: int = Field(default=0, ge=0)
    infant: int = Field(default=0, ge=0)
    baby: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return sum(self.model_dump().values())


class AddonSelection(BaseModel):
    """Add-on picked from the catalog for the whole stay."""

    add_on_id: str
    quantity: int = Field(default=1, ge=0)
    age_breakdown: dict[AgeGroup, int] | None = None


class AddOnRead(BaseModel):
    """Catalog entry offered as an extra."""

    add_on_id: str
    category: AddOnCategory
    name: str
    unit: str
    adult_fee: Decimal
    student_fee: Decimal
    child_fee: Decimal
    infant_fee: Decimal

    model_config = ConfigDict(from_attributes=True)


class StayWindow(BaseModel):
    start_date: datetime.date
    end_date: datetime.date

    @model_validator(mode="after")
    def _check_dates(self) -> "StayWindow":
        if self.start_date >= self.end_date:
            raise ValueError("end_date must be after start_date")
        return self


class PricingCalculateRequest(StayWindow):
    """Rooms, guests and extras to price with the rate table."""

    room_ids: list[str] = Field(min_length=1)
    guests: GuestCountIn = Field(default_factory=GuestCountIn)
    addons: list[AddonSelection] = Field(default_factory=list)


class DailyPriceRead(BaseModel):
    date: datetime.date
    day_type: DayType
    season: SeasonType
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class PriceLineRead(BaseModel):
    category: str
    description: str
    unit_price: Decimal
    quantity: int
    unit: str
    amount: Decimal
    age_group: AgeGroup | None = None

    model_config = ConfigDict(from_attributes=True)


class PriceBreakdownRead(BaseModel):
    """Aggregated price of a stay with its nightly series."""

    strategy: str
    nights: int
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total: Decimal
    daily_breakdown: list[DailyPriceRead]
    line_items: list[PriceLineRead]
    missing_rates: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class RuleQuoteRequest(StayWindow):
    """Quick rule-driven estimate for a single room."""

    room_id: str
    guest_count: int = Field(default=0, ge=0)
    base_price: Decimal | None = Field(default=None, ge=Decimal("0"))


class AppliedRuleRead(BaseModel):
    rule_id: str
    rule_name: str
    rule_type: PricingRuleType
    amount: Decimal
    kind: Literal["multiplier", "fixed"]
    date: datetime.date | None = None

    model_config = ConfigDict(from_attributes=True)


class RuleBreakdownRead(BaseModel):
    base: Decimal
    seasonal: Decimal
    weekday: Decimal
    special: Decimal
    addons: Decimal

    model_config = ConfigDict(from_attributes=True)


class NightlyRulePriceRead(BaseModel):
    date: datetime.date
    day_type: DayType
    price: Decimal
    peak: bool

    model_config = ConfigDict(from_attributes=True)


class PricingCalculationRead(BaseModel):
    room_id: str
    nights: int
    base_price: Decimal
    total_price: Decimal
    applied_rules: list[AppliedRuleRead]
    breakdown: RuleBreakdownRead
    nightly_prices: list[NightlyRulePriceRead]

    model_config = ConfigDict(from_attributes=True)


class PricingRuleRead(BaseModel):
    id: uuid.UUID
    name: str
    rule_type: PricingRuleType
    room_type: str | None = None
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    days_of_week: list[int] = Field(default_factory=list)
    multiplier: Decimal | None = None
    fixed_amount: Decimal | None = None
    priority: int

    model_config = ConfigDict(from_attributes=True)


class SimulationRequest(BaseModel):
    """Base scenario plus variations priced with one strategy."""

    strategy: Literal["rate_table", "rules"] = "rate_table"
    base: PricingCalculateRequest
    variations: list[PricingCalculateRequest] = Field(default_factory=list, max_length=10)


class ScenarioEfficiencyRead(BaseModel):
    price_per_guest: Decimal | None = None
    price_per_night: Decimal
    capacity_utilization: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ScenarioResultRead(BaseModel):
    scenario_id: str
    total_guests: int
    total_capacity: int
    breakdown: PriceBreakdownRead
    efficiency: ScenarioEfficiencyRead

    model_config = ConfigDict(from_attributes=True)


class ScenarioComparisonRead(BaseModel):
    cheapest_scenario_id: str
    cheapest_total: Decimal
    most_expensive_scenario_id: str
    most_expensive_total: Decimal
    average_total: Decimal
    price_range: Decimal
    variation_count: int

    model_config = ConfigDict(from_attributes=True)


class SimulationRead(BaseModel):
    base: ScenarioResultRead
    variations: list[ScenarioResultRead]
    comparison: ScenarioComparisonRead

    model_config = ConfigDict(from_attributes=True)
