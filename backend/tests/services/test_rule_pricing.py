"""Tests for rule-driven pricing."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

import pytest

from lodge.core.dates import DateRange
from lodge.models import PricingRule, PricingRuleType, SeasonType
from lodge.services.pricing_service import GuestCount, RoomUsage, StayQuote
from lodge.services.rule_pricing_service import RulePricing

pytestmark = pytest.mark.asyncio

PEAK_START = datetime.date(2025, 7, 20)
PEAK_END = datetime.date(2025, 8, 31)


def _rule(name: str, rule_type: PricingRuleType, **kwargs) -> PricingRule:
    kwargs.setdefault("is_active", True)
    kwargs.setdefault("priority", 0)
    kwargs.setdefault("days_of_week", [])
    return PricingRule(id=uuid.uuid4(), name=name, rule_type=rule_type, **kwargs)


def _weekend(priority: int = 2) -> PricingRule:
    return _rule(
        "Weekend",
        PricingRuleType.WEEKDAY,
        days_of_week=[4, 5],
        multiplier=Decimal("1.22"),
        priority=priority,
    )


def _peak(priority: int = 1) -> PricingRule:
    return _rule(
        "Summer peak",
        PricingRuleType.SEASONAL,
        start_date=PEAK_START,
        end_date=PEAK_END,
        multiplier=Decimal("1.15"),
        priority=priority,
    )


async def test_lower_priority_number_is_applied_first() -> None:
    engine = RulePricing([_weekend(), _peak()], weekend_days={4, 5})

    # 2025-07-25 is a Friday inside the peak window
    calculation = engine.calculate_price(
        "201", "medium_a", Decimal("10000"), "2025-07-25", "2025-07-26", 0
    )

    assert calculation.total_price == Decimal("14030")
    assert [(rule.rule_name, rule.amount) for rule in calculation.applied_rules] == [
        ("Summer peak", Decimal("1500")),
        ("Weekend", Decimal("2530")),
    ]
    assert calculation.breakdown.seasonal == Decimal("1500")
    assert calculation.breakdown.weekday == Decimal("2530")
    assert calculation.breakdown.base == Decimal("10000")


async def test_swapped_priorities_change_the_order() -> None:
    engine = RulePricing([_weekend(priority=1), _peak(priority=2)], weekend_days={4, 5})

    calculation = engine.calculate_price(
        "201", "medium_a", Decimal("10000"), "2025-07-25", "2025-07-26", 0
    )

    assert [rule.rule_name for rule in calculation.applied_rules] == [
        "Weekend",
        "Summer peak",
    ]
    assert calculation.total_price == Decimal("14030")
    assert calculation.applied_rules[0].amount == Decimal("2200")


async def test_plain_nights_use_base_price() -> None:
    engine = RulePricing([_weekend(), _peak()], weekend_days={4, 5})

    calculation = engine.calculate_price(
        "201", None, Decimal("8000"), "2025-06-16", "2025-06-18", 2
    )

    assert calculation.nights == 2
    assert calculation.total_price == Decimal("16000")
    assert calculation.applied_rules == []
    assert [night.price for night in calculation.nightly_prices] == [
        Decimal("8000"),
        Decimal("8000"),
    ]


async def test_addon_rules_add_fixed_amount_per_guest_night_once() -> None:
    linen = _rule("Linen", PricingRuleType.ADDON, fixed_amount=Decimal("200"), priority=5)
    engine = RulePricing([linen], weekend_days={4, 5})

    calculation = engine.calculate_price(
        "201", None, Decimal("8000"), "2025-06-16", "2025-06-18", 3
    )

    assert calculation.total_price == Decimal("16000") + Decimal("1200")
    assert calculation.breakdown.addons == Decimal("1200")
    (applied,) = calculation.applied_rules
    assert applied.kind == "fixed"
    assert applied.amount == Decimal("1200")


async def test_applicable_rules_filter_and_sort() -> None:
    special = _rule(
        "Festival",
        PricingRuleType.SPECIAL,
        start_date=datetime.date(2025, 7, 25),
        end_date=datetime.date(2025, 7, 25),
        multiplier=Decimal("1.10"),
        priority=2,
    )
    inactive = _peak(priority=0)
    inactive.is_active = False
    scoped = _rule(
        "Large room weekend",
        PricingRuleType.WEEKDAY,
        days_of_week=[4],
        multiplier=Decimal("1.05"),
        room_type="large",
        priority=3,
    )
    engine = RulePricing([special, _weekend(), inactive, _peak(), scoped], weekend_days={4, 5})

    friday = datetime.date(2025, 7, 25)
    names = [rule.name for rule in engine.get_applicable_rules("medium_a", friday)]
    assert names == ["Summer peak", "Festival", "Weekend"]

    names = [rule.name for rule in engine.get_applicable_rules("large", friday)]
    assert names == ["Summer peak", "Festival", "Weekend", "Large room weekend"]

    sunday_names = [
        rule.name for rule in engine.get_applicable_rules("medium_a", friday, day_of_week=6)
    ]
    assert sunday_names == ["Summer peak", "Festival"]


async def test_untyped_room_only_gets_unscoped_rules() -> None:
    scoped_weekend = _rule(
        "Large room weekend",
        PricingRuleType.WEEKDAY,
        days_of_week=[4],
        multiplier=Decimal("1.05"),
        room_type="large",
        priority=3,
    )
    scoped_linen = _rule(
        "Large room linen",
        PricingRuleType.ADDON,
        fixed_amount=Decimal("300"),
        room_type="large",
        priority=5,
    )
    engine = RulePricing([_weekend(), scoped_weekend, scoped_linen], weekend_days={4, 5})
    friday = datetime.date(2025, 6, 20)

    names = [rule.name for rule in engine.get_applicable_rules(None, friday)]
    assert names == ["Weekend"]

    calculation = engine.calculate_price(
        "203", None, Decimal("10000"), "2025-06-20", "2025-06-21", 2
    )
    assert [rule.rule_name for rule in calculation.applied_rules] == ["Weekend"]
    assert calculation.breakdown.addons == Decimal("0")
    assert calculation.total_price == Decimal("12200")


async def test_dated_rule_window_is_inclusive() -> None:
    engine = RulePricing([_peak()], weekend_days={4, 5})

    assert engine.get_applicable_rules(None, PEAK_END)
    assert not engine.get_applicable_rules(None, PEAK_END + datetime.timedelta(days=1))


async def test_quote_returns_consistent_breakdown() -> None:
    linen = _rule("Linen", PricingRuleType.ADDON, fixed_amount=Decimal("200"), priority=5)
    engine = RulePricing([_weekend(), _peak(), linen], weekend_days={4, 5})
    stay = StayQuote(
        rooms=[
            RoomUsage(room_id="201", room_rate=Decimal("10000"), capacity=4, room_type="medium_a")
        ],
        guests=GuestCount(adult=2),
        date_range=DateRange.parse("2025-07-24", "2025-07-26"),
    )

    breakdown = await engine.quote(stay)

    thursday, friday = breakdown.daily_breakdown
    assert thursday.season is SeasonType.PEAK
    assert thursday.room_amount == Decimal("11500")
    assert friday.room_amount == Decimal("14030")
    assert thursday.addon_amount == Decimal("400")
    assert breakdown.room_amount == Decimal("25530")
    assert breakdown.addon_amount == Decimal("800")
    assert breakdown.total == breakdown.room_amount + breakdown.addon_amount
    assert breakdown.total == sum(day.total for day in breakdown.daily_breakdown)
    assert breakdown.total == sum(line.amount for line in breakdown.line_items)
