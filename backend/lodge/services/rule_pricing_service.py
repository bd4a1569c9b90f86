"""Rule-driven pricing used for quick estimates.

Each night starts from the room's base price and is multiplied by every
applicable seasonal/weekday/special rule in ascending priority order. Add-on
rules contribute a flat amount per guest per night on top. This is a
separate strategy from the rate-table engine and the two are not mixed.
"""

from __future__ import annotations

import datetime
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

from lodge.core.config import get_settings
from lodge.core.dates import DateLike, DateRange, day_type_for
from lodge.models import DayType, PricingRule, PricingRuleType, SeasonType
from lodge.services.pricing_service import (
    ZERO,
    DailyPrice,
    PriceBreakdown,
    PriceLine,
    StayQuote,
    addon_lines,
    check_stay,
    to_money,
)

_DATED_RULE_TYPES = {PricingRuleType.SEASONAL, PricingRuleType.SPECIAL}


@dataclass(slots=True)
class AppliedRule:
    """Audit entry for one rule's contribution."""

    rule_id: str
    rule_name: str
    rule_type: PricingRuleType
    amount: Decimal
    kind: Literal["multiplier", "fixed"]
    date: datetime.date | None = None


@dataclass(slots=True)
class RuleBreakdown:
    base: Decimal = ZERO
    seasonal: Decimal = ZERO
    weekday: Decimal = ZERO
    special: Decimal = ZERO
    addons: Decimal = ZERO

    def add(self, rule_type: PricingRuleType, amount: Decimal) -> None:
        bucket = "addons" if rule_type is PricingRuleType.ADDON else rule_type.value
        setattr(self, bucket, getattr(self, bucket) + amount)


@dataclass(slots=True)
class NightlyRulePrice:
    date: datetime.date
    day_type: DayType
    price: Decimal
    peak: bool


@dataclass(slots=True)
class PricingCalculation:
    """Result of :meth:`RulePricing.calculate_price`."""

    room_id: str
    nights: int
    base_price: Decimal
    total_price: Decimal
    applied_rules: list[AppliedRule] = field(default_factory=list)
    breakdown: RuleBreakdown = field(default_factory=RuleBreakdown)
    nightly_prices: list[NightlyRulePrice] = field(default_factory=list)


class RulePricing:
    """Apply priority-ordered pricing rules to a base nightly price."""

    name = "rules"

    def __init__(
        self,
        rules: Iterable[PricingRule],
        *,
        weekend_days: Collection[int] | None = None,
    ) -> None:
        self._rules = list(rules)
        self._weekend_days = frozenset(
            get_settings().weekend_days if weekend_days is None else weekend_days
        )

    @property
    def rules(self) -> list[PricingRule]:
        return list(self._rules)

    def get_applicable_rules(
        self,
        room_type: str | None,
        day: datetime.date,
        day_of_week: int | None = None,
    ) -> list[PricingRule]:
        """Return active rules matching ``day``, lowest priority number first.

        ``day_of_week`` follows :meth:`datetime.date.weekday` (Monday is 0)
        and defaults to the weekday of ``day``.
        """
        weekday = day.weekday() if day_of_week is None else day_of_week
        matching = [
            rule
            for rule in self._rules
            if rule.is_active
            and _matches_room_type(rule, room_type)
            and _matches_day(rule, day, weekday)
        ]
        return sorted(matching, key=lambda rule: rule.priority or 0)

    def calculate_price(
        self,
        room_id: str,
        room_type: str | None,
        base_price: Decimal | int,
        check_in: DateLike,
        check_out: DateLike,
        guest_count: int,
    ) -> PricingCalculation:
        stay = DateRange.parse(check_in, check_out)
        base = to_money(base_price)
        calculation = PricingCalculation(
            room_id=room_id,
            nights=stay.nights,
            base_price=base * stay.nights,
            total_price=ZERO,
        )

        for day in stay.dates():
            night_price = base
            peak = False
            for rule in self.get_applicable_rules(room_type, day):
                if rule.rule_type is PricingRuleType.ADDON or rule.multiplier is None:
                    continue
                previous = night_price
                night_price = to_money(night_price * Decimal(str(rule.multiplier)))
                amount = night_price - previous
                calculation.applied_rules.append(
                    AppliedRule(
                        rule_id=str(rule.id),
                        rule_name=rule.name,
                        rule_type=rule.rule_type,
                        amount=amount,
                        kind="multiplier",
                        date=day,
                    )
                )
                calculation.breakdown.add(rule.rule_type, amount)
                peak = peak or rule.rule_type in _DATED_RULE_TYPES
            calculation.breakdown.base += base
            calculation.total_price += night_price
            calculation.nightly_prices.append(
                NightlyRulePrice(
                    date=day,
                    day_type=day_type_for(day, self._weekend_days),
                    price=night_price,
                    peak=peak,
                )
            )

        for rule in self._addon_rules({room_type}):
            amount = to_money(Decimal(str(rule.fixed_amount)) * guest_count * stay.nights)
            calculation.total_price += amount
            calculation.breakdown.add(PricingRuleType.ADDON, amount)
            calculation.applied_rules.append(
                AppliedRule(
                    rule_id=str(rule.id),
                    rule_name=rule.name,
                    rule_type=rule.rule_type,
                    amount=amount,
                    kind="fixed",
                )
            )
        return calculation

    async def quote(self, stay: StayQuote) -> PriceBreakdown:
        """Price a whole stay with the rules, shaped like the rate-table output."""
        check_stay(stay.rooms, stay.date_range)
        start, end = stay.date_range.start_date, stay.date_range.end_date
        guest_count = stay.guests.total

        per_room = [
            self.calculate_price(
                room.room_id, room.room_type, room.room_rate, start, end, 0
            )
            for room in stay.rooms
        ]
        addon_rules = self._addon_rules({room.room_type for room in stay.rooms})
        nightly_addon_rule_amount = sum(
            (to_money(Decimal(str(rule.fixed_amount)) * guest_count) for rule in addon_rules),
            ZERO,
        )
        addon_item_amount = sum((addon.total_price for addon in stay.addons), ZERO)

        daily: list[DailyPrice] = []
        for index, day in enumerate(stay.date_range.dates()):
            nights = [calc.nightly_prices[index] for calc in per_room]
            room_amount = sum((night.price for night in nights), ZERO)
            addon_amount = nightly_addon_rule_amount
            if index == 0:
                addon_amount += addon_item_amount
            daily.append(
                DailyPrice(
                    date=day,
                    day_type=day_type_for(day, self._weekend_days),
                    season=(
                        SeasonType.PEAK
                        if any(night.peak for night in nights)
                        else SeasonType.REGULAR
                    ),
                    room_amount=room_amount,
                    guest_amount=ZERO,
                    addon_amount=addon_amount,
                    total=room_amount + addon_amount,
                )
            )

        line_items = _rule_room_lines(stay, per_room)
        line_items.extend(
            PriceLine(
                category="addon",
                description=rule.name,
                unit_price=to_money(rule.fixed_amount),
                quantity=guest_count * stay.date_range.nights,
                unit="person-night",
                amount=to_money(rule.fixed_amount) * guest_count * stay.date_range.nights,
            )
            for rule in addon_rules
        )
        line_items.extend(addon_lines(stay.addons))

        room_amount = sum((day.room_amount for day in daily), ZERO)
        addon_amount = sum((day.addon_amount for day in daily), ZERO)
        return PriceBreakdown(
            strategy=self.name,
            room_amount=room_amount,
            guest_amount=ZERO,
            addon_amount=addon_amount,
            total=room_amount + addon_amount,
            daily_breakdown=daily,
            line_items=line_items,
        )

    def _addon_rules(self, room_types: set[str | None]) -> list[PricingRule]:
        return sorted(
            (
                rule
                for rule in self._rules
                if rule.is_active
                and rule.rule_type is PricingRuleType.ADDON
                and rule.fixed_amount
                and (rule.room_type is None or rule.room_type in room_types)
            ),
            key=lambda rule: rule.priority or 0,
        )


def _matches_room_type(rule: PricingRule, room_type: str | None) -> bool:
    return rule.room_type is None or rule.room_type == room_type


def _matches_day(rule: PricingRule, day: datetime.date, weekday: int) -> bool:
    if rule.rule_type in _DATED_RULE_TYPES:
        if rule.start_date is None or rule.end_date is None:
            return False
        return rule.start_date <= day <= rule.end_date
    if rule.rule_type is PricingRuleType.WEEKDAY:
        return weekday in (rule.days_of_week or [])
    return rule.rule_type is PricingRuleType.ADDON


def _rule_room_lines(
    stay: StayQuote, calculations: Sequence[PricingCalculation]
) -> list[PriceLine]:
    lines: list[PriceLine] = []
    for room, calc in zip(stay.rooms, calculations):
        lines.append(
            PriceLine(
                category="room",
                description=f"Room {room.room_id}",
                unit_price=to_money(room.room_rate),
                quantity=calc.nights,
                unit="night",
                amount=calc.breakdown.base,
            )
        )
        adjustments: dict[str, Decimal] = {}
        for applied in calc.applied_rules:
            if applied.kind != "multiplier":
                continue
            adjustments[applied.rule_name] = (
                adjustments.get(applied.rule_name, ZERO) + applied.amount
            )
        lines.extend(
            PriceLine(
                category="room",
                description=f"Room {room.room_id}: {name}",
                unit_price=amount,
                quantity=1,
                unit="adjustment",
                amount=amount,
            )
            for name, amount in adjustments.items()
        )
    return lines
