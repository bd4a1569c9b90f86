"""Tests for the rate-table pricing engine."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Mapping
from decimal import Decimal

import pytest

from lodge.core.dates import DateRange
from lodge.core.errors import InvalidStayParameters
from lodge.models import AgeGroup, DayType, RoomUsageType, SeasonType
from lodge.services.pricing_service import (
    AddonItem,
    GuestCount,
    RateTablePricing,
    RoomUsage,
    SeasonSnapshot,
    StayQuote,
)

pytestmark = pytest.mark.asyncio

PEAK_ID = uuid.uuid4()
PEAK = SeasonSnapshot(
    season_id=PEAK_ID,
    season_type=SeasonType.PEAK,
    name="Summer peak",
    pax_rate_multiplier=Decimal("1.15"),
)

BASELINE = {
    (DayType.WEEKDAY, RoomUsageType.SHARED): {
        AgeGroup.ADULT: Decimal("4800"),
        AgeGroup.STUDENT: Decimal("4000"),
        AgeGroup.CHILD: Decimal("3200"),
    },
    (DayType.WEEKEND, RoomUsageType.SHARED): {
        AgeGroup.ADULT: Decimal("5856"),
        AgeGroup.STUDENT: Decimal("4880"),
        AgeGroup.CHILD: Decimal("3904"),
    },
    (DayType.WEEKDAY, RoomUsageType.PRIVATE): {AgeGroup.ADULT: Decimal("8500")},
    (DayType.WEEKEND, RoomUsageType.PRIVATE): {AgeGroup.ADULT: Decimal("10370")},
}


class FakeRateRepository:
    """In-memory rate repository with one optional peak season."""

    def __init__(
        self,
        *,
        peak: tuple[datetime.date, datetime.date] | None = None,
        season_rates: Mapping[tuple[DayType, RoomUsageType], Mapping[AgeGroup, Decimal]]
        | None = None,
    ) -> None:
        self.peak = peak
        self.season_rates = season_rates or {}
        self.rate_calls = 0

    async def get_season_for_date(self, day: datetime.date) -> SeasonSnapshot | None:
        if self.peak and self.peak[0] <= day <= self.peak[1]:
            return PEAK
        return None

    async def get_rates(self, *, season_id, day_type, room_usage):
        self.rate_calls += 1
        if season_id is None:
            return dict(BASELINE.get((day_type, room_usage), {}))
        return dict(self.season_rates.get((day_type, room_usage), {}))


def _room(room_id: str = "201", rate: str = "20000", **kwargs) -> RoomUsage:
    return RoomUsage(room_id=room_id, room_rate=Decimal(rate), capacity=4, **kwargs)


def _assert_consistent(breakdown) -> None:
    assert breakdown.total == (
        breakdown.room_amount + breakdown.guest_amount + breakdown.addon_amount
    )
    assert breakdown.total == sum(day.total for day in breakdown.daily_breakdown)
    assert breakdown.total == sum(line.amount for line in breakdown.line_items)


async def test_room_only_stay_charges_literal_room_rate() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})

    breakdown = await engine.calculate_total_price(
        [_room()], GuestCount(), DateRange.parse("2025-06-15", "2025-06-17")
    )

    assert breakdown.room_amount == Decimal("40000")
    assert breakdown.guest_amount == Decimal("0")
    assert breakdown.total == Decimal("40000")
    assert breakdown.nights == 2
    assert [day.date for day in breakdown.daily_breakdown] == [
        datetime.date(2025, 6, 15),
        datetime.date(2025, 6, 16),
    ]
    _assert_consistent(breakdown)


async def test_guest_charges_follow_day_type() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})

    # Thursday then Friday night
    breakdown = await engine.calculate_total_price(
        [_room()], GuestCount(adult=2), DateRange.parse("2025-06-12", "2025-06-14")
    )

    thursday, friday = breakdown.daily_breakdown
    assert thursday.day_type is DayType.WEEKDAY
    assert thursday.guest_amount == Decimal("9600")
    assert friday.day_type is DayType.WEEKEND
    assert friday.guest_amount == Decimal("11712")
    assert breakdown.total == Decimal("61312")
    _assert_consistent(breakdown)


async def test_peak_season_scales_guest_rates_but_not_room_rate() -> None:
    repository = FakeRateRepository(
        peak=(datetime.date(2025, 7, 20), datetime.date(2025, 8, 31))
    )
    engine = RateTablePricing(repository, weekend_days={4, 5})

    breakdown = await engine.calculate_total_price(
        [_room()],
        GuestCount(adult=1, student=1),
        DateRange.parse("2025-07-21", "2025-07-22"),
    )

    (night,) = breakdown.daily_breakdown
    assert night.season is SeasonType.PEAK
    assert night.room_amount == Decimal("20000")
    assert night.guest_amount == Decimal("5520") + Decimal("4600")
    _assert_consistent(breakdown)


async def test_season_rows_override_baseline() -> None:
    repository = FakeRateRepository(
        peak=(datetime.date(2025, 7, 20), datetime.date(2025, 8, 31)),
        season_rates={
            (DayType.WEEKDAY, RoomUsageType.SHARED): {AgeGroup.ADULT: Decimal("5000")}
        },
    )
    engine = RateTablePricing(repository, weekend_days={4, 5})

    breakdown = await engine.calculate_total_price(
        [_room()],
        GuestCount(adult=1, child=1),
        DateRange.parse("2025-07-21", "2025-07-22"),
    )

    assert breakdown.guest_amount == Decimal("5750") + Decimal("3680")


async def test_private_room_switches_rate_table() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})

    breakdown = await engine.calculate_total_price(
        [_room(), _room("202", "7000", usage_type=RoomUsageType.PRIVATE)],
        GuestCount(adult=1),
        DateRange.parse("2025-06-16", "2025-06-17"),
    )

    assert breakdown.room_amount == Decimal("27000")
    assert breakdown.guest_amount == Decimal("8500")


async def test_missing_rate_is_priced_zero_and_reported(caplog) -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})

    with caplog.at_level(logging.WARNING, logger="lodge.services.pricing_service"):
        breakdown = await engine.calculate_total_price(
            [_room()],
            GuestCount(adult=1, adult_leader=1),
            DateRange.parse("2025-06-16", "2025-06-18"),
        )

    assert breakdown.guest_amount == Decimal("9600")
    assert breakdown.missing_rates == ["regular/weekday/shared/adult_leader"]
    assert "regular/weekday/shared/adult_leader" in caplog.text
    _assert_consistent(breakdown)


async def test_addons_are_counted_once_on_first_night() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})
    addons = [
        AddonItem(addon_id="breakfast", name="Breakfast", quantity=3, unit_price=Decimal("600")),
        AddonItem(addon_id="projector", name="Projector", quantity=1, unit_price=Decimal("2000")),
    ]

    breakdown = await engine.calculate_total_price(
        [_room()], GuestCount(), DateRange.parse("2025-06-15", "2025-06-18"), addons
    )

    assert breakdown.addon_amount == Decimal("3800")
    assert [day.addon_amount for day in breakdown.daily_breakdown] == [
        Decimal("3800"),
        Decimal("0"),
        Decimal("0"),
    ]
    assert breakdown.total == Decimal("60000") + Decimal("3800")
    _assert_consistent(breakdown)


async def test_rates_are_loaded_once_per_season_and_day_type() -> None:
    repository = FakeRateRepository()
    engine = RateTablePricing(repository, weekend_days={4, 5})

    await engine.calculate_total_price(
        [_room()], GuestCount(adult=1), DateRange.parse("2025-06-16", "2025-06-20")
    )

    assert repository.rate_calls == 1


async def test_guest_lines_group_nights_by_price() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})

    breakdown = await engine.calculate_total_price(
        [_room()], GuestCount(adult=2), DateRange.parse("2025-06-15", "2025-06-18")
    )

    guest_lines = [line for line in breakdown.line_items if line.category == "guest"]
    assert len(guest_lines) == 1
    assert guest_lines[0].quantity == 6
    assert guest_lines[0].amount == Decimal("28800")


async def test_quote_matches_calculate_total_price() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})
    stay = StayQuote(
        rooms=[_room()],
        guests=GuestCount(adult=1),
        date_range=DateRange.parse("2025-06-13", "2025-06-15"),
    )

    quote = await engine.quote(stay)

    assert quote.strategy == "rate_table"
    assert quote.total == Decimal("40000") + Decimal("5856") * 2
    assert quote.to_dict()["total"] == "51712"


async def test_empty_room_list_is_rejected() -> None:
    engine = RateTablePricing(FakeRateRepository(), weekend_days={4, 5})
    with pytest.raises(InvalidStayParameters):
        await engine.calculate_total_price(
            [], GuestCount(adult=1), DateRange.parse("2025-06-15", "2025-06-16")
        )


async def test_guest_count_rejects_negative_values() -> None:
    with pytest.raises(InvalidStayParameters):
        GuestCount(child=-1)
    assert GuestCount.from_mapping({"adult": 2, AgeGroup.BABY: 1}).total == 3
