"""Rate-table pricing engine for stays."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Protocol

from lodge.core.config import get_settings
from lodge.core.dates import DateRange, day_type_for
from lodge.core.errors import InvalidStayParameters, RateNotFound
from lodge.models import AgeGroup, DayType, RoomUsageType, SeasonType

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("1")
ZERO = Decimal("0")

_AGE_GROUP_LABELS = {
    AgeGroup.ADULT: "Adult",
    AgeGroup.ADULT_LEADER: "Adult (group leader)",
    AgeGroup.STUDENT: "Student",
    AgeGroup.CHILD: "Child",
    AgeGroup.INFANT: "Infant",
    AgeGroup.BABY: "Baby",
}


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Round an amount half-up to whole yen."""
    return Decimal(str(value)).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class GuestCount:
    """Number of guests per age group."""

    adult: int = 0
    adult_leader: int = 0
    student: int = 0
    child: int = 0
    infant: int = 0
    baby: int = 0

    def __post_init__(self) -> None:
        for item in fields(self):
            if getattr(self, item.name) < 0:
                raise InvalidStayParameters(
                    f"Guest count for {item.name} must not be negative"
                )

    @classmethod
    def from_mapping(cls, counts: Mapping[AgeGroup | str, int]) -> "GuestCount":
        return cls(**{AgeGroup(key).value: int(value) for key, value in counts.items()})

    def items(self) -> list[tuple[AgeGroup, int]]:
        return [(group, getattr(self, group.value)) for group in AgeGroup]

    @property
    def total(self) -> int:
        return sum(count for _, count in self.items())


@dataclass(frozen=True, slots=True)
class RoomUsage:
    """A room selected for a stay, frozen for one price calculation."""

    room_id: str
    room_rate: Decimal
    capacity: int
    usage_type: RoomUsageType = RoomUsageType.SHARED
    room_type: str | None = None


@dataclass(slots=True)
class AddonItem:
    """A whole-stay extra; per-night extras are pre-multiplied by the caller."""

    addon_id: str
    name: str
    quantity: int
    unit_price: Decimal
    unit: str = "item"

    @property
    def total_price(self) -> Decimal:
        return to_money(Decimal(self.quantity) * Decimal(self.unit_price))


@dataclass(slots=True)
class DailyPrice:
    """Price of a single night of a stay."""

    date: datetime.date
    day_type: DayType
    season: SeasonType
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total: Decimal


@dataclass(slots=True)
class PriceLine:
    """Estimate line contributing to a breakdown."""

    category: str
    description: str
    unit_price: Decimal
    quantity: int
    unit: str
    amount: Decimal
    age_group: AgeGroup | None = None


@dataclass(slots=True)
class PriceBreakdown:
    """Aggregate pricing output for a stay."""

    strategy: str
    room_amount: Decimal
    guest_amount: Decimal
    addon_amount: Decimal
    total: Decimal
    daily_breakdown: list[DailyPrice]
    line_items: list[PriceLine] = field(default_factory=list)
    missing_rates: list[str] = field(default_factory=list)

    @property
    def nights(self) -> int:
        return len(self.daily_breakdown)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the breakdown to plain types for responses."""
        return {
            "strategy": self.strategy,
            "room_amount": _to_str(self.room_amount),
            "guest_amount": _to_str(self.guest_amount),
            "addon_amount": _to_str(self.addon_amount),
            "total": _to_str(self.total),
            "daily_breakdown": [
                {
                    "date": day.date.isoformat(),
                    "day_type": day.day_type.value,
                    "season": day.season.value,
                    "room_amount": _to_str(day.room_amount),
                    "guest_amount": _to_str(day.guest_amount),
                    "addon_amount": _to_str(day.addon_amount),
                    "total": _to_str(day.total),
                }
                for day in self.daily_breakdown
            ],
            "missing_rates": list(self.missing_rates),
        }


def _to_str(value: Decimal) -> str:
    return f"{to_money(value):f}"


@dataclass(frozen=True, slots=True)
class SeasonSnapshot:
    """Season attributes needed to price one night."""

    season_id: uuid.UUID | None
    season_type: SeasonType
    name: str = "Regular"
    pax_rate_multiplier: Decimal = Decimal("1")
    room_rate_multiplier: Decimal = Decimal("1")


REGULAR_SEASON = SeasonSnapshot(season_id=None, season_type=SeasonType.REGULAR)


class RateRepository(Protocol):
    """Read access to seasons and the per-person rate table."""

    async def get_season_for_date(
        self, day: datetime.date
    ) -> SeasonSnapshot | None: ...

    async def get_rates(
        self,
        *,
        season_id: uuid.UUID | None,
        day_type: DayType,
        room_usage: RoomUsageType,
    ) -> Mapping[AgeGroup, Decimal]: ...


@dataclass(slots=True)
class StayQuote:
    """Inputs shared by every pricing strategy."""

    rooms: Sequence[RoomUsage]
    guests: GuestCount
    date_range: DateRange
    addons: Sequence[AddonItem] = ()


class PricingStrategy(Protocol):
    """Anything that turns a stay into a :class:`PriceBreakdown`."""

    name: str

    async def quote(self, stay: StayQuote) -> PriceBreakdown: ...


def determine_usage_type(rooms: Iterable[RoomUsage]) -> RoomUsageType:
    """Private pricing applies as soon as one private room is in the stay."""
    if any(room.usage_type is RoomUsageType.PRIVATE for room in rooms):
        return RoomUsageType.PRIVATE
    return RoomUsageType.SHARED


def check_stay(rooms: Sequence[RoomUsage], date_range: DateRange) -> None:
    if not rooms:
        raise InvalidStayParameters("At least one room is required to price a stay")
    if date_range.nights < 1:
        raise InvalidStayParameters("A stay must cover at least one night")


def addon_lines(addons: Iterable[AddonItem]) -> list[PriceLine]:
    return [
        PriceLine(
            category="addon",
            description=addon.name,
            unit_price=to_money(addon.unit_price),
            quantity=addon.quantity,
            unit=addon.unit,
            amount=addon.total_price,
        )
        for addon in addons
    ]


class RateTablePricing:
    """Detailed pricing: flat room rates plus per-person rate-table charges.

    The room charge accumulates each room's literal ``room_rate`` every
    night. Season and day-type only affect the per-person charge, which is
    looked up in the rate table and scaled by the season's pax multiplier.
    Add-ons are whole-stay amounts booked against the first night.
    """

    name = "rate_table"

    def __init__(
        self,
        repository: RateRepository,
        *,
        weekend_days: Collection[int] | None = None,
    ) -> None:
        self._repository = repository
        self._weekend_days = frozenset(
            get_settings().weekend_days if weekend_days is None else weekend_days
        )

    async def quote(self, stay: StayQuote) -> PriceBreakdown:
        return await self.calculate_total_price(
            stay.rooms, stay.guests, stay.date_range, stay.addons
        )

    async def calculate_total_price(
        self,
        rooms: Sequence[RoomUsage],
        guests: GuestCount,
        date_range: DateRange,
        addons: Sequence[AddonItem] = (),
    ) -> PriceBreakdown:
        check_stay(rooms, date_range)

        usage_type = determine_usage_type(rooms)
        nightly_room_amount = sum(
            (to_money(room.room_rate) for room in rooms), ZERO
        )
        addon_amount = sum((addon.total_price for addon in addons), ZERO)
        active_groups = [(group, count) for group, count in guests.items() if count > 0]

        seasons: dict[datetime.date, SeasonSnapshot] = {}
        rate_cache: dict[tuple[Any, DayType], dict[AgeGroup, Decimal]] = {}
        missing: list[str] = []
        guest_lines: dict[tuple[AgeGroup, DayType, SeasonType, Decimal], PriceLine] = {}
        daily: list[DailyPrice] = []

        for index, day in enumerate(date_range.dates()):
            day_type = day_type_for(day, self._weekend_days)
            season = seasons.get(day)
            if season is None:
                season = await self._repository.get_season_for_date(day) or REGULAR_SEASON
                seasons[day] = season

            guest_amount = ZERO
            if active_groups:
                cache_key = (season.season_id, day_type)
                rates = rate_cache.get(cache_key)
                if rates is None:
                    rates = await self._load_rates(season, day_type, usage_type)
                    rate_cache[cache_key] = rates

                for group, count in active_groups:
                    try:
                        unit_price = self._unit_price(
                            rates, season, day_type, usage_type, group
                        )
                    except RateNotFound as exc:
                        if exc.key not in missing:
                            logger.warning(
                                "No rate for %s; pricing %s guests at 0", exc.key, group.value
                            )
                            missing.append(exc.key)
                        unit_price = ZERO
                    amount = unit_price * count
                    guest_amount += amount
                    _add_guest_line(
                        guest_lines, group, day_type, season.season_type, unit_price, count, amount
                    )

            day_addon_amount = addon_amount if index == 0 else ZERO
            daily.append(
                DailyPrice(
                    date=day,
                    day_type=day_type,
                    season=season.season_type,
                    room_amount=nightly_room_amount,
                    guest_amount=guest_amount,
                    addon_amount=day_addon_amount,
                    total=nightly_room_amount + guest_amount + day_addon_amount,
                )
            )

        room_amount = sum((day.room_amount for day in daily), ZERO)
        guest_amount_total = sum((day.guest_amount for day in daily), ZERO)
        line_items = [
            PriceLine(
                category="room",
                description=f"Room {room.room_id}",
                unit_price=to_money(room.room_rate),
                quantity=date_range.nights,
                unit="night",
                amount=to_money(room.room_rate) * date_range.nights,
            )
            for room in rooms
        ]
        line_items.extend(guest_lines.values())
        line_items.extend(addon_lines(addons))

        return PriceBreakdown(
            strategy=self.name,
            room_amount=room_amount,
            guest_amount=guest_amount_total,
            addon_amount=addon_amount,
            total=room_amount + guest_amount_total + addon_amount,
            daily_breakdown=daily,
            line_items=line_items,
            missing_rates=missing,
        )

    async def _load_rates(
        self,
        season: SeasonSnapshot,
        day_type: DayType,
        usage_type: RoomUsageType,
    ) -> dict[AgeGroup, Decimal]:
        rates = dict(
            await self._repository.get_rates(
                season_id=None, day_type=day_type, room_usage=usage_type
            )
        )
        if season.season_id is not None:
            rates.update(
                await self._repository.get_rates(
                    season_id=season.season_id,
                    day_type=day_type,
                    room_usage=usage_type,
                )
            )
        return rates

    @staticmethod
    def _unit_price(
        rates: Mapping[AgeGroup, Decimal],
        season: SeasonSnapshot,
        day_type: DayType,
        usage_type: RoomUsageType,
        group: AgeGroup,
    ) -> Decimal:
        base_price = rates.get(group)
        if base_price is None:
            raise RateNotFound(
                season_id=season.season_id,
                day_type=day_type.value,
                room_usage=usage_type.value,
                age_group=group.value,
            )
        return to_money(Decimal(base_price) * Decimal(season.pax_rate_multiplier))


def _add_guest_line(
    lines: dict[tuple[AgeGroup, DayType, SeasonType, Decimal], PriceLine],
    group: AgeGroup,
    day_type: DayType,
    season_type: SeasonType,
    unit_price: Decimal,
    count: int,
    amount: Decimal,
) -> None:
    key = (group, day_type, season_type, unit_price)
    line = lines.get(key)
    if line is None:
        lines[key] = PriceLine(
            category="guest",
            description=(
                f"{_AGE_GROUP_LABELS[group]} {day_type.value} ({season_type.value})"
            ),
            unit_price=unit_price,
            quantity=count,
            unit="person-night",
            amount=amount,
            age_group=group,
        )
        return
    line.quantity += count
    line.amount += amount


__all__ = [
    "AddonItem",
    "DailyPrice",
    "GuestCount",
    "PriceBreakdown",
    "PriceLine",
    "PricingStrategy",
    "RateRepository",
    "RateTablePricing",
    "REGULAR_SEASON",
    "RoomUsage",
    "SeasonSnapshot",
    "StayQuote",
    "determine_usage_type",
    "to_money",
]
