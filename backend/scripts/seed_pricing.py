"""Seed rooms, the baseline rate table, seasons, pricing rules and add-ons."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.dates import today
from lodge.db.session import get_sessionmaker
from lodge.models import (
    AddOn,
    AddOnCategory,
    AgeGroup,
    DayType,
    PricingRule,
    PricingRuleType,
    Rate,
    Room,
    RoomType,
    RoomUsageType,
    Season,
    SeasonType,
)

ROOMS = [
    ("R101", "Etiquette Room", "1", 25, RoomType.LARGE, 20000, RoomUsageType.SHARED),
    ("R102", "Sewing Room", "1", 35, RoomType.LARGE, 20000, RoomUsageType.SHARED),
    ("R201", "Audio-Visual Room", "2", 21, RoomType.MEDIUM_A, 13000, RoomUsageType.SHARED),
    ("R202", "Library", "2", 10, RoomType.MEDIUM_B, 8000, RoomUsageType.SHARED),
    ("R203", "Class 1-1", "2", 5, RoomType.SMALL_A, 7000, RoomUsageType.PRIVATE),
    ("R204", "Class 1-2", "2", 5, RoomType.SMALL_A, 7000, RoomUsageType.PRIVATE),
    ("R301", "Science Room", "3", 4, RoomType.SMALL_B, 6000, RoomUsageType.PRIVATE),
    ("R302", "Class 2", "3", 3, RoomType.SMALL_C, 5000, RoomUsageType.PRIVATE),
    ("R303", "Class 3", "3", 3, RoomType.SMALL_C, 5000, RoomUsageType.PRIVATE),
]

BASELINE_RATES: dict[RoomUsageType, dict[AgeGroup, tuple[int, int]]] = {
    RoomUsageType.SHARED: {
        AgeGroup.ADULT: (4800, 5856),
        AgeGroup.ADULT_LEADER: (4800, 5856),
        AgeGroup.STUDENT: (4000, 4880),
        AgeGroup.CHILD: (3200, 3904),
        AgeGroup.INFANT: (1600, 1952),
        AgeGroup.BABY: (0, 0),
    },
    RoomUsageType.PRIVATE: {
        AgeGroup.ADULT: (8500, 10370),
        AgeGroup.ADULT_LEADER: (8500, 10370),
        AgeGroup.STUDENT: (7083, 8641),
        AgeGroup.CHILD: (5667, 6913),
        AgeGroup.INFANT: (2833, 3457),
        AgeGroup.BABY: (0, 0),
    },
}

ADD_ONS = [
    ("breakfast", AddOnCategory.MEAL, "Breakfast", "meal", 600, 500, 400, 0),
    ("lunch", AddOnCategory.MEAL, "Lunch", "meal", 1000, 800, 600, 0),
    ("dinner", AddOnCategory.MEAL, "Dinner", "meal", 1500, 1200, 900, 0),
    ("bbq", AddOnCategory.MEAL, "Barbecue", "meal", 2000, 1600, 1200, 0),
    ("projector", AddOnCategory.FACILITY, "Projector", "day", 2000, 0, 0, 0),
    ("sound_system", AddOnCategory.FACILITY, "Sound system", "day", 3000, 0, 0, 0),
    ("flipchart", AddOnCategory.FACILITY, "Flip chart", "day", 500, 0, 0, 0),
    ("bedding", AddOnCategory.EQUIPMENT, "Bedding set", "set", 500, 0, 0, 0),
    ("towel", AddOnCategory.EQUIPMENT, "Towel", "item", 200, 0, 0, 0),
    ("pillow", AddOnCategory.EQUIPMENT, "Pillow", "item", 300, 0, 0, 0),
]


def _peak_window(year: int) -> tuple[date, date]:
    return date(year, 7, 20), date(year, 8, 31)


async def _seed_rooms(session: AsyncSession) -> int:
    existing = set((await session.execute(select(Room.room_id))).scalars().all())
    created = 0
    for room_id, name, floor, capacity, room_type, rate, usage in ROOMS:
        if room_id in existing:
            continue
        session.add(
            Room(
                room_id=room_id,
                name=name,
                floor=floor,
                capacity=capacity,
                room_type=room_type,
                room_rate=Decimal(rate),
                usage_type=usage,
            )
        )
        created += 1
    return created


async def _seed_rates(session: AsyncSession) -> int:
    result = await session.execute(
        select(Rate.day_type, Rate.room_usage, Rate.age_group).where(
            Rate.season_id.is_(None)
        )
    )
    existing = set(result.all())
    created = 0
    for usage, groups in BASELINE_RATES.items():
        for group, (weekday, weekend) in groups.items():
            for day_type, price in ((DayType.WEEKDAY, weekday), (DayType.WEEKEND, weekend)):
                if (day_type, usage, group) in existing:
                    continue
                session.add(
                    Rate(
                        season_id=None,
                        day_type=day_type,
                        room_usage=usage,
                        age_group=group,
                        base_price=Decimal(price),
                    )
                )
                created += 1
    return created


async def _seed_seasons(session: AsyncSession, years: list[int]) -> int:
    names = set((await session.execute(select(Season.name))).scalars().all())
    created = 0
    for year in years:
        name = f"Summer peak {year}"
        if name in names:
            continue
        start, end = _peak_window(year)
        session.add(
            Season(
                name=name,
                season_type=SeasonType.PEAK,
                start_date=start,
                end_date=end,
                room_rate_multiplier=Decimal("1.000"),
                pax_rate_multiplier=Decimal("1.150"),
            )
        )
        created += 1
    return created


async def _seed_rules(session: AsyncSession, years: list[int]) -> int:
    names = set((await session.execute(select(PricingRule.name))).scalars().all())
    rules: list[PricingRule] = [
        PricingRule(
            name="Weekend",
            rule_type=PricingRuleType.WEEKDAY,
            days_of_week=[4, 5],
            multiplier=Decimal("1.22"),
            priority=2,
        )
    ]
    for year in years:
        start, end = _peak_window(year)
        rules.append(
            PricingRule(
                name=f"Summer peak {year}",
                rule_type=PricingRuleType.SEASONAL,
                start_date=start,
                end_date=end,
                multiplier=Decimal("1.15"),
                priority=1,
            )
        )
        rules.append(
            PricingRule(
                name=f"Year end {year}",
                rule_type=PricingRuleType.SPECIAL,
                start_date=date(year, 12, 28),
                end_date=date(year + 1, 1, 3),
                multiplier=Decimal("1.30"),
                priority=3,
            )
        )
    created = 0
    for rule in rules:
        if rule.name in names:
            continue
        session.add(rule)
        created += 1
    return created


async def _seed_add_ons(session: AsyncSession) -> int:
    existing = set((await session.execute(select(AddOn.add_on_id))).scalars().all())
    created = 0
    for add_on_id, category, name, unit, adult, student, child, infant in ADD_ONS:
        if add_on_id in existing:
            continue
        session.add(
            AddOn(
                add_on_id=add_on_id,
                category=category,
                name=name,
                unit=unit,
                adult_fee=Decimal(adult),
                student_fee=Decimal(student),
                child_fee=Decimal(child),
                infant_fee=Decimal(infant),
            )
        )
        created += 1
    return created


async def seed_pricing() -> dict[str, int]:
    current_year = today().year
    years = [current_year, current_year + 1]
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        counts = {
            "rooms": await _seed_rooms(session),
            "rates": await _seed_rates(session),
            "seasons": await _seed_seasons(session, years),
            "pricing rules": await _seed_rules(session, years),
            "add-ons": await _seed_add_ons(session),
        }
        if any(counts.values()):
            await session.commit()
    return counts


def main() -> None:
    counts = asyncio.run(seed_pricing())
    print(", ".join(f"Seeded {count} {label}" for label, count in counts.items()))


if __name__ == "__main__":
    main()
