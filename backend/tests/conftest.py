"""Test fixtures for the lodge backend."""
from __future__ import annotations

import datetime
import os
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from lodge.core.config import get_settings
from lodge.db.base import Base
from lodge.db.session import dispose_engine, get_sessionmaker
from lodge.main import app
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

PEAK_START = datetime.date(2025, 7, 20)
PEAK_END = datetime.date(2025, 8, 31)

BASELINE_RATES = {
    RoomUsageType.SHARED: {
        AgeGroup.ADULT: (4800, 5856),
        AgeGroup.STUDENT: (4000, 4880),
        AgeGroup.CHILD: (3200, 3904),
        AgeGroup.INFANT: (1600, 1952),
        AgeGroup.BABY: (0, 0),
    },
    RoomUsageType.PRIVATE: {
        AgeGroup.ADULT: (8500, 10370),
        AgeGroup.STUDENT: (7083, 8641),
        AgeGroup.CHILD: (5667, 6913),
        AgeGroup.INFANT: (2833, 3457),
        AgeGroup.BABY: (0, 0),
    },
}


async def seed_catalog(session: AsyncSession) -> dict[str, object]:
    """Insert rooms, rates, a peak season, pricing rules and add-ons."""
    session.add_all(
        [
            Room(
                room_id="201",
                name="Audio-Visual Room",
                floor="2",
                capacity=4,
                room_type=RoomType.MEDIUM_A,
                room_rate=Decimal("20000"),
                usage_type=RoomUsageType.SHARED,
            ),
            Room(
                room_id="202",
                name="Class 1-1",
                floor="2",
                capacity=2,
                room_type=RoomType.SMALL_A,
                room_rate=Decimal("7000"),
                usage_type=RoomUsageType.PRIVATE,
            ),
            Room(
                room_id="203",
                name="Library",
                floor="2",
                capacity=6,
                room_type=RoomType.MEDIUM_B,
                room_rate=Decimal("8000"),
                usage_type=RoomUsageType.SHARED,
            ),
            Room(
                room_id="204",
                name="Closed Room",
                floor="2",
                capacity=8,
                room_type=RoomType.LARGE,
                room_rate=Decimal("20000"),
                usage_type=RoomUsageType.SHARED,
                is_active=False,
            ),
        ]
    )
    for usage, groups in BASELINE_RATES.items():
        for group, (weekday, weekend) in groups.items():
            session.add(
                Rate(
                    day_type=DayType.WEEKDAY,
                    room_usage=usage,
                    age_group=group,
                    base_price=Decimal(weekday),
                )
            )
            session.add(
                Rate(
                    day_type=DayType.WEEKEND,
                    room_usage=usage,
                    age_group=group,
                    base_price=Decimal(weekend),
                )
            )

    peak = Season(
        name="Summer peak",
        season_type=SeasonType.PEAK,
        start_date=PEAK_START,
        end_date=PEAK_END,
        room_rate_multiplier=Decimal("1.000"),
        pax_rate_multiplier=Decimal("1.150"),
    )
    session.add(peak)
    await session.flush()
    session.add(
        Rate(
            season_id=peak.id,
            day_type=DayType.WEEKDAY,
            room_usage=RoomUsageType.SHARED,
            age_group=AgeGroup.ADULT,
            base_price=Decimal("5000"),
        )
    )

    session.add_all(
        [
            PricingRule(
                name="Weekend",
                rule_type=PricingRuleType.WEEKDAY,
                days_of_week=[4, 5],
                multiplier=Decimal("1.22"),
                priority=2,
            ),
            PricingRule(
                name="Summer peak",
                rule_type=PricingRuleType.SEASONAL,
                start_date=PEAK_START,
                end_date=PEAK_END,
                multiplier=Decimal("1.15"),
                priority=1,
            ),
            PricingRule(
                name="Linen",
                rule_type=PricingRuleType.ADDON,
                fixed_amount=Decimal("200"),
                priority=5,
            ),
            PricingRule(
                name="Retired promotion",
                rule_type=PricingRuleType.SPECIAL,
                start_date=datetime.date(2025, 1, 1),
                end_date=datetime.date(2030, 12, 31),
                multiplier=Decimal("0.5"),
                priority=0,
                is_active=False,
            ),
        ]
    )
    session.add_all(
        [
            AddOn(
                add_on_id="breakfast",
                category=AddOnCategory.MEAL,
                name="Breakfast",
                unit="meal",
                adult_fee=Decimal("600"),
                student_fee=Decimal("500"),
                child_fee=Decimal("400"),
                infant_fee=Decimal("0"),
            ),
            AddOn(
                add_on_id="projector",
                category=AddOnCategory.FACILITY,
                name="Projector",
                unit="day",
                adult_fee=Decimal("2000"),
            ),
        ]
    )
    await session.commit()
    return {"peak_season_id": peak.id}


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def seeded_database(reset_database: None, db_url: str) -> dict[str, object]:
    """Recreate the schema and load the reference catalog."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        return await seed_catalog(session)


@pytest_asyncio.fixture()
async def app_context(
    seeded_database: dict[str, object],
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client over a seeded database."""
    context = dict(seeded_database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
