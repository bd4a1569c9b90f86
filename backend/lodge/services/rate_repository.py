"""SQLAlchemy-backed access to rooms, seasons, rates and pricing rules."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.errors import StoreQueryFailure
from lodge.models import (
    AgeGroup,
    DayType,
    PricingRule,
    Rate,
    Room,
    RoomUsageType,
    Season,
    SeasonType,
)
from lodge.services.pricing_service import RoomUsage, SeasonSnapshot


class SqlAlchemyRateRepository:
    """Rate repository reading from the relational store."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_season_for_date(
        self, day: datetime.date
    ) -> SeasonSnapshot | None:
        stmt = select(Season).where(
            Season.is_active.is_(True),
            Season.start_date <= day,
            Season.end_date >= day,
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Season lookup failed: {exc}") from exc
        seasons = list(result.scalars().all())
        if not seasons:
            return None
        seasons.sort(
            key=lambda season: (season.season_type is not SeasonType.PEAK, season.start_date)
        )
        return _snapshot(seasons[0])

    async def get_rates(
        self,
        *,
        season_id: uuid.UUID | None,
        day_type: DayType,
        room_usage: RoomUsageType,
    ) -> dict[AgeGroup, Decimal]:
        stmt = select(Rate.age_group, Rate.base_price).where(
            Rate.is_active.is_(True),
            Rate.day_type == day_type,
            Rate.room_usage == room_usage,
        )
        if season_id is None:
            stmt = stmt.where(Rate.season_id.is_(None))
        else:
            stmt = stmt.where(Rate.season_id == season_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Rate lookup failed: {exc}") from exc
        return {age_group: Decimal(price) for age_group, price in result.all()}

    async def list_active_rules(self) -> list[PricingRule]:
        stmt = (
            select(PricingRule)
            .where(PricingRule.is_active.is_(True))
            .order_by(PricingRule.priority, PricingRule.name)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Pricing rule lookup failed: {exc}") from exc
        return list(result.scalars().all())

    async def get_room_usages(self, room_ids: Sequence[str]) -> list[RoomUsage]:
        """Return active rooms as :class:`RoomUsage` in the requested order.

        Raises ``ValueError`` naming any room that is unknown or inactive.
        """
        stmt = select(Room).where(Room.room_id.in_(room_ids), Room.is_active.is_(True))
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreQueryFailure(f"Room lookup failed: {exc}") from exc
        rooms = {room.room_id: room for room in result.scalars().all()}
        unknown = [room_id for room_id in room_ids if room_id not in rooms]
        if unknown:
            raise ValueError(f"Unknown or inactive rooms: {', '.join(unknown)}")
        return [
            RoomUsage(
                room_id=room.room_id,
                room_rate=Decimal(room.room_rate),
                capacity=room.capacity,
                usage_type=room.usage_type,
                room_type=room.room_type.value,
            )
            for room in (rooms[room_id] for room_id in dict.fromkeys(room_ids))
        ]


def _snapshot(season: Season) -> SeasonSnapshot:
    return SeasonSnapshot(
        season_id=season.id,
        season_type=season.season_type,
        name=season.name,
        pax_rate_multiplier=Decimal(season.pax_rate_multiplier),
        room_rate_multiplier=Decimal(season.room_rate_multiplier),
    )
