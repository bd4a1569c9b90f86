"""Seasons, rate table, pricing rules and add-on catalog models."""

from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from lodge.db.base import Base
from lodge.models.mixins import TimestampMixin
from lodge.models.room import RoomUsageType

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class SeasonType(str, enum.Enum):
    """Calendar season classes."""

    REGULAR = "regular"
    PEAK = "peak"


class DayType(str, enum.Enum):
    """Night classification used by the rate table."""

    WEEKDAY = "weekday"
    WEEKEND = "weekend"


class AgeGroup(str, enum.Enum):
    """Guest age brackets priced separately by the rate table."""

    ADULT = "adult"
    ADULT_LEADER = "adult_leader"
    STUDENT = "student"
    CHILD = "child"
    INFANT = "infant"
    BABY = "baby"


class PricingRuleType(str, enum.Enum):
    """Enumerates rule predicates supported by the rule-driven pricing."""

    SEASONAL = "seasonal"
    WEEKDAY = "weekday"
    SPECIAL = "special"
    ADDON = "addon"


class AddOnCategory(str, enum.Enum):
    """Kinds of optional extras."""

    MEAL = "meal"
    FACILITY = "facility"
    EQUIPMENT = "equipment"


class Season(TimestampMixin, Base):
    """Named calendar interval with its own rate multipliers."""

    __tablename__ = "seasons"
    __table_args__ = (Index("ix_seasons_dates", "start_date", "end_date"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    season_type: Mapped[SeasonType] = mapped_column(Enum(SeasonType), nullable=False)
    start_date: Mapped[datetime.date] = mapped_column(nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(nullable=False)
    room_rate_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 3), default=Decimal("1.000"), nullable=False
    )
    pax_rate_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 3), default=Decimal("1.000"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    rates: Mapped[list["Rate"]] = relationship(
        "Rate", back_populates="season", cascade="all, delete-orphan"
    )


class Rate(TimestampMixin, Base):
    """Per-person nightly price for a season/day/usage/age combination.

    Rows without a season form the baseline table used outside any season
    and for seasons that do not carry their own rows.
    """

    __tablename__ = "rates"
    __table_args__ = (
        UniqueConstraint(
            "season_id",
            "day_type",
            "room_usage",
            "age_group",
            name="uq_rates_lookup",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    season_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("seasons.id", ondelete="CASCADE"), nullable=True
    )
    day_type: Mapped[DayType] = mapped_column(Enum(DayType), nullable=False)
    room_usage: Mapped[RoomUsageType] = mapped_column(
        Enum(RoomUsageType), nullable=False
    )
    age_group: Mapped[AgeGroup] = mapped_column(Enum(AgeGroup), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 0), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    season: Mapped[Season | None] = relationship("Season", back_populates="rates")


class PricingRule(TimestampMixin, Base):
    """Priority-ordered adjustment used by the rule-driven quick estimate."""

    __tablename__ = "pricing_rules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    rule_type: Mapped[PricingRuleType] = mapped_column(
        Enum(PricingRuleType), nullable=False
    )
    room_type: Mapped[str | None] = mapped_column(String(32))
    start_date: Mapped[datetime.date | None] = mapped_column(nullable=True)
    end_date: Mapped[datetime.date | None] = mapped_column(nullable=True)
    days_of_week: Mapped[list[int]] = mapped_column(
        JSONB_TYPE, default=list, nullable=False
    )
    multiplier: Mapped[Decimal | None] = mapped_column(Numeric(6, 3))
    fixed_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 0))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class AddOn(TimestampMixin, Base):
    """Catalog entry for meals, facility time and rental equipment."""

    __tablename__ = "add_ons"

    add_on_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    category: Mapped[AddOnCategory] = mapped_column(
        Enum(AddOnCategory), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(32), default="item", nullable=False)
    adult_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    student_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    child_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    infant_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 0), default=Decimal("0"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def fee_for(self, age_group: AgeGroup | str) -> Decimal:
        """Return the fee charged to one guest of ``age_group``."""
        group = AgeGroup(age_group)
        fees: dict[AgeGroup, Any] = {
            AgeGroup.ADULT: self.adult_fee,
            AgeGroup.ADULT_LEADER: self.adult_fee,
            AgeGroup.STUDENT: self.student_fee,
            AgeGroup.CHILD: self.child_fee,
            AgeGroup.INFANT: self.infant_fee,
        }
        return Decimal(fees.get(group, 0) or 0)
