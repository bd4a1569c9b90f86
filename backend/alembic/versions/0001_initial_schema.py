"""Initial reservations schema.

Revision ID: 0001
Revises:
Create Date: 2025-06-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

room_usage_enum = postgresql.ENUM("SHARED", "PRIVATE", name="roomusagetype", create_type=False)
room_type_enum = postgresql.ENUM(
    "LARGE",
    "MEDIUM_A",
    "MEDIUM_B",
    "SMALL_A",
    "SMALL_B",
    "SMALL_C",
    name="roomtype",
    create_type=False,
)
season_type_enum = postgresql.ENUM("REGULAR", "PEAK", name="seasontype", create_type=False)
day_type_enum = postgresql.ENUM("WEEKDAY", "WEEKEND", name="daytype", create_type=False)
age_group_enum = postgresql.ENUM(
    "ADULT",
    "ADULT_LEADER",
    "STUDENT",
    "CHILD",
    "INFANT",
    "BABY",
    name="agegroup",
    create_type=False,
)
pricing_rule_type_enum = postgresql.ENUM(
    "SEASONAL", "WEEKDAY", "SPECIAL", "ADDON", name="pricingruletype", create_type=False
)
add_on_category_enum = postgresql.ENUM(
    "MEAL", "FACILITY", "EQUIPMENT", name="addoncategory", create_type=False
)
booking_status_enum = postgresql.ENUM(
    "DRAFT", "CONFIRMED", "CANCELLED", "COMPLETED", name="bookingstatus", create_type=False
)

_ENUMS = (
    room_usage_enum,
    room_type_enum,
    season_type_enum,
    day_type_enum,
    age_group_enum,
    pricing_rule_type_enum,
    add_on_category_enum,
    booking_status_enum,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum in _ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "rooms",
        sa.Column("room_id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("floor", sa.String(length=32), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("room_type", room_type_enum, nullable=False),
        sa.Column("room_rate", sa.Numeric(12, 0), nullable=False),
        sa.Column("usage_type", room_usage_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("description", sa.String(length=512)),
        *_timestamps(),
    )

    op.create_table(
        "seasons",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("season_type", season_type_enum, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("room_rate_multiplier", sa.Numeric(6, 3), nullable=False),
        sa.Column("pax_rate_multiplier", sa.Numeric(6, 3), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_seasons_dates", "seasons", ["start_date", "end_date"])

    op.create_table(
        "rates",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "season_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("seasons.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("day_type", day_type_enum, nullable=False),
        sa.Column("room_usage", room_usage_enum, nullable=False),
        sa.Column("age_group", age_group_enum, nullable=False),
        sa.Column("base_price", sa.Numeric(12, 0), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint(
            "season_id", "day_type", "room_usage", "age_group", name="uq_rates_lookup"
        ),
    )

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rule_type", pricing_rule_type_enum, nullable=False),
        sa.Column("room_type", sa.String(length=32)),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column(
            "days_of_week",
            postgresql.JSONB().with_variant(sa.JSON(), "sqlite"),
            nullable=False,
        ),
        sa.Column("multiplier", sa.Numeric(6, 3)),
        sa.Column("fixed_amount", sa.Numeric(12, 0)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "add_ons",
        sa.Column("add_on_id", sa.String(length=64), primary_key=True),
        sa.Column("category", add_on_category_enum, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=False),
        sa.Column("adult_fee", sa.Numeric(12, 0), nullable=False),
        sa.Column("student_fee", sa.Numeric(12, 0), nullable=False),
        sa.Column("child_fee", sa.Numeric(12, 0), nullable=False),
        sa.Column("infant_fee", sa.Numeric(12, 0), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("guest_name", sa.String(length=200), nullable=False),
        sa.Column("guest_email", sa.String(length=320)),
        sa.Column("guest_phone", sa.String(length=64)),
        sa.Column("guest_org", sa.String(length=200)),
        sa.Column("pax_total", sa.Integer(), nullable=False),
        sa.Column("pax_adults", sa.Integer(), nullable=False),
        sa.Column("pax_adult_leaders", sa.Integer(), nullable=False),
        sa.Column("pax_students", sa.Integer(), nullable=False),
        sa.Column("pax_children", sa.Integer(), nullable=False),
        sa.Column("pax_infants", sa.Integer(), nullable=False),
        sa.Column("pax_babies", sa.Integer(), nullable=False),
        sa.Column("room_amount", sa.Numeric(12, 0), nullable=False),
        sa.Column("guest_amount", sa.Numeric(12, 0), nullable=False),
        sa.Column("addon_amount", sa.Numeric(12, 0), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 0), nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
        sa.CheckConstraint("start_date < end_date", name="ck_bookings_date_order"),
    )
    op.create_index("ix_bookings_dates", "bookings", ["start_date", "end_date"])

    op.create_table(
        "booking_rooms",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "room_id",
            sa.String(length=32),
            sa.ForeignKey("rooms.room_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("assigned_pax", sa.Integer(), nullable=False),
        sa.Column("room_rate", sa.Numeric(12, 0), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 0), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_booking_rooms_room", "booking_rooms", ["room_id"])

    op.create_table(
        "booking_locks",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column(
            "room_id",
            sa.String(length=32),
            sa.ForeignKey("rooms.room_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_booking_locks_room_expiry", "booking_locks", ["room_id", "expires_at"]
    )
    op.create_index("ix_booking_locks_session", "booking_locks", ["session_id"])


def downgrade() -> None:
    op.drop_index("ix_booking_locks_session", table_name="booking_locks")
    op.drop_index("ix_booking_locks_room_expiry", table_name="booking_locks")
    op.drop_table("booking_locks")
    op.drop_index("ix_booking_rooms_room", table_name="booking_rooms")
    op.drop_table("booking_rooms")
    op.drop_index("ix_bookings_dates", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("add_ons")
    op.drop_table("pricing_rules")
    op.drop_table("rates")
    op.drop_index("ix_seasons_dates", table_name="seasons")
    op.drop_table("seasons")
    op.drop_table("rooms")

    bind = op.get_bind()
    for enum in reversed(_ENUMS):
        enum.drop(bind, checkfirst=True)
