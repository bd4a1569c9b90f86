"""ORM models package export."""

from lodge.models.booking import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingLock,
    BookingRoom,
    BookingStatus,
)
from lodge.models.pricing import (
    AddOn,
    AddOnCategory,
    AgeGroup,
    DayType,
    PricingRule,
    PricingRuleType,
    Rate,
    Season,
    SeasonType,
)
from lodge.models.room import Room, RoomType, RoomUsageType

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "AddOn",
    "AddOnCategory",
    "AgeGroup",
    "Booking",
    "BookingLock",
    "BookingRoom",
    "BookingStatus",
    "DayType",
    "PricingRule",
    "PricingRuleType",
    "Rate",
    "Room",
    "RoomType",
    "RoomUsageType",
    "Season",
    "SeasonType",
]
