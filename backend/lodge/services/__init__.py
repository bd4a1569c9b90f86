"""Service layer exports."""
from lodge.services import (
    addon_service,
    booking_service,
    conflict_service,
    pricing_service,
    rule_pricing_service,
    simulation_service,
)

__all__ = [
    "addon_service",
    "booking_service",
    "conflict_service",
    "pricing_service",
    "rule_pricing_service",
    "simulation_service",
]
