"""Schema exports."""

from lodge.schemas.availability import (
    AvailabilitySearchRead,
    AvailabilitySuggestionRead,
    AvailableRoomRead,
    NightlyOccupancyRead,
    PartialAvailabilityRead,
)
from lodge.schemas.booking import (
    BookingConflictRead,
    BookingCreate,
    BookingRead,
    BookingRoomRead,
    BookingValidateRequest,
    BookingValidationRead,
    ConflictCheckRequest,
    ConflictResolutionRead,
    LockRead,
    LockRequest,
    RealtimeUpdateRead,
    ResolutionOptionRead,
    ResolveRequest,
)
from lodge.schemas.pricing import (
    AddOnRead,
    AddonSelection,
    GuestCountIn,
    PriceBreakdownRead,
    PricingCalculateRequest,
    PricingCalculationRead,
    PricingRuleRead,
    RuleQuoteRequest,
    SimulationRead,
    SimulationRequest,
)

__all__ = [
    "AddOnRead",
    "AddonSelection",
    "AvailabilitySearchRead",
    "AvailabilitySuggestionRead",
    "AvailableRoomRead",
    "BookingConflictRead",
    "BookingCreate",
    "BookingRead",
    "BookingRoomRead",
    "BookingValidateRequest",
    "BookingValidationRead",
    "ConflictCheckRequest",
    "ConflictResolutionRead",
    "GuestCountIn",
    "LockRead",
    "LockRequest",
    "NightlyOccupancyRead",
    "PartialAvailabilityRead",
    "PriceBreakdownRead",
    "PricingCalculateRequest",
    "PricingCalculationRead",
    "PricingRuleRead",
    "RealtimeUpdateRead",
    "ResolutionOptionRead",
    "ResolveRequest",
    "RuleQuoteRequest",
    "SimulationRead",
    "SimulationRequest",
]
