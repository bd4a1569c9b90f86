"""Exception taxonomy shared by the pricing and booking services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from lodge.services.conflict_service import BookingValidation


class LodgeError(Exception):
    """Base class for domain errors raised by the lodge services."""


class InvalidStayParameters(LodgeError, ValueError):
    """Raised when a stay cannot be priced (bad dates, no rooms, bad counts)."""


class RateNotFound(LodgeError, LookupError):
    """Raised when the rate table has no row for a required tuple."""

    def __init__(
        self,
        *,
        season_id: object,
        day_type: str,
        room_usage: str,
        age_group: str,
    ) -> None:
        self.season_id = season_id
        self.day_type = day_type
        self.room_usage = room_usage
        self.age_group = age_group
        super().__init__(self.key)

    @property
    def key(self) -> str:
        season = self.season_id if self.season_id is not None else "regular"
        return f"{season}/{self.day_type}/{self.room_usage}/{self.age_group}"


class StoreQueryFailure(LodgeError):
    """Raised when the persistent store cannot answer a query."""


class BookingRejected(LodgeError, ValueError):
    """Raised when a booking fails validation at commit time."""

    def __init__(self, validation: "BookingValidation") -> None:
        self.validation = validation
        message = "; ".join(validation.errors) or "Booking validation failed"
        super().__init__(message)


class ConflictDetected(BookingRejected):
    """Raised when a booking overlaps an existing assignment at commit time."""


__all__ = [
    "BookingRejected",
    "ConflictDetected",
    "InvalidStayParameters",
    "LodgeError",
    "RateNotFound",
    "StoreQueryFailure",
]
