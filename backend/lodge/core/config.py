"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Annotated, Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Lodge Reservations API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    local_timezone: str = Field("Asia/Tokyo", alias="LOCAL_TIMEZONE")
    weekend_days: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: [4, 5], alias="WEEKEND_DAYS"
    )

    booking_lock_ttl_minutes: int = Field(10, alias="BOOKING_LOCK_TTL_MINUTES")
    long_stay_warning_nights: int = Field(30, alias="LONG_STAY_WARNING_NIGHTS")
    large_group_warning_guests: int = Field(100, alias="LARGE_GROUP_WARNING_GUESTS")
    capacity_warning_ratio: float = Field(0.8, alias="CAPACITY_WARNING_RATIO")
    alternative_date_search_days: int = Field(14, alias="ALTERNATIVE_DATE_SEARCH_DAYS")
    alternative_date_limit: int = Field(5, alias="ALTERNATIVE_DATE_LIMIT")
    availability_shift_days: int = Field(7, alias="AVAILABILITY_SHIFT_DAYS")
    occupancy_max_nights: int = Field(366, alias="OCCUPANCY_MAX_NIGHTS")
    realtime_poll_seconds: int = Field(30, alias="REALTIME_POLL_SECONDS")

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("weekend_days", mode="before")
    @classmethod
    def _split_weekend_days(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [int(day) for day in value.split(",") if day.strip()]
        return value

    @field_validator("weekend_days")
    @classmethod
    def _check_weekend_days(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("weekend_days must use ISO weekday numbers 0-6 (Mon=0)")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
