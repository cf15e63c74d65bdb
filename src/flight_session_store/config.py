"""Configuration settings for the flight session store."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flight_session_store.constants import (
    MAX_GPS_POINTS,
    MAX_SESSION_AGE_SECONDS,
    RECENT_GPS_POINTS,
    SAVE_INTERVAL_SECONDS,
    SESSION_KEY,
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="FLIGHT_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Durable storage settings
    storage_dir: Path = Path.home() / ".flight-session-store"
    session_key: str = SESSION_KEY

    # Checkpointing - how often the active session is written to storage
    save_interval_seconds: float = Field(default=SAVE_INTERVAL_SECONDS, gt=0)

    # Recovery - persisted sessions older than this are discarded on startup
    max_session_age_seconds: float = Field(default=MAX_SESSION_AGE_SECONDS, gt=0)

    # GPS track bounds
    max_gps_points: int = Field(default=MAX_GPS_POINTS, gt=0)
    recent_gps_points: int = Field(default=RECENT_GPS_POINTS, ge=0)

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_track_bounds(self) -> "Settings":
        if self.recent_gps_points >= self.max_gps_points:
            raise ValueError("recent_gps_points must be smaller than max_gps_points")
        return self


# Global settings instance
settings = Settings()
