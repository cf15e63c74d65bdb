"""Flight session domain models."""

import math
from datetime import UTC, datetime
from typing import Annotated
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, Field, field_validator

from flight_session_store.constants import RESTING_G_FORCE, SESSION_SCHEMA_VERSION


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def ensure_finite(value: float | None) -> float | None:
    # NaN and inf serialize to JSON null and would make the record undecodable
    if value is not None and not math.isfinite(value):
        raise ValueError(f"Value must be finite, got {value}")
    return value


UTCDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
FiniteFloat = Annotated[float, AfterValidator(ensure_finite)]


class Wing(BaseModel):
    """Equipment flown during a session."""

    id: str
    name: str
    size: str | None = None


class GPSTrackPoint(BaseModel):
    """A single GPS sample of the flight track."""

    timestamp: UTCDatetime
    latitude: FiniteFloat
    longitude: FiniteFloat
    altitude: FiniteFloat | None = None


class Telemetry(BaseModel):
    """Aggregate flight metrics pushed by the telemetry source."""

    start_altitude: FiniteFloat | None = None
    max_altitude: FiniteFloat | None = None
    current_altitude: FiniteFloat | None = None
    total_distance: FiniteFloat = 0.0
    max_speed: FiniteFloat = 0.0
    max_g_force: FiniteFloat = RESTING_G_FORCE
    gps_track_points: list[GPSTrackPoint] = Field(default_factory=list)


class FlightSession(BaseModel):
    """In-progress flight, persisted periodically so it survives a crash.

    Wing, spot and start date are captured once at start. Telemetry fields
    are overwritten by each update; running maxima are computed by the
    telemetry source, not here.
    """

    schema_version: int = SESSION_SCHEMA_VERSION

    wing_id: str
    wing_name: str
    wing_size: str | None = None
    start_date: UTCDatetime
    spot_name: str | None = None

    # Tracking data
    start_altitude: FiniteFloat | None = None
    max_altitude: FiniteFloat | None = None
    current_altitude: FiniteFloat | None = None
    total_distance: FiniteFloat = 0.0
    max_speed: FiniteFloat = 0.0
    max_g_force: FiniteFloat = Field(default=RESTING_G_FORCE, ge=RESTING_G_FORCE)

    gps_track_points: list[GPSTrackPoint] = Field(default_factory=list)

    # Metadata
    last_save_date: UTCDatetime
    is_active: bool = True

    @field_validator("schema_version")
    @classmethod
    def _known_schema_version(cls, value: int) -> int:
        if value > SESSION_SCHEMA_VERSION:
            raise ValueError(f"Unsupported session schema version {value}")
        return value

    @classmethod
    def new(cls, wing: Wing, start_date: datetime, spot_name: str | None = None) -> "FlightSession":
        """Create a session with zeroed telemetry for the given wing."""
        return cls(
            wing_id=wing.id,
            wing_name=wing.name,
            wing_size=wing.size,
            start_date=start_date,
            spot_name=spot_name,
            last_save_date=start_date,
        )


class RecoveredFlightData(BaseModel):
    """Fields of a session needed to build a finished flight."""

    wing_id: str
    start_date: UTCDatetime
    spot_name: str | None = None
    start_altitude: float | None = None
    max_altitude: float | None = None
    end_altitude: float | None = None
    total_distance: float = 0.0
    max_speed: float = 0.0
    max_g_force: float = RESTING_G_FORCE
    gps_track: list[GPSTrackPoint] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: FlightSession) -> "RecoveredFlightData":
        return cls(
            wing_id=session.wing_id,
            start_date=session.start_date,
            spot_name=session.spot_name,
            start_altitude=session.start_altitude,
            max_altitude=session.max_altitude,
            end_altitude=session.current_altitude,
            total_distance=session.total_distance,
            max_speed=session.max_speed,
            max_g_force=session.max_g_force,
            gps_track=[point.model_copy() for point in session.gps_track_points],
        )

    def to_flight_record(self, end_date: datetime) -> "FlightRecord":
        """Build the finished-flight record handed off to the phone."""
        end_date = ensure_utc(end_date)
        duration = int((end_date - self.start_date).total_seconds())
        return FlightRecord(
            wing_id=self.wing_id,
            start_date=self.start_date,
            end_date=end_date,
            duration_seconds=max(duration, 0),
            spot_name=self.spot_name,
            start_altitude=self.start_altitude,
            max_altitude=self.max_altitude,
            end_altitude=self.end_altitude,
            total_distance=self.total_distance,
            max_speed=self.max_speed,
            max_g_force=self.max_g_force,
            gps_track=self.gps_track,
        )


class FlightRecord(BaseModel):
    """A finished flight, ready to be sent to the phone-side store."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    wing_id: str
    start_date: UTCDatetime
    end_date: UTCDatetime
    duration_seconds: int = Field(ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    spot_name: str | None = None
    start_altitude: float | None = None
    max_altitude: float | None = None
    end_altitude: float | None = None
    total_distance: float = 0.0
    max_speed: float = 0.0
    max_g_force: float = RESTING_G_FORCE
    gps_track: list[GPSTrackPoint] = Field(default_factory=list)
