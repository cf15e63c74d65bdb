"""Active flight session store with periodic checkpointing and crash recovery."""

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from flight_session_store.constants import (
    MAX_GPS_POINTS,
    MAX_SESSION_AGE_SECONDS,
    RECENT_GPS_POINTS,
    RESTING_G_FORCE,
    SAVE_INTERVAL_SECONDS,
    SESSION_KEY,
)
from flight_session_store.models.session import (
    FlightRecord,
    FlightSession,
    GPSTrackPoint,
    RecoveredFlightData,
    Telemetry,
    Wing,
)
from flight_session_store.services.scheduler import PeriodicTask
from flight_session_store.services.storage import KeyValueStore, StorageError
from flight_session_store.services.track import compact_track

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionStore:
    """Owns the single active flight session and its durable checkpoint.

    A persisted session found at construction is adopted as a recoverable
    session when it is still active and was saved less than
    ``max_session_age_seconds`` ago. The periodic save is not re-armed for a
    recovered session; callers decide to finish or discard it.

    Errors never escape: storage and serialization failures are logged and
    the next checkpoint tries again.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        session_key: str = SESSION_KEY,
        save_interval_seconds: float = SAVE_INTERVAL_SECONDS,
        max_session_age_seconds: float = MAX_SESSION_AGE_SECONDS,
        max_gps_points: int = MAX_GPS_POINTS,
        recent_gps_points: int = RECENT_GPS_POINTS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._session_key = session_key
        self._max_session_age_seconds = max_session_age_seconds
        self._max_gps_points = max_gps_points
        self._recent_gps_points = recent_gps_points
        self._clock = clock

        # Guards every read and write of _session
        self._lock = threading.Lock()
        self._session: FlightSession | None = None

        self._saver = PeriodicTask(save_interval_seconds, self.save, name="flight-session-save")

        self._load_saved_session()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self, wing: Wing, spot_name: str | None = None, start_date: datetime | None = None):
        """Start a new flight session, persist it and arm periodic saves."""
        session = FlightSession.new(wing, start_date or self._clock(), spot_name)

        with self._lock:
            if self._session is not None:
                logger.warning(f"Replacing active flight session started at {self._session.start_date}")
            self._session = session

        self.save()
        self.start_periodic_save()

        logger.info(f"Flight session started and saved (wing {wing.id}, spot {spot_name})")

    def update(
        self,
        *,
        start_altitude: float | None,
        max_altitude: float | None,
        current_altitude: float | None,
        total_distance: float,
        max_speed: float,
        max_g_force: float,
        gps_track_points: Sequence[GPSTrackPoint],
    ):
        """Replace the session telemetry. No-op without an active session."""
        try:
            telemetry = Telemetry(
                start_altitude=start_altitude,
                max_altitude=max_altitude,
                current_altitude=current_altitude,
                total_distance=total_distance,
                max_speed=max_speed,
                max_g_force=max_g_force,
                gps_track_points=list(gps_track_points),
            )
        except ValueError as e:
            logger.error(f"Ignoring invalid flight session update: {e}")
            return

        # Copies, so callers cannot mutate stored points outside the lock
        points = [point.model_copy() for point in telemetry.gps_track_points]
        track = compact_track(points, self._max_gps_points, self._recent_gps_points)

        with self._lock:
            session = self._session
            if session is None:
                return

            session.start_altitude = telemetry.start_altitude
            session.max_altitude = telemetry.max_altitude
            session.current_altitude = telemetry.current_altitude
            session.total_distance = telemetry.total_distance
            session.max_speed = telemetry.max_speed
            session.max_g_force = max(telemetry.max_g_force, RESTING_G_FORCE)
            session.gps_track_points = track

    def end_session(self):
        """Clear the session after the flight was handed off normally."""
        self._clear()
        logger.info("Flight session ended and cleared")

    def discard_session(self):
        """Clear the session after the user cancelled the flight."""
        self._clear()
        logger.info("Flight session discarded")

    def finish_session(self, end_date: datetime | None = None) -> FlightRecord | None:
        """End the session and return it as a finished flight record."""
        with self._lock:
            session = self._session
            record = (
                RecoveredFlightData.from_session(session).to_flight_record(end_date or self._clock())
                if session is not None
                else None
            )

        if record is None:
            return None

        self.end_session()
        logger.info(f"Flight {record.id} finished ({record.duration_seconds}s, {len(record.gps_track)} GPS points)")
        return record

    def _clear(self):
        self.stop_periodic_save()
        with self._lock:
            self._session = None
            self._clear_saved_session()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self):
        """Checkpoint the active session. No-op without an active session."""
        with self._lock:
            session = self._session
            if session is None:
                return

            previous_save_date = session.last_save_date
            session.last_save_date = self._clock()
            try:
                data = session.model_dump_json().encode("utf-8")
                self._storage.set(self._session_key, data)
            except (StorageError, ValueError) as e:
                session.last_save_date = previous_save_date
                logger.error(f"Failed to save flight session: {e}")
                return

            logger.debug(f"Flight session saved ({len(session.gps_track_points)} GPS points)")

    def _load_saved_session(self):
        """Adopt a recoverable session left by a previous process."""
        try:
            data = self._storage.get(self._session_key)
        except StorageError as e:
            logger.error(f"Failed to read saved flight session: {e}")
            return

        if data is None:
            logger.debug("No saved flight session found")
            return

        try:
            session = FlightSession.model_validate_json(data)
        except ValueError as e:
            logger.error(f"Failed to load flight session: {e}")
            with self._lock:
                self._clear_saved_session()
            return

        age = (self._clock() - session.last_save_date).total_seconds()

        with self._lock:
            if session.is_active and age < self._max_session_age_seconds:
                self._session = session
                logger.info(
                    f"Recovered flight session from {session.last_save_date}, "
                    f"age: {int(age / 60)} min, GPS points: {len(session.gps_track_points)}"
                )
            else:
                self._clear_saved_session()
                logger.warning(f"Cleared expired flight session (age: {int(age / 60)} min)")

    def _clear_saved_session(self):
        """Delete the persisted record. Caller holds the lock."""
        try:
            self._storage.delete(self._session_key)
        except StorageError as e:
            logger.error(f"Failed to delete saved flight session: {e}")

    # ------------------------------------------------------------------
    # Periodic save
    # ------------------------------------------------------------------

    def start_periodic_save(self):
        self._saver.start()

    def stop_periodic_save(self):
        self._saver.stop()

    # ------------------------------------------------------------------
    # Recovery queries
    # ------------------------------------------------------------------

    @property
    def has_recoverable_session(self) -> bool:
        with self._lock:
            return self._session is not None

    @property
    def active_session(self) -> FlightSession | None:
        """Snapshot of the current session, safe to read without the lock."""
        with self._lock:
            return self._session.model_copy(deep=True) if self._session else None

    @property
    def recovered_flight_duration(self) -> int | None:
        """Seconds since the session started, or None without a session."""
        with self._lock:
            if self._session is None:
                return None
            return int((self._clock() - self._session.start_date).total_seconds())

    def get_recovered_flight_data(self) -> RecoveredFlightData | None:
        with self._lock:
            if self._session is None:
                return None
            return RecoveredFlightData.from_session(self._session)
