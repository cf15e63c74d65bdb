"""Composition root for the flight session store."""

import logging
import sys

from flight_session_store.config import Settings, settings as default_settings
from flight_session_store.services.session_store import SessionStore
from flight_session_store.services.storage import JsonFileKeyValueStore, KeyValueStore


def configure_logging(level: str | int = "INFO"):
    """Configure logging to stdout with the package format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )
    logging.getLogger("flight_session_store").setLevel(level)


def create_session_store(
    settings: Settings | None = None,
    storage: KeyValueStore | None = None,
) -> SessionStore:
    """Build a SessionStore from settings.

    Storage defaults to JSON files in ``settings.storage_dir``. Any
    recoverable session left by a previous process is loaded here.
    """
    settings = settings or default_settings
    storage = storage or JsonFileKeyValueStore(settings.storage_dir)

    return SessionStore(
        storage,
        session_key=settings.session_key,
        save_interval_seconds=settings.save_interval_seconds,
        max_session_age_seconds=settings.max_session_age_seconds,
        max_gps_points=settings.max_gps_points,
        recent_gps_points=settings.recent_gps_points,
    )
