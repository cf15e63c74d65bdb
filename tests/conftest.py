"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest

from tests.fixtures.factories import FakeClock, create_session, create_track, create_wing

# =============================================================================
# Temp Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests. Cleanup after test."""
    tmp = Path(tempfile.mkdtemp(prefix="flight_session_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def mock_settings(temp_dir, monkeypatch):
    """Create isolated settings with temp directories."""
    from flight_session_store.config import Settings

    settings = Settings(storage_dir=temp_dir / "storage")

    monkeypatch.setattr("flight_session_store.config.settings", settings)
    monkeypatch.setattr("flight_session_store.app.default_settings", settings)

    return settings


# =============================================================================
# Storage & Clock Fixtures
# =============================================================================


@pytest.fixture
def memory_storage():
    """Fresh in-memory key-value store shared by stores within one test."""
    from flight_session_store.services.storage import InMemoryKeyValueStore

    return InMemoryKeyValueStore()


@pytest.fixture
def file_storage(temp_dir):
    """File-backed key-value store in an isolated directory."""
    from flight_session_store.services.storage import JsonFileKeyValueStore

    return JsonFileKeyValueStore(temp_dir / "storage")


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return FakeClock()


# =============================================================================
# Service Fixtures (Clean instances with isolated storage)
# =============================================================================


@pytest.fixture
def store_factory(memory_storage, clock):
    """Create SessionStores over the shared storage, simulating process restarts.

    Every created store has its periodic save stopped on teardown.
    """
    from flight_session_store.services.session_store import SessionStore

    created = []

    def factory(storage=None, **kwargs):
        kwargs.setdefault("clock", clock)
        store = SessionStore(storage if storage is not None else memory_storage, **kwargs)
        created.append(store)
        return store

    yield factory

    for store in created:
        store.stop_periodic_save()


@pytest.fixture
def clean_session_store(store_factory):
    """Create a fresh SessionStore with empty in-memory storage."""
    return store_factory()


# =============================================================================
# Test Data Fixtures (using factories)
# =============================================================================


@pytest.fixture
def sample_wing():
    """Sample Wing."""
    return create_wing()


@pytest.fixture
def sample_session():
    """Sample FlightSession with some telemetry."""
    return create_session(
        start_altitude=1650.0,
        max_altitude=2100.0,
        current_altitude=1980.0,
        total_distance=4200.0,
        max_speed=14.5,
        max_g_force=2.3,
        gps_track_points=create_track(10),
    )


@pytest.fixture
def track_factory():
    """Factory for creating synthetic GPS tracks."""
    return create_track
