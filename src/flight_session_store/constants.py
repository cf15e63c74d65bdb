"""Centralized constants for the flight_session_store package.

Defaults for the session store and its settings are defined here so that
config, services and tests agree on the same values.
"""

# =============================================================================
# PERSISTENCE
# =============================================================================

# Key of the single active-session record in the durable key-value store
SESSION_KEY = "activeFlightSession"

# Bumped when the stored record layout changes incompatibly
SESSION_SCHEMA_VERSION = 1

# =============================================================================
# CHECKPOINTING & RECOVERY
# =============================================================================

SAVE_INTERVAL_SECONDS = 30.0

# A crashed session older than this is stale garbage, not an ongoing flight
MAX_SESSION_AGE_SECONDS = 4 * 60 * 60  # 4 hours

# =============================================================================
# GPS TRACK
# =============================================================================
# 500 points at one sample every 5 seconds is ~42 minutes of flight.
# Longer flights are thinned, keeping the most recent points dense.

MAX_GPS_POINTS = 500
RECENT_GPS_POINTS = 100

# =============================================================================
# TELEMETRY
# =============================================================================

RESTING_G_FORCE = 1.0
