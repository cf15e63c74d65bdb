"""GPS track compaction."""

from collections.abc import Sequence
from typing import TypeVar

from flight_session_store.constants import MAX_GPS_POINTS, RECENT_GPS_POINTS

T = TypeVar("T")


def compact_track(
    points: Sequence[T],
    max_points: int = MAX_GPS_POINTS,
    recent_points: int = RECENT_GPS_POINTS,
) -> list[T]:
    """Bound a GPS track to ``max_points`` by thinning its older part.

    The last ``recent_points`` points are always kept as-is. Older points are
    reduced to every other point (even indices), repeatedly if needed, so
    recent history stays dense while the overall shape of a long flight is
    preserved. Lossy: thinning compounds across repeated calls.

    Args:
        points: Track in insertion order
        max_points: Upper bound on the returned length
        recent_points: Number of trailing points never thinned

    Returns:
        A new list of at most ``max_points`` points, order preserved
    """
    if not 0 <= recent_points < max_points:
        raise ValueError("recent_points must be between 0 and max_points - 1")

    if len(points) <= max_points:
        return list(points)

    split = len(points) - recent_points
    older = list(points[:split])
    recent = list(points[split:])

    while len(older) + len(recent) > max_points:
        older = older[::2]

    return older + recent
