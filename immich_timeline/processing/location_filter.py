"""Grouping of location points and minimum-count filtering."""

import logging
from collections import Counter
from typing import Iterable, List, Set, Tuple

from immich_timeline.models import LocationPoint

logger = logging.getLogger(__name__)

# Decimal places used to group nearby points into one location
LOCATION_KEY_PRECISION = 2


def location_key(point: LocationPoint) -> Tuple[float, float]:
    """Round a point's coordinates into a grouping key."""
    # Adding 0.0 turns -0.0 into 0.0 so both sides of the equator/meridian share a key
    return (
        round(point.latitude, LOCATION_KEY_PRECISION) + 0.0,
        round(point.longitude, LOCATION_KEY_PRECISION) + 0.0,
    )


def filter_by_camera(points: Iterable[LocationPoint], cameras: Set[str]) -> List[LocationPoint]:
    """Keep only points taken with one of the given cameras."""
    return [point for point in points if point.camera_label in cameras]


def filter_locations(points: Iterable[LocationPoint], min_photos: int) -> List[LocationPoint]:
    """Drop points at locations with fewer than min_photos photos and sort by time.

    Args:
        points: Candidate points
        min_photos: Minimum number of points sharing a location key

    Returns:
        Surviving points in ascending timestamp order; ties keep their input order
    """
    points = list(points)
    location_counts = Counter(location_key(point) for point in points)

    filtered = [point for point in points if location_counts[location_key(point)] >= min_photos]
    filtered.sort(key=lambda point: point.timestamp)

    logger.debug(
        "%d distinct locations, %d points kept with minimum %d",
        len(location_counts),
        len(filtered),
        min_photos,
    )
    return filtered
