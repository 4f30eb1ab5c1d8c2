"""Models for Immich Timeline Generator."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from immich_timeline.utils.time_utils import format_timestamp

DEFAULT_ACCURACY = 10
UNKNOWN_CAMERA = "Unknown Camera"
E7_SCALE = 10_000_000


def round_half_away(value: float) -> int:
    """Round to the nearest integer, with halves going away from zero."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # magnitude - whole is exact, unlike magnitude + 0.5
    rounded = whole + 1 if magnitude - whole >= 0.5 else whole
    return -rounded if value < 0 else rounded


def to_e7(value: float) -> int:
    """Scale decimal degrees to a fixed-point E7 integer."""
    return round_half_away(value * E7_SCALE)


@dataclass(frozen=True)
class LocationPoint:
    """A validated, timestamped GPS coordinate derived from one asset."""
    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: int = DEFAULT_ACCURACY
    camera_label: str = UNKNOWN_CAMERA

    def to_timeline_dict(self) -> Dict[str, Any]:
        """Return the interchange entry for this point."""
        return {
            "latitudeE7": to_e7(self.latitude),
            "longitudeE7": to_e7(self.longitude),
            "timestamp": format_timestamp(self.timestamp),
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class AssetOutcome:
    """Result of processing one asset: a point, or the reason it was skipped."""
    asset_id: str
    point: Optional[LocationPoint] = None
    reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.point is None


@dataclass
class AppConfig:
    """Configuration for a single timeline run."""
    immich_url: str
    api_key: str
    album_name: Optional[str] = None
    min_photos_per_location: int = 3
    concurrency: int = 20
    output_path: str = "Records.json"
    skip_camera_selection: bool = False


class TimelineError(Exception):
    """Base exception for timeline generation."""


class ConfigurationError(TimelineError):
    """Raised when the run configuration is invalid."""


class RemoteError(TimelineError):
    """Raised when the Immich server returns a non-success response."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AlbumNotFoundError(TimelineError):
    """Raised when no album matches the requested name."""

    def __init__(self, album_name: str):
        super().__init__(f'Album "{album_name}" not found')
        self.album_name = album_name


class AssetSkipped(TimelineError):
    """Raised when an asset has no usable location data."""
