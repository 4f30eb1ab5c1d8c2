"""Test configuration for pytest."""

import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from immich_timeline.models import LocationPoint  # noqa: E402


class FakeImmichClient:
    """In-memory stand-in for ImmichClient."""

    def __init__(self, details: Dict[str, Optional[Dict[str, Any]]], albums=None):
        self.details = details
        self.albums = albums or []
        self.base_url = "https://immich.example.com"
        self.detail_calls: List[str] = []
        self.album_ids: List[Optional[str]] = []
        self._lock = threading.Lock()

    def list_assets(self, album_id=None):
        self.album_ids.append(album_id)
        return [{"id": asset_id} for asset_id in self.details]

    def list_albums(self):
        return self.albums

    def get_asset_detail(self, asset_id):
        with self._lock:
            self.detail_calls.append(asset_id)
        return self.details.get(asset_id)


def make_detail(
    latitude=37.7749,
    longitude=-122.4194,
    created="2024-01-01T00:00:00.000Z",
    modified=None,
    make="Apple",
    model="iPhone 15",
) -> Dict[str, Any]:
    """Build an asset detail record shaped like the Immich API response."""
    return {
        "exifInfo": {
            "latitude": latitude,
            "longitude": longitude,
            "make": make,
            "model": model,
        },
        "fileCreatedAt": created,
        "fileModifiedAt": modified,
    }


@pytest.fixture
def detail_factory():
    """Factory for asset detail records."""
    return make_detail


@pytest.fixture
def fake_client_factory():
    """Factory for in-memory Immich clients."""
    return FakeImmichClient


@pytest.fixture
def point_factory():
    """Factory for location points with sensible defaults."""

    def _make(latitude=37.7749, longitude=-122.4194, day=1, hour=0, camera="Apple iPhone 15"):
        return LocationPoint(
            latitude=latitude,
            longitude=longitude,
            timestamp=datetime(2024, 1, day, hour, tzinfo=timezone.utc),
            camera_label=camera,
        )

    return _make
