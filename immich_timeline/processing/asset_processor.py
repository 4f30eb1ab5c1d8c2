"""Conversion of Immich asset records into location points."""

import logging
from typing import Any, Dict, Optional

from immich_timeline.models import (
    DEFAULT_ACCURACY,
    UNKNOWN_CAMERA,
    AssetOutcome,
    AssetSkipped,
    LocationPoint,
)
from immich_timeline.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing and blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def derive_camera_label(make: Any, model: Any) -> str:
    """Build a display label from EXIF make and model.

    Args:
        make: Camera manufacturer, possibly missing or blank
        model: Camera model, possibly missing or blank

    Returns:
        "Make Model", "Model", "Make" or "Unknown Camera", in that order of preference
    """
    make = _clean(make)
    model = _clean(model)
    if make and model:
        return f"{make} {model}"
    return model or make or UNKNOWN_CAMERA


def extract_location_point(detail: Optional[Dict[str, Any]]) -> LocationPoint:
    """Validate an asset detail record and build a location point from it.

    Raises:
        AssetSkipped: If the record lacks EXIF data, coordinates or a timestamp
        ValueError: If the timestamp cannot be parsed
    """
    if detail is None:
        raise AssetSkipped("asset details unavailable")

    exif_info = detail.get("exifInfo")
    if not exif_info:
        raise AssetSkipped("no EXIF data")

    latitude = exif_info.get("latitude")
    longitude = exif_info.get("longitude")
    if latitude is None or longitude is None:
        raise AssetSkipped("no GPS coordinates")

    raw_timestamp = detail.get("fileCreatedAt") or detail.get("fileModifiedAt")
    if not raw_timestamp:
        raise AssetSkipped("no timestamp")

    return LocationPoint(
        latitude=float(latitude),
        longitude=float(longitude),
        timestamp=parse_timestamp(raw_timestamp),
        accuracy=DEFAULT_ACCURACY,
        camera_label=derive_camera_label(exif_info.get("make"), exif_info.get("model")),
    )


def process_asset(client, asset: Dict[str, Any]) -> AssetOutcome:
    """Fetch one asset's details and turn them into an outcome.

    Never raises: every failure is reported as a skipped outcome.
    """
    asset_id = str(asset.get("id"))
    try:
        detail = client.get_asset_detail(asset_id)
        point = extract_location_point(detail)
    except Exception as e:
        logger.debug("Skipping asset %s: %s", asset_id, e)
        return AssetOutcome(asset_id=asset_id, reason=str(e) or type(e).__name__)
    return AssetOutcome(asset_id=asset_id, point=point)
