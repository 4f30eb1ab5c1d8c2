"""Export of location points to the Google Timeline Records.json format."""

import json
import logging
from typing import Sequence

from immich_timeline.models import LocationPoint

logger = logging.getLogger(__name__)


def build_records(points: Sequence[LocationPoint]) -> dict:
    """Build the Records.json document for the given points."""
    return {"locations": [point.to_timeline_dict() for point in points]}


def export_google_timeline(points: Sequence[LocationPoint], output_path: str) -> int:
    """Write points to output_path, replacing any existing file.

    Args:
        points: Points in the order they should appear
        output_path: Destination file

    Returns:
        Number of exported locations
    """
    records = build_records(points)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(records, f, separators=(",", ":"))

    count = len(records["locations"])
    logger.info("Wrote %d locations to %s", count, output_path)
    return count
