"""Location extraction pipeline."""

from .asset_processor import derive_camera_label, extract_location_point, process_asset
from .camera_selector import CameraSelector, SelectionState, apply_command, camera_stats
from .location_filter import filter_by_camera, filter_locations, location_key
from .scheduler import BatchProgress, BatchScheduler

__all__ = [
    "BatchProgress",
    "BatchScheduler",
    "CameraSelector",
    "SelectionState",
    "apply_command",
    "camera_stats",
    "derive_camera_label",
    "extract_location_point",
    "filter_by_camera",
    "filter_locations",
    "location_key",
    "process_asset",
]
