"""Main module for Immich Timeline Generator."""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

from immich_timeline.api.client import ImmichClient
from immich_timeline.export.google_timeline import export_google_timeline
from immich_timeline.models import (
    AlbumNotFoundError,
    AppConfig,
    ConfigurationError,
    LocationPoint,
    TimelineError,
)
from immich_timeline.processing.camera_selector import CameraSelector
from immich_timeline.processing.location_filter import filter_by_camera, filter_locations
from immich_timeline.processing.scheduler import BatchScheduler

logger = logging.getLogger(__name__)

URL_ENV_VAR = "IMMICH_URL"
API_KEY_ENV_VAR = "IMMICH_API_KEY"


def find_album_id(albums: List[Dict[str, Any]], album_name: str) -> str:
    """Return the id of the album whose name matches, ignoring case.

    Raises:
        AlbumNotFoundError: If no album has that name
    """
    wanted = album_name.lower()
    for album in albums:
        if str(album.get("albumName", "")).lower() == wanted:
            return album["id"]
    raise AlbumNotFoundError(album_name)


class TimelineGenerator:
    """Generates a Google Timeline file from Immich photos with GPS data."""

    def __init__(
        self,
        config: AppConfig,
        client: Optional[ImmichClient] = None,
        camera_selector_factory=CameraSelector,
        scheduler_factory=BatchScheduler,
    ):
        """Initialize the generator.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if config.min_photos_per_location < 1:
            raise ConfigurationError("min-photos must be at least 1")
        if config.concurrency < 1:
            raise ConfigurationError("concurrency must be at least 1")

        self.config = config
        self.client = client or ImmichClient(
            base_url=config.immich_url, api_key=config.api_key, pool_size=config.concurrency
        )
        self.camera_selector_factory = camera_selector_factory
        self.scheduler_factory = scheduler_factory

    def print_banner(self) -> None:
        print("Immich Timeline Generator")
        print("========================")
        print(f"Immich URL: {self.client.base_url}")
        print(f"Min photos per location: {self.config.min_photos_per_location}")
        if self.config.album_name:
            print(f"Album filter: {self.config.album_name}")
        print(f"Concurrency: {self.config.concurrency}")
        print(f"Output: {self.config.output_path}")
        print()

    def resolve_album(self) -> Optional[str]:
        """Look up the configured album, if any, and return its id."""
        if not self.config.album_name:
            return None

        print(f"Finding album: {self.config.album_name}")
        album_id = find_album_id(self.client.list_albums(), self.config.album_name)
        print(f"Found album ID: {album_id}")
        return album_id

    def collect_points(self, album_id: Optional[str] = None) -> List[LocationPoint]:
        """Fetch all assets and extract their location points."""
        print("Fetching assets from Immich...")
        assets = self.client.list_assets(album_id=album_id)
        print(f"Found {len(assets)} assets")

        scheduler = self.scheduler_factory(self.client, concurrency=self.config.concurrency)
        return scheduler.run(assets)

    def select_cameras(self, points: List[LocationPoint]) -> List[LocationPoint]:
        """Let the operator pick cameras, unless selection is skipped."""
        if self.config.skip_camera_selection or not points:
            return points

        selected = self.camera_selector_factory(points).run()
        filtered = filter_by_camera(points, selected)
        print(f"Camera filter kept {len(filtered)} of {len(points)} points")
        return filtered

    def generate_timeline(self) -> List[LocationPoint]:
        """Run the whole pipeline and return the final, time-ordered points."""
        album_id = self.resolve_album()
        points = self.collect_points(album_id)
        points = self.select_cameras(points)

        min_photos = self.config.min_photos_per_location
        print(f"\nFiltering locations with minimum {min_photos} photos...")
        timeline = filter_locations(points, min_photos)
        print(f"Filtered {len(points)} points to {len(timeline)} points")
        return timeline

    def run(self) -> List[LocationPoint]:
        """Generate the timeline and export it.

        Returns:
            The exported points; empty when nothing matched
        """
        self.print_banner()
        timeline = self.generate_timeline()

        if not timeline:
            print("No location data found matching the criteria.")
            return timeline

        print("Exporting to Google Timeline format...")
        count = export_google_timeline(timeline, self.config.output_path)
        print(f"Timeline exported to: {self.config.output_path}")
        print(f"Total locations: {count}")

        print("\nSuccess! Timeline generated successfully.")
        print(
            f"Date range: {timeline[0].timestamp:%Y-%m-%d} to {timeline[-1].timestamp:%Y-%m-%d}"
        )
        return timeline


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Immich Timeline Generator: builds a Google Timeline "
        "Records.json from Immich photos with GPS data"
    )

    parser.add_argument(
        "-u",
        "--url",
        default=os.environ.get(URL_ENV_VAR),
        help=f"Immich server URL, e.g. https://immich.example.com (env: {URL_ENV_VAR})",
    )
    parser.add_argument(
        "-k",
        "--api-key",
        default=os.environ.get(API_KEY_ENV_VAR),
        help=f"Immich API key (env: {API_KEY_ENV_VAR})",
    )
    parser.add_argument("-a", "--album", help="Album name to filter by (case-insensitive)")
    parser.add_argument(
        "-m",
        "--min-photos",
        type=int,
        default=3,
        help="Minimum number of photos per location (default: 3)",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=20,
        help="Number of asset detail requests in flight at once (default: 20)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="Records.json",
        help="Output file path (default: Records.json)",
    )
    parser.add_argument(
        "-s",
        "--skip-camera-selection",
        action="store_true",
        help="Include photos from all cameras without asking",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    """Build the run configuration from parsed arguments.

    Raises:
        ConfigurationError: If the server URL or API key is missing
    """
    if not args.url or not args.api_key:
        raise ConfigurationError("Missing required arguments: --url and --api-key")

    return AppConfig(
        immich_url=args.url.rstrip("/"),
        api_key=args.api_key,
        album_name=args.album,
        min_photos_per_location=args.min_photos,
        concurrency=args.concurrency,
        output_path=args.output,
        skip_camera_selection=args.skip_camera_selection,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the Immich Timeline Generator CLI."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
        TimelineGenerator(config).run()
    except TimelineError as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
