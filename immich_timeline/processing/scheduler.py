"""Bounded-concurrency processing of Immich assets."""

import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from immich_timeline.models import AssetOutcome, LocationPoint
from immich_timeline.processing.asset_processor import process_asset

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 20
# Pause between chunks so the server is not flooded with detail requests
CHUNK_DELAY_SECONDS = 0.1
# Log one warning per this many skipped assets
SKIP_WARNING_INTERVAL = 100


@dataclass
class BatchProgress:
    """Counters reported after each chunk."""
    total: int
    processed: int = 0
    found: int = 0
    skipped: int = 0

    @property
    def percent(self) -> float:
        if not self.total:
            return 100.0
        return self.processed / self.total * 100


def print_progress(progress: BatchProgress) -> None:
    """Write a progress line, rewriting it in place when stdout is a terminal."""
    message = (
        f"Processing assets: {progress.percent:.1f}% "
        f"({progress.processed}/{progress.total}) | "
        f"Found: {progress.found} | Skipped: {progress.skipped}"
    )
    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is not None and isatty():
        end = "\n" if progress.processed >= progress.total else ""
        print(f"\r{message}", end=end, flush=True)
    else:
        print(message, flush=True)


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    """Split a sequence into consecutive chunks of at most size items."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchScheduler:
    """Runs the asset processor over all assets, one chunk at a time.

    Each chunk holds at most ``concurrency`` assets; all of them are fetched
    concurrently and the next chunk starts only once the whole chunk is done.
    """

    def __init__(
        self,
        client,
        concurrency: int = DEFAULT_CONCURRENCY,
        processor: Callable[[Any, Dict[str, Any]], AssetOutcome] = process_asset,
        on_progress: Optional[Callable[[BatchProgress], None]] = print_progress,
        delay: float = CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if concurrency < 1:
            raise ValueError("Concurrency must be at least 1")
        self.client = client
        self.concurrency = concurrency
        self.processor = processor
        self.on_progress = on_progress
        self.delay = delay
        self.sleep = sleep

    def run(self, assets: Sequence[Dict[str, Any]]) -> List[LocationPoint]:
        """Process every asset and return the valid points in asset order."""
        points: List[LocationPoint] = []
        progress = BatchProgress(total=len(assets))
        chunks = chunked(assets, self.concurrency)

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            for index, chunk in enumerate(chunks):
                # map() yields results in submission order once all have completed
                outcomes = list(
                    executor.map(lambda asset: self.processor(self.client, asset), chunk)
                )

                for outcome in outcomes:
                    progress.processed += 1
                    if outcome.skipped:
                        progress.skipped += 1
                        if progress.skipped % SKIP_WARNING_INTERVAL == 0:
                            logger.warning(
                                "Skipped %d assets so far (latest %s: %s)",
                                progress.skipped,
                                outcome.asset_id,
                                outcome.reason,
                            )
                    else:
                        progress.found += 1
                        points.append(outcome.point)

                if self.on_progress is not None:
                    self.on_progress(progress)

                if index < len(chunks) - 1 and self.delay > 0:
                    self.sleep(self.delay)

        logger.info(
            "Processed %d assets: %d with location, %d skipped",
            progress.processed,
            progress.found,
            progress.skipped,
        )
        return points
