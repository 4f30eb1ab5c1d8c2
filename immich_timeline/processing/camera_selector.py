"""Interactive selection of which cameras' photos go into the timeline.

The selection is a small state machine: ``apply_command`` is a pure
transition from one ``SelectionState`` to the next, and ``CameraSelector``
drives it with a command reader and a renderer that can both be replaced
(tests feed scripted commands and collect the rendered pages).
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from tabulate import tabulate

from immich_timeline.models import LocationPoint

logger = logging.getLogger(__name__)

PAGE_SIZE = 8

COMMAND_HELP = (
    "Commands: 1-8 toggle camera | 0 toggle all (first page) | "
    "n next page | p previous page | done finish | help redisplay"
)


@dataclass(frozen=True)
class SelectionState:
    """Selected camera labels and the page being shown."""
    selected: FrozenSet[str]
    page: int = 0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of applying one operator command."""
    state: SelectionState
    done: bool = False
    message: Optional[str] = None


def camera_stats(points: Iterable[LocationPoint]) -> List[Tuple[str, int]]:
    """Count points per camera, most photos first.

    Cameras with equal counts keep the order in which they were first seen.
    """
    counts = Counter(point.camera_label for point in points)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def total_pages(camera_count: int) -> int:
    return max(1, math.ceil(camera_count / PAGE_SIZE))


def page_slice(cameras: Sequence[str], page: int) -> Sequence[str]:
    start = page * PAGE_SIZE
    return cameras[start:start + PAGE_SIZE]


def apply_command(state: SelectionState, command: str, cameras: Sequence[str]) -> CommandResult:
    """Apply one operator command to the selection state.

    Args:
        state: Current selection
        command: Raw operator input
        cameras: All camera labels, in display order

    Returns:
        The next state, whether the selection is finished, and an optional notice
    """
    command = (command or "").strip().lower()
    pages = total_pages(len(cameras))

    if command in ("", "help"):
        return CommandResult(state)

    if command == "done":
        selected = state.selected or frozenset(cameras)
        return CommandResult(replace(state, selected=selected), done=True)

    if command == "n":
        if state.page < pages - 1:
            return CommandResult(replace(state, page=state.page + 1))
        return CommandResult(state, message="Already on the last page.")

    if command == "p":
        if state.page > 0:
            return CommandResult(replace(state, page=state.page - 1))
        return CommandResult(state, message="Already on the first page.")

    if command.isdecimal():
        number = int(command)
        if number == 0:
            if state.page != 0:
                return CommandResult(state, message="'0' only applies on the first page.")
            if len(state.selected) == len(cameras):
                return CommandResult(replace(state, selected=frozenset()))
            return CommandResult(replace(state, selected=frozenset(cameras)))

        if 1 <= number <= PAGE_SIZE:
            on_page = page_slice(cameras, state.page)
            if number > len(on_page):
                return CommandResult(state)
            camera = on_page[number - 1]
            return CommandResult(replace(state, selected=state.selected ^ {camera}))

    return CommandResult(state, message=f"Invalid command: {command}")


def _checkbox(checked: bool) -> str:
    return "[x]" if checked else "[ ]"


def render_page(state: SelectionState, stats: Sequence[Tuple[str, int]]) -> str:
    """Render the current page of the camera table with the command menu."""
    cameras = [label for label, _ in stats]
    total_points = sum(count for _, count in stats)
    pages = total_pages(len(cameras))

    rows = []
    if state.page == 0:
        if cameras and len(state.selected) == len(cameras):
            marker = "[x]"
        elif state.selected:
            marker = "[-]"
        else:
            marker = "[ ]"
        rows.append([0, marker, "All cameras", total_points, "100.0%"])

    start = state.page * PAGE_SIZE
    for offset, (label, count) in enumerate(stats[start:start + PAGE_SIZE], 1):
        share = count / total_points * 100 if total_points else 0.0
        rows.append([offset, _checkbox(label in state.selected), label, count, f"{share:.1f}%"])

    lines = [
        f"\nCamera selection - page {state.page + 1} of {pages}",
        tabulate(rows, headers=["#", "Sel", "Camera", "Photos", "Share"], tablefmt="psql"),
        COMMAND_HELP,
        f"Selected: {len(state.selected)} of {len(cameras)} cameras",
    ]
    return "\n".join(lines)


def _read_from_stdin() -> str:
    try:
        return input("Command: ")
    except EOFError:
        # Nothing more to read, e.g. stdin is not a terminal
        return "done"


class CameraSelector:
    """Lets the operator choose which cameras to include, page by page."""

    def __init__(
        self,
        points: Sequence[LocationPoint],
        read_command: Callable[[], str] = _read_from_stdin,
        write: Callable[[str], None] = print,
    ):
        self.stats = camera_stats(points)
        self.cameras = [label for label, _ in self.stats]
        self.read_command = read_command
        self.write = write
        self.state = SelectionState(selected=frozenset(self.cameras))

    def run(self) -> Set[str]:
        """Loop until the operator enters ``done`` and return the selected cameras."""
        while True:
            self.write(render_page(self.state, self.stats))
            result = apply_command(self.state, self.read_command(), self.cameras)
            self.state = result.state
            if result.message:
                self.write(result.message)
            if result.done:
                break

        logger.debug("Selected cameras: %s", sorted(self.state.selected))
        return set(self.state.selected)
