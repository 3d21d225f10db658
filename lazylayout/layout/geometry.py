"""Window geometry for the full-screen layout.

``resolve_window_dimensions`` is a pure function of the terminal size, the
transient banner strings and the layout options. It returns a fresh mapping
from window name to inclusive cell rectangle on every call; windows missing
from the mapping are hidden by the binder and staged in the background.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import display_width

SIDE_WINDOWS: tuple[str, ...] = ("status", "files", "branches", "commits", "stash")
FIXED_SIDE_WINDOW_ROWS = 3
SQUASHED_SIDE_ROWS_THRESHOLD = 15
MINIMUM_WIDTH = 10
MINIMUM_HEIGHT = 9

WindowDimensions = dict[str, "Rect"]


@dataclass(frozen=True)
class Rect:
    """Inclusive rectangle in terminal cell coordinates."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0 + 1

    @property
    def height(self) -> int:
        return self.y1 - self.y0 + 1

    def expanded(self, cells: int) -> Rect:
        """Return this rectangle grown by ``cells`` on every edge."""
        if cells == 0:
            return self
        return Rect(self.x0 - cells, self.y0 - cells, self.x1 + cells, self.y1 + cells)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True)
class LayoutOptions:
    """Static knobs for the window arrangement."""

    side_panel_ratio: float = 1.0 / 3.0
    split_main: bool = False
    show_command_log: bool = True
    minimum_width: int = MINIMUM_WIDTH
    minimum_height: int = MINIMUM_HEIGHT


DEFAULT_LAYOUT_OPTIONS = LayoutOptions()


def is_below_minimum(width: int, height: int, options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS) -> bool:
    """Return whether the terminal is too small for the regular arrangement."""
    return height < options.minimum_height or width < options.minimum_width


def _even_split(total: int, count: int) -> list[int]:
    base, remainder = divmod(total, count)
    return [base + (1 if idx < remainder else 0) for idx in range(count)]


def side_window_heights(total_rows: int) -> list[int]:
    """Distribute ``total_rows`` among the side windows, top to bottom.

    ``status`` and ``stash`` keep a fixed three-row box while the list
    windows share the rest; short terminals share everything evenly.
    """
    count = len(SIDE_WINDOWS)
    if total_rows < SQUASHED_SIDE_ROWS_THRESHOLD:
        return [max(1, rows) for rows in _even_split(total_rows, count)]
    shared = _even_split(total_rows - 2 * FIXED_SIDE_WINDOW_ROWS, count - 2)
    return [FIXED_SIDE_WINDOW_ROWS, *shared, FIXED_SIDE_WINDOW_ROWS]


def _stack_rows(names: tuple[str, ...], heights: list[int], x0: int, x1: int, y0: int) -> WindowDimensions:
    out: WindowDimensions = {}
    y = y0
    for name, rows in zip(names, heights):
        out[name] = Rect(x0, y, x1, y + rows - 1)
        y += rows
    return out


def _bottom_row(width: int, y: int, information: str, app_status: str) -> WindowDimensions:
    # Frameless windows; one column of inset keeps their expanded bounds on screen.
    out: WindowDimensions = {}
    left = 1
    right = width - 2

    status_width = display_width(app_status)
    if status_width and left <= right:
        status_x1 = min(right, left + status_width - 1)
        out["appStatus"] = Rect(left, y, status_x1, y)
        left = status_x1 + 2

    information_width = display_width(information)
    if information_width and left <= right:
        information_x0 = max(left, right - information_width + 1)
        out["information"] = Rect(information_x0, y, right, y)
        right = information_x0 - 2

    if left <= right:
        out["options"] = Rect(left, y, right, y)
    return out


def _main_column(x0: int, x1: int, total_rows: int, options: LayoutOptions) -> WindowDimensions:
    extras_rows = 0
    if options.show_command_log:
        extras_rows = max(FIXED_SIDE_WINDOW_ROWS, total_rows // 5)
        if total_rows - extras_rows < FIXED_SIDE_WINDOW_ROWS:
            extras_rows = 0

    main_rows = total_rows - extras_rows
    names: tuple[str, ...] = ("main",)
    heights = [main_rows]
    if options.split_main and main_rows >= 2 * FIXED_SIDE_WINDOW_ROWS:
        secondary_rows = main_rows // 2
        names = ("main", "secondary")
        heights = [main_rows - secondary_rows, secondary_rows]
    if extras_rows:
        names = (*names, "extras")
        heights.append(extras_rows)
    return _stack_rows(names, heights, x0, x1, 0)


def resolve_window_dimensions(
    width: int,
    height: int,
    information: str = "",
    app_status: str = "",
    options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS,
) -> WindowDimensions:
    """Compute the rectangle of every window that should be shown.

    Below the minimum terminal size only the ``limit`` window is returned so
    every other geometry-controlled view gets hidden.
    """
    if is_below_minimum(width, height, options):
        return {"limit": Rect(0, 0, max(0, width - 1), max(0, height - 1))}

    content_rows = height - 1
    ratio = min(1.0, max(0.0, options.side_panel_ratio))
    side_width = max(1, min(width - 2, int(width * ratio)))

    dimensions: WindowDimensions = {}
    dimensions.update(
        _stack_rows(SIDE_WINDOWS, side_window_heights(content_rows), 0, side_width - 1, 0)
    )
    dimensions.update(_main_column(side_width, width - 1, content_rows, options))
    dimensions.update(_bottom_row(width, height - 1, information, app_status))
    return dimensions


__all__ = [
    "DEFAULT_LAYOUT_OPTIONS",
    "LayoutOptions",
    "MINIMUM_HEIGHT",
    "MINIMUM_WIDTH",
    "Rect",
    "SIDE_WINDOWS",
    "WindowDimensions",
    "is_below_minimum",
    "resolve_window_dimensions",
    "side_window_heights",
]
