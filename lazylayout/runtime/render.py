"""Compose a full ANSI frame from the views on a ``ViewSurface``.

Visible views are painted bottom to top into a cell grid: framed views get a
box border with their title, and content is drawn from the scroll origin,
clipped to the inner area. Escape sequences inside content are carried per
cell so highlighted text keeps its colors.
"""

from __future__ import annotations

from ..ansi import ANSI_ESCAPE_RE, char_display_width, display_width
from ..layout.views import View, ViewSurface

RESET = "\033[0m"
FOCUSED_BORDER = "\033[1;32m"
BORDER = ""
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"
BOX_TOP_LEFT = "┌"
BOX_TOP_RIGHT = "┐"
BOX_BOTTOM_LEFT = "└"
BOX_BOTTOM_RIGHT = "┘"


def styled_cells(line: str, max_cols: int) -> list[str]:
    """Split a styled line into exactly ``max_cols`` single-column cells.

    Each cell carries the SGR sequence active at that position. Wide
    characters occupy their cell plus an empty continuation cell.
    """
    cells: list[str] = []
    active_sgr = ""
    i = 0
    n = len(line)
    while i < n and len(cells) < max_cols:
        if line[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(line, i)
            if match:
                seq = match.group(0)
                if seq.endswith("m"):
                    active_sgr = "" if seq in {RESET, "\033[m"} else active_sgr + seq
                i = match.end()
                continue
        ch = line[i]
        i += 1
        if ch in "\r\n":
            continue
        width = char_display_width(ch, len(cells))
        if ch == "\t":
            cells.extend([" "] * min(width, max_cols - len(cells)))
            continue
        if width == 0:
            continue
        if len(cells) + width > max_cols:
            break
        cells.append(f"{active_sgr}{ch}{RESET}" if active_sgr else ch)
        cells.extend([""] * (width - 1))
    cells.extend([" "] * (max_cols - len(cells)))
    return cells


class FrameCanvas:
    """Cell grid the size of the terminal."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.rows: list[list[str]] = [[" "] * width for _ in range(height)]

    def put(self, x: int, y: int, cell: str) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.rows[y][x] = cell

    def put_cells(self, x: int, y: int, cells: list[str]) -> None:
        for offset, cell in enumerate(cells):
            self.put(x + offset, y, cell)

    def to_ansi(self) -> str:
        out: list[str] = []
        for y, row in enumerate(self.rows):
            out.append(f"\x1b[{y + 1};1H")
            out.append("".join(row))
            out.append(RESET)
        return "".join(out)


def _draw_border(canvas: FrameCanvas, view: View, focused: bool) -> None:
    b = view.bounds
    style = FOCUSED_BORDER if focused else BORDER

    def styled(ch: str) -> str:
        return f"{style}{ch}{RESET}" if style else ch

    for x in range(b.x0 + 1, b.x1):
        canvas.put(x, b.y0, styled(BOX_HORIZONTAL))
        canvas.put(x, b.y1, styled(BOX_HORIZONTAL))
    for y in range(b.y0 + 1, b.y1):
        canvas.put(b.x0, y, styled(BOX_VERTICAL))
        canvas.put(b.x1, y, styled(BOX_VERTICAL))
    canvas.put(b.x0, b.y0, styled(BOX_TOP_LEFT))
    canvas.put(b.x1, b.y0, styled(BOX_TOP_RIGHT))
    canvas.put(b.x0, b.y1, styled(BOX_BOTTOM_LEFT))
    canvas.put(b.x1, b.y1, styled(BOX_BOTTOM_RIGHT))

    if view.title and view.inner_width > 2:
        title = f" {view.title} "
        canvas.put_cells(b.x0 + 1, b.y0, styled_cells(title, min(display_width(title), view.inner_width - 1)))


def _draw_content(canvas: FrameCanvas, view: View) -> None:
    inner_x = view.bounds.x0 + 1
    inner_y = view.bounds.y0 + 1
    width = view.inner_width
    for row in range(view.inner_height):
        line_idx = view.origin_y + row
        line = view.lines[line_idx] if 0 <= line_idx < len(view.lines) else ""
        canvas.put_cells(inner_x, inner_y + row, styled_cells(line, width))


def compose_frame(surface: ViewSurface) -> str:
    """Return the ANSI frame for every visible view, bottom to top."""
    width, height = surface.size()
    canvas = FrameCanvas(width, height)
    for view in surface.views_bottom_to_top():
        if not view.visible:
            continue
        if view.frame:
            _draw_border(canvas, view, focused=view.name == surface.current_view_name)
        _draw_content(canvas, view)
    return canvas.to_ansi()


__all__ = ["FrameCanvas", "compose_frame", "styled_cells"]
