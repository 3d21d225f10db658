"""Placement of popup panels, which are not geometry-controlled."""

from __future__ import annotations

from ..ansi import display_width
from .contexts import ContextTree
from .geometry import Rect
from .views import UnknownViewError, View, ViewSurface

POPUP_MIN_WIDTH_RATIO = 0.5
POPUP_SCREEN_MARGIN = 2


def popup_rect(
    width: int,
    height: int,
    content_lines: list[str],
    *,
    title: str = "",
    min_width_ratio: float = POPUP_MIN_WIDTH_RATIO,
) -> Rect:
    """Return a framed rectangle centered on the canvas and sized to content."""
    content_width = max((display_width(line) for line in content_lines), default=0)
    content_width = max(content_width, display_width(title) + 2)
    max_inner_width = max(1, width - 2 - 2 * POPUP_SCREEN_MARGIN)
    max_inner_height = max(1, height - 2 - 2 * POPUP_SCREEN_MARGIN)
    inner_width = min(max_inner_width, max(int(width * min_width_ratio), content_width))
    inner_height = min(max_inner_height, max(1, len(content_lines)))

    outer_width = inner_width + 2
    outer_height = inner_height + 2
    x0 = max(0, (width - outer_width) // 2)
    y0 = max(0, (height - outer_height) // 2)
    return Rect(x0, y0, x0 + outer_width - 1, y0 + outer_height - 1)


def _tooltip_rect(menu: View, tooltip: View, height: int) -> Rect:
    rows = max(1, tooltip.content_height)
    y0 = menu.bounds.y1 + 1
    y1 = y0 + rows + 1
    if y1 > height - 1:
        # No room below the menu: sit on top of it instead.
        y1 = max(1, menu.bounds.y0 - 1)
        y0 = max(0, y1 - rows - 1)
    return Rect(menu.bounds.x0, y0, menu.bounds.x1, y1)


def resize_popup_panels(
    surface: ViewSurface,
    contexts: ContextTree,
    *,
    menu_view_name: str = "menu",
    tooltip_view_name: str = "tooltip",
) -> list[str]:
    """Place every visible popup view; return the names that were placed."""
    width, height = surface.size()
    placed: list[str] = []
    for context in contexts.popup_contexts():
        if context.controlled_bounds:
            continue
        try:
            view = surface.view(context.view_name)
        except UnknownViewError:
            continue
        if not view.visible:
            continue
        surface.set_view(context.view_name, popup_rect(width, height, view.lines, title=view.title))
        placed.append(context.view_name)

    try:
        menu = surface.view(menu_view_name)
        tooltip = surface.view(tooltip_view_name)
    except UnknownViewError:
        return placed
    if menu.visible and tooltip.visible:
        surface.set_view(tooltip_view_name, _tooltip_rect(menu, tooltip, height))
        placed.append(tooltip_view_name)
    return placed


__all__ = ["POPUP_MIN_WIDTH_RATIO", "popup_rect", "resize_popup_panels"]
