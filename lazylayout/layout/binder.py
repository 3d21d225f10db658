"""Bind geometry-controlled contexts to their views.

For every context with controlled bounds, the binder places the backing view
at its window's rectangle, clamps the scroll origin to the content, and
reports which contexts must re-render because their size changed. Contexts
whose window has no rectangle are hidden but sized to the full canvas, so
size-dependent content can render in the background at full scale.
"""

from __future__ import annotations

import logging

from .contexts import Context, ContextTree, WidthRerenderPolicy
from .geometry import Rect, WindowDimensions
from .views import UnknownViewError, ViewSurface
from .windows import WindowOwnership

logger = logging.getLogger(__name__)


def frame_offset(frame: bool) -> int:
    """Return the per-edge expansion for a view: 0 when framed, 1 when frameless."""
    return 0 if frame else 1


def bind_context_view(
    surface: ViewSurface,
    context: Context,
    dimensions: WindowDimensions,
) -> bool:
    """Apply ``dimensions`` to the view behind ``context``.

    Returns whether the context must re-render this pass. Raises
    ``UnknownViewError`` when the view has not been created yet.
    """
    view = surface.view(context.view_name)
    rect = dimensions.get(context.window_name)

    if rect is None:
        width, height = surface.size()
        surface.set_view(context.view_name, Rect(0, 0, width, height))
        view.visible = False
        return False

    offset = frame_offset(view.frame)
    # Inner size the view will have once the expanded bounds are applied.
    new_width = max(0, rect.width - 2 + 2 * offset)
    new_height = max(0, rect.height - 2 + 2 * offset)

    must_rerender = False
    max_origin_y = context.total_content_height(view)
    if not view.can_scroll_past_bottom:
        max_origin_y = max(0, max_origin_y - new_height)
    old_origin_y = view.origin_y
    if old_origin_y > max_origin_y:
        view.scroll_up(old_origin_y - max_origin_y)
        if view.origin_y != old_origin_y and context.rerender_on_height:
            must_rerender = True

    if context.rerender_on_width is WidthRerenderPolicy.WHEN_WIDTH_CHANGES and view.inner_width != new_width:
        must_rerender = True

    if context.rerender_on_height and view.inner_height != new_height:
        must_rerender = True

    surface.set_view(context.view_name, rect.expanded(offset))
    view.visible = True
    return must_rerender


def bind_controlled_views(
    surface: ViewSurface,
    contexts: ContextTree,
    dimensions: WindowDimensions,
) -> list[Context]:
    """Bind every geometry-controlled context in flatten order.

    Unknown views are skipped; any other surface failure aborts the pass.
    """
    to_rerender: list[Context] = []
    for context in contexts.controlled_contexts():
        try:
            if bind_context_view(surface, context, dimensions):
                to_rerender.append(context)
        except UnknownViewError:
            logger.debug("skipping context %s: view not created yet", context.view_name)
    return to_rerender


def apply_transient_visibility(
    surface: ViewSurface,
    contexts: ContextTree,
    ownership: WindowOwnership,
) -> None:
    """Show each transient context only while it occupies its window."""
    for context in contexts.transient_contexts():
        try:
            view = surface.view(context.view_name)
        except UnknownViewError:
            continue
        view.visible = ownership.view_name_for_window(context.window_name) == context.view_name


__all__ = [
    "apply_transient_visibility",
    "bind_context_view",
    "bind_controlled_views",
    "frame_offset",
]
