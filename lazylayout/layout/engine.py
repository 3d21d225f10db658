"""One layout pass, start to finish.

``LayoutEngine.run_pass`` is what the hosting loop calls on every render or
resize event. It never blocks and never overlaps with another pass; the
returned ``PassResult`` records what the pass observed (the snapshot the next
pass compares against) and the side effects it performed, in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from .binder import apply_transient_visibility, bind_controlled_views, frame_offset
from .buffers import ViewBufferManager
from .contexts import ContextTree
from .deferred import DeferredAction, DeferredActionQueue
from .geometry import DEFAULT_LAYOUT_OPTIONS, LayoutOptions, WindowDimensions, is_below_minimum, resolve_window_dimensions
from .lifecycle import Lifecycle, LifecycleState
from .popups import resize_popup_panels
from .views import UnknownViewError, ViewSurface
from .windows import WindowOwnership

logger = logging.getLogger(__name__)

MAIN_VIEW = "main"
SECONDARY_VIEW = "secondary"
INFORMATION_VIEW = "information"
LIMIT_VIEW = "limit"
MENU_VIEW = "menu"
TOOLTIP_VIEW = "tooltip"


class LayoutEvent(Enum):
    RENDER = "render"
    RESIZE = "resize"
    REPO_SWITCH = "repo_switch"


@dataclass(frozen=True)
class LayoutSnapshot:
    """What the previous pass observed."""

    main_width: int = 0
    main_height: int = 0
    information: str | None = None
    lifecycle_state: LifecycleState = LifecycleState.UNINITIALIZED
    passes: int = 0


@dataclass(frozen=True)
class PassResult:
    snapshot: LayoutSnapshot
    effects: tuple[str, ...]
    rerendered: tuple[str, ...]


@dataclass(frozen=True)
class LayoutHooks:
    """Application callbacks consulted during a pass."""

    information: Callable[[], str]
    app_status: Callable[[], str]
    on_resize: Callable[[], None]
    buffer_manager_for_view: Callable[[str], ViewBufferManager | None] | None = None
    render_options: Callable[[], None] | None = None


class LayoutEngine:
    """Compute geometry, bind views and run the pass-end bookkeeping."""

    def __init__(
        self,
        surface: ViewSurface,
        contexts: ContextTree,
        ownership: WindowOwnership,
        lifecycle: Lifecycle,
        hooks: LayoutHooks,
        *,
        options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS,
        deferred: DeferredActionQueue | None = None,
    ) -> None:
        self.surface = surface
        self.contexts = contexts
        self.ownership = ownership
        self.lifecycle = lifecycle
        self.hooks = hooks
        self.options = options
        self.deferred = deferred if deferred is not None else DeferredActionQueue()
        self._snapshot = LayoutSnapshot()

    @property
    def snapshot(self) -> LayoutSnapshot:
        return self._snapshot

    def defer(self, action: DeferredAction) -> None:
        """Schedule ``action`` to run at the end of the next pass (any thread)."""
        self.deferred.enqueue(action)

    def run_pass(self, event: LayoutEvent = LayoutEvent.RENDER) -> PassResult:
        """Run one full layout pass; the first fatal error propagates."""
        if event is LayoutEvent.REPO_SWITCH:
            self.lifecycle.reset_for_repo_switch()

        effects: list[str] = []
        width, height = self.surface.size()
        information = self.hooks.information()
        dimensions = resolve_window_dimensions(
            width,
            height,
            information,
            self.hooks.app_status(),
            self.options,
        )

        self._read_more_lines_on_growth(dimensions, effects)

        to_rerender = bind_controlled_views(self.surface, self.contexts, dimensions)
        effects.append("bind")

        self._set_visible(LIMIT_VIEW, is_below_minimum(width, height, self.options))
        self._update_tooltip_visibility()
        apply_transient_visibility(self.surface, self.contexts, self.ownership)

        if information != self._snapshot.information:
            try:
                self.surface.view(INFORMATION_VIEW).set_content(information)
            except UnknownViewError:
                pass
            self._snapshot = replace(self._snapshot, information=information)
            effects.append("information")

        effects.extend(self.lifecycle.ensure_ready())
        self._snapshot = replace(self._snapshot, lifecycle_state=self.lifecycle.state)

        self._react_to_main_resize(effects)

        for context in to_rerender:
            context.handle_render()
            effects.append(f"render:{context.view_name}")

        resize_popup_panels(self.surface, self.contexts, menu_view_name=MENU_VIEW, tooltip_view_name=TOOLTIP_VIEW)
        if self.hooks.render_options is not None:
            self.hooks.render_options()

        executed = self.deferred.drain()
        if executed:
            effects.append(f"deferred:{executed}")

        self._snapshot = replace(self._snapshot, passes=self._snapshot.passes + 1)
        logger.debug("layout pass %d (%s): %s", self._snapshot.passes, event.value, effects)
        return PassResult(
            snapshot=self._snapshot,
            effects=tuple(effects),
            rerendered=tuple(context.view_name for context in to_rerender),
        )

    def _set_visible(self, view_name: str, visible: bool) -> None:
        try:
            self.surface.view(view_name).visible = visible
        except UnknownViewError:
            pass

    def _update_tooltip_visibility(self) -> None:
        try:
            menu = self.surface.view(MENU_VIEW)
            tooltip = self.surface.view(TOOLTIP_VIEW)
        except UnknownViewError:
            return
        tooltip.visible = menu.visible and tooltip.buffer() != ""

    def _read_more_lines_on_growth(self, dimensions: WindowDimensions, effects: list[str]) -> None:
        # Buffered readers pull extra lines instead of restarting from scratch.
        if self.hooks.buffer_manager_for_view is None:
            return
        rect = dimensions.get(MAIN_VIEW)
        if rect is None:
            return
        try:
            main = self.surface.view(MAIN_VIEW)
        except UnknownViewError:
            return
        new_height = rect.height - 2 + 2 * frame_offset(main.frame)
        height_diff = new_height - main.inner_height
        if height_diff <= 0:
            return
        managers = [
            manager
            for manager in map(self.hooks.buffer_manager_for_view, (MAIN_VIEW, SECONDARY_VIEW))
            if manager is not None
        ]
        if not managers:
            return
        for manager in managers:
            manager.read_lines(height_diff)
        effects.append(f"read_lines:{height_diff}")

    def _react_to_main_resize(self, effects: list[str]) -> None:
        try:
            main = self.surface.view(MAIN_VIEW)
        except UnknownViewError:
            return
        main_width, main_height = main.inner_width, main.inner_height
        if main_width == self._snapshot.main_width and main_height == self._snapshot.main_height:
            return
        self._snapshot = replace(self._snapshot, main_width=main_width, main_height=main_height)
        self.hooks.on_resize()
        effects.append("resize")


__all__ = [
    "LayoutEngine",
    "LayoutEvent",
    "LayoutHooks",
    "LayoutSnapshot",
    "PassResult",
]
