"""Drawable views and the terminal-control surface they live on.

Every terminal-control call the layout core makes goes through the
``ViewSurface`` protocol. ``ViewRegistry`` is the in-memory implementation the
application renders from; tests drive the binder against it directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from .geometry import Rect

logger = logging.getLogger(__name__)

DEFAULT_VIEW_BOUNDS = Rect(0, 0, 10, 10)


class LayoutError(Exception):
    """Base class for layout-core failures."""


class UnknownViewError(LayoutError):
    """Raised when a view name has not been created on the surface yet."""

    def __init__(self, view_name: str) -> None:
        super().__init__(f"unknown view: {view_name!r}")
        self.view_name = view_name


class TerminalSurfaceError(LayoutError):
    """Raised for any other failure while applying geometry to the surface."""


class LifecycleError(LayoutError):
    """Raised on an illegal lifecycle state transition."""


@dataclass
class View:
    """A drawable rectangular slot with scroll state and content.

    ``bounds`` are the outer bounds, border cells included. The border slot
    is reserved whether or not the frame is drawn.
    """

    name: str
    bounds: Rect = DEFAULT_VIEW_BOUNDS
    frame: bool = True
    visible: bool = True
    origin_y: int = 0
    can_scroll_past_bottom: bool = False
    title: str = ""
    lines: list[str] = field(default_factory=list)

    @property
    def inner_width(self) -> int:
        return max(0, self.bounds.x1 - self.bounds.x0 - 1)

    @property
    def inner_height(self) -> int:
        return max(0, self.bounds.y1 - self.bounds.y0 - 1)

    @property
    def content_height(self) -> int:
        return len(self.lines)

    def scroll_up(self, amount: int) -> None:
        self.origin_y = max(0, self.origin_y - max(0, amount))

    def scroll_down(self, amount: int) -> None:
        """Scroll toward the end of the content, stopping at the last page."""
        limit = self.content_height if self.can_scroll_past_bottom else self.content_height - self.inner_height
        self.origin_y = max(0, min(self.origin_y + max(0, amount), limit))

    def set_content(self, text: str) -> None:
        self.lines = text.splitlines()

    def append_lines(self, lines: list[str]) -> None:
        self.lines.extend(lines)

    def clear(self) -> None:
        self.lines = []
        self.origin_y = 0

    def buffer(self) -> str:
        return "\n".join(self.lines)


class ViewSurface(Protocol):
    """Narrow terminal-control interface used by the layout core."""

    current_view_name: str | None

    def size(self) -> tuple[int, int]: ...

    def view(self, name: str) -> View: ...

    def create_view(self, name: str, *, frame: bool = True, title: str = "") -> View: ...

    def set_view(self, name: str, bounds: Rect) -> View: ...

    def set_view_on_top(self, name: str) -> View: ...

    def set_current_view(self, name: str) -> View: ...

    def views_bottom_to_top(self) -> list[View]: ...


class ViewRegistry:
    """In-memory ``ViewSurface``; views live for the whole process."""

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = width
        self.height = height
        self.current_view_name: str | None = None
        self._views: dict[str, View] = {}
        self._stack: list[str] = []

    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)

    def has_view(self, name: str) -> bool:
        return name in self._views

    def view(self, name: str) -> View:
        try:
            return self._views[name]
        except KeyError:
            raise UnknownViewError(name) from None

    def create_view(self, name: str, *, frame: bool = True, title: str = "") -> View:
        """Return view ``name``, creating it at placeholder bounds if needed."""
        existing = self._views.get(name)
        if existing is not None:
            return existing
        view = View(name=name, frame=frame, title=title)
        self._views[name] = view
        self._stack.append(name)
        logger.debug("created view %s", name)
        return view

    def set_view(self, name: str, bounds: Rect) -> View:
        """Move/resize view ``name``, creating it when it does not exist yet."""
        if bounds.x0 > bounds.x1 or bounds.y0 > bounds.y1:
            raise TerminalSurfaceError(f"invalid bounds for view {name!r}: {bounds.as_tuple()}")
        view = self.create_view(name)
        view.bounds = bounds
        return view

    def set_view_on_top(self, name: str) -> View:
        view = self.view(name)
        self._stack.remove(name)
        self._stack.append(name)
        return view

    def set_current_view(self, name: str) -> View:
        view = self.view(name)
        self.current_view_name = name
        return view

    def current_view(self) -> View | None:
        if self.current_view_name is None:
            return None
        return self._views.get(self.current_view_name)

    def views_bottom_to_top(self) -> list[View]:
        return [self._views[name] for name in self._stack]


__all__ = [
    "LayoutError",
    "LifecycleError",
    "TerminalSurfaceError",
    "UnknownViewError",
    "View",
    "ViewRegistry",
    "ViewSurface",
]
