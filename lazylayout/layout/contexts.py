"""Panel descriptors and the ordered context tree.

A ``Context`` carries its capabilities as plain data; the binder branches
on those flags instead of dispatching on panel type. ``ContextTree.flatten``
is the single traversal order shared by binding and every filter below, so
bounds and visibility are reproducible from pass to pass.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from .views import View


class ContextKind(Enum):
    NORMAL = "normal"
    PERSISTENT_POPUP = "persistent_popup"
    TEMPORARY_POPUP = "temporary_popup"


class WidthRerenderPolicy(Enum):
    NEVER = "never"
    WHEN_WIDTH_CHANGES = "when_width_changes"


POPUP_KINDS = frozenset({ContextKind.PERSISTENT_POPUP, ContextKind.TEMPORARY_POPUP})


@dataclass(frozen=True)
class Context:
    """Logical panel bound to one view and owned by one window."""

    view_name: str
    window_name: str = ""
    kind: ContextKind = ContextKind.NORMAL
    controlled_bounds: bool = True
    transient: bool = False
    rerender_on_width: WidthRerenderPolicy = WidthRerenderPolicy.NEVER
    rerender_on_height: bool = False
    content_height: Callable[[], int] | None = field(default=None, compare=False, repr=False)
    on_render: Callable[[], None] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.window_name:
            object.__setattr__(self, "window_name", self.view_name)

    @property
    def is_popup(self) -> bool:
        return self.kind in POPUP_KINDS

    def total_content_height(self, view: View) -> int:
        """Return the logical content height, falling back to the view buffer."""
        if self.content_height is None:
            return view.content_height
        return max(0, int(self.content_height()))

    def handle_render(self) -> None:
        if self.on_render is not None:
            self.on_render()


class ContextTree:
    """Ordered, nestable collection of contexts."""

    def __init__(self, *entries: Context | ContextTree) -> None:
        self._entries: list[Context | ContextTree] = list(entries)

    def add(self, *entries: Context | ContextTree) -> None:
        self._entries.extend(entries)

    def __iter__(self) -> Iterator[Context]:
        return iter(self.flatten())

    def __len__(self) -> int:
        return len(self.flatten())

    def flatten(self) -> list[Context]:
        """Return every context depth-first in registration order."""
        out: list[Context] = []
        for entry in self._entries:
            if isinstance(entry, ContextTree):
                out.extend(entry.flatten())
            else:
                out.append(entry)
        return out

    def by_view_name(self, view_name: str) -> Context | None:
        return next((context for context in self.flatten() if context.view_name == view_name), None)

    def popup_contexts(self) -> list[Context]:
        return [context for context in self.flatten() if context.is_popup]

    def popup_view_names(self) -> list[str]:
        return [context.view_name for context in self.popup_contexts()]

    def transient_contexts(self) -> list[Context]:
        return [context for context in self.flatten() if context.transient]

    def controlled_contexts(self) -> list[Context]:
        return [context for context in self.flatten() if context.controlled_bounds]


__all__ = [
    "Context",
    "ContextKind",
    "ContextTree",
    "POPUP_KINDS",
    "WidthRerenderPolicy",
]
