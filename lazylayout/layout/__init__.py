"""View-layout and focus-coordination core.

Geometry resolution, view binding, context filtering, the startup lifecycle
and the deferred-action queue. Nothing in here touches a real terminal; all
terminal-control calls go through ``ViewSurface``.
"""

from __future__ import annotations

from .binder import apply_transient_visibility, bind_context_view, bind_controlled_views
from .contexts import Context, ContextKind, ContextTree, WidthRerenderPolicy
from .deferred import DeferredActionQueue
from .engine import LayoutEngine, LayoutEvent, LayoutHooks, LayoutSnapshot, PassResult
from .geometry import LayoutOptions, Rect, resolve_window_dimensions
from .lifecycle import Lifecycle, LifecycleState, ProcessStartupCallbacks, RepoStartupCallbacks, StartupSettings
from .views import LayoutError, LifecycleError, TerminalSurfaceError, UnknownViewError, View, ViewRegistry
from .windows import WindowOwnership

__all__ = [
    "Context",
    "ContextKind",
    "ContextTree",
    "DeferredActionQueue",
    "LayoutEngine",
    "LayoutError",
    "LayoutEvent",
    "LayoutHooks",
    "LayoutOptions",
    "LayoutSnapshot",
    "Lifecycle",
    "LifecycleError",
    "LifecycleState",
    "PassResult",
    "ProcessStartupCallbacks",
    "Rect",
    "RepoStartupCallbacks",
    "StartupSettings",
    "TerminalSurfaceError",
    "UnknownViewError",
    "View",
    "ViewRegistry",
    "WidthRerenderPolicy",
    "WindowOwnership",
    "apply_transient_visibility",
    "bind_context_view",
    "bind_controlled_views",
    "resolve_window_dimensions",
]
