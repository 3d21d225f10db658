"""Tests for binding geometry-controlled contexts to views."""

from __future__ import annotations

import unittest

from lazylayout.layout.binder import (
    apply_transient_visibility,
    bind_context_view,
    bind_controlled_views,
    frame_offset,
)
from lazylayout.layout.contexts import Context, ContextKind, ContextTree, WidthRerenderPolicy
from lazylayout.layout.geometry import Rect
from lazylayout.layout.views import TerminalSurfaceError, UnknownViewError, ViewRegistry
from lazylayout.layout.windows import WindowOwnership


class _FailingSurface(ViewRegistry):
    def set_view(self, name, bounds):
        raise TerminalSurfaceError(f"cannot place {name}")


def _lines(count: int) -> list[str]:
    return [f"line {idx}" for idx in range(count)]


class BindContextViewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.surface = ViewRegistry(80, 24)

    def test_frame_offset(self) -> None:
        self.assertEqual(frame_offset(True), 0)
        self.assertEqual(frame_offset(False), 1)

    def test_framed_view_gets_window_rect(self) -> None:
        view = self.surface.create_view("main")
        bind_context_view(self.surface, Context(view_name="main"), {"main": Rect(0, 0, 19, 9)})

        self.assertEqual(view.bounds, Rect(0, 0, 19, 9))
        self.assertEqual((view.inner_width, view.inner_height), (18, 8))
        self.assertTrue(view.visible)

    def test_frameless_view_is_expanded_so_content_fills_rect(self) -> None:
        view = self.surface.create_view("options", frame=False)
        bind_context_view(self.surface, Context(view_name="options"), {"options": Rect(1, 23, 78, 23)})

        self.assertEqual(view.bounds, Rect(0, 22, 79, 24))
        self.assertEqual((view.inner_width, view.inner_height), (78, 1))

    def test_same_rect_framed_and_frameless(self) -> None:
        framed = self.surface.create_view("framed")
        frameless = self.surface.create_view("frameless", frame=False)
        dims = {"framed": Rect(2, 2, 10, 10), "frameless": Rect(2, 2, 10, 10)}

        bind_context_view(self.surface, Context(view_name="framed"), dims)
        bind_context_view(self.surface, Context(view_name="frameless"), dims)

        self.assertEqual(framed.bounds, Rect(2, 2, 10, 10))
        self.assertEqual(frameless.bounds, Rect(1, 1, 11, 11))

    def test_origin_is_clamped_to_last_page(self) -> None:
        view = self.surface.create_view("log", frame=False)
        view.lines = _lines(100)
        view.origin_y = 90

        bind_context_view(self.surface, Context(view_name="log"), {"log": Rect(0, 0, 39, 19)})

        self.assertEqual(view.origin_y, 80)

    def test_origin_may_pass_bottom_when_view_allows_it(self) -> None:
        view = self.surface.create_view("log", frame=False)
        view.lines = _lines(100)
        view.origin_y = 95
        view.can_scroll_past_bottom = True

        bind_context_view(self.surface, Context(view_name="log"), {"log": Rect(0, 0, 39, 19)})

        self.assertEqual(view.origin_y, 95)

    def test_context_content_height_overrides_buffer_length(self) -> None:
        view = self.surface.create_view("main")
        view.origin_y = 45
        context = Context(view_name="main", content_height=lambda: 50)

        bind_context_view(self.surface, context, {"main": Rect(0, 0, 19, 11)})

        self.assertEqual(view.origin_y, 40)

    def test_missing_window_hides_view_at_full_canvas_size(self) -> None:
        view = self.surface.create_view("stash")
        rerender = bind_context_view(self.surface, Context(view_name="stash"), {})

        self.assertFalse(rerender)
        self.assertFalse(view.visible)
        self.assertEqual(view.bounds, Rect(0, 0, 80, 24))

    def test_width_change_rerenders_only_with_width_policy(self) -> None:
        self.surface.create_view("status")
        self.surface.create_view("files")
        dims = {"status": Rect(0, 0, 19, 2), "files": Rect(0, 3, 19, 8)}
        status = Context(view_name="status", rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES)
        files = Context(view_name="files")

        self.assertTrue(bind_context_view(self.surface, status, dims))
        self.assertFalse(bind_context_view(self.surface, files, dims))

    def test_height_change_rerenders_when_requested(self) -> None:
        self.surface.create_view("main")
        context = Context(view_name="main", rerender_on_height=True)

        self.assertTrue(bind_context_view(self.surface, context, {"main": Rect(0, 0, 10, 20)}))

    def test_rebinding_same_dimensions_is_idempotent(self) -> None:
        self.surface.create_view("main")
        self.surface.create_view("options", frame=False)
        self.surface.create_view("tiny")
        contexts = [
            Context(
                view_name="main",
                rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES,
                rerender_on_height=True,
            ),
            Context(
                view_name="options",
                rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES,
                rerender_on_height=True,
            ),
            Context(
                view_name="tiny",
                rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES,
                rerender_on_height=True,
            ),
        ]
        dims = {"main": Rect(20, 0, 79, 18), "options": Rect(1, 23, 78, 23), "tiny": Rect(0, 0, 0, 0)}

        for context in contexts:
            bind_context_view(self.surface, context, dims)
        bounds = [self.surface.view(context.view_name).bounds for context in contexts]

        for context in contexts:
            self.assertFalse(bind_context_view(self.surface, context, dims), context.view_name)
        self.assertEqual([self.surface.view(context.view_name).bounds for context in contexts], bounds)

    def test_unknown_view_raises(self) -> None:
        with self.assertRaises(UnknownViewError):
            bind_context_view(self.surface, Context(view_name="nope"), {"nope": Rect(0, 0, 5, 5)})


class BindControlledViewsTests(unittest.TestCase):
    def test_binds_in_flatten_order_and_skips_unknown_views(self) -> None:
        surface = ViewRegistry(80, 24)
        surface.create_view("status")
        surface.create_view("main")
        tree = ContextTree(
            Context(view_name="status", rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES),
            Context(view_name="missing"),
            ContextTree(Context(view_name="main", rerender_on_height=True)),
        )
        dims = {"status": Rect(0, 0, 25, 2), "main": Rect(26, 0, 79, 18), "missing": Rect(0, 3, 25, 8)}

        with self.assertLogs("lazylayout.layout.binder", level="DEBUG"):
            rerendered = bind_controlled_views(surface, tree, dims)

        self.assertEqual([context.view_name for context in rerendered], ["status", "main"])

    def test_popups_without_controlled_bounds_are_left_alone(self) -> None:
        surface = ViewRegistry(80, 24)
        menu = surface.create_view("menu")
        surface.set_view("menu", Rect(10, 5, 40, 12))
        tree = ContextTree(Context(view_name="menu", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False))

        bind_controlled_views(surface, tree, {})

        self.assertEqual(menu.bounds, Rect(10, 5, 40, 12))
        self.assertTrue(menu.visible)

    def test_surface_failure_propagates(self) -> None:
        surface = _FailingSurface(80, 24)
        surface.create_view("main")

        with self.assertRaises(TerminalSurfaceError):
            bind_controlled_views(surface, ContextTree(Context(view_name="main")), {"main": Rect(0, 0, 9, 9)})


class TransientVisibilityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.surface = ViewRegistry(80, 24)
        self.commits = self.surface.create_view("commits")
        self.reflog = self.surface.create_view("reflog")
        self.tree = ContextTree(
            Context(view_name="commits", transient=True),
            Context(view_name="reflog", window_name="commits", transient=True),
            Context(view_name="not-created", window_name="commits", transient=True),
        )
        self.ownership = WindowOwnership()

    def test_window_owner_defaults_to_view_of_same_name(self) -> None:
        apply_transient_visibility(self.surface, self.tree, self.ownership)

        self.assertTrue(self.commits.visible)
        self.assertFalse(self.reflog.visible)

    def test_exactly_one_occupant_is_visible(self) -> None:
        self.ownership.set_occupant("commits", "reflog")
        apply_transient_visibility(self.surface, self.tree, self.ownership)

        self.assertFalse(self.commits.visible)
        self.assertTrue(self.reflog.visible)

        self.ownership.reset()
        apply_transient_visibility(self.surface, self.tree, self.ownership)
        self.assertTrue(self.commits.visible)
        self.assertFalse(self.reflog.visible)


if __name__ == "__main__":
    unittest.main()
