"""Tests for context descriptors and tree traversal."""

from __future__ import annotations

import unittest

from lazylayout.layout.contexts import Context, ContextKind, ContextTree
from lazylayout.layout.views import View


class ContextTests(unittest.TestCase):
    def test_window_name_defaults_to_view_name(self) -> None:
        self.assertEqual(Context(view_name="files").window_name, "files")
        self.assertEqual(Context(view_name="reflog", window_name="commits").window_name, "commits")

    def test_total_content_height_falls_back_to_buffer(self) -> None:
        view = View(name="files", lines=["a", "b", "c"])
        self.assertEqual(Context(view_name="files").total_content_height(view), 3)
        self.assertEqual(Context(view_name="files", content_height=lambda: 40).total_content_height(view), 40)

    def test_handle_render_invokes_callback(self) -> None:
        calls: list[str] = []
        Context(view_name="main", on_render=lambda: calls.append("main")).handle_render()
        Context(view_name="noop").handle_render()
        self.assertEqual(calls, ["main"])

    def test_callbacks_do_not_affect_equality(self) -> None:
        self.assertEqual(
            Context(view_name="main", on_render=lambda: None),
            Context(view_name="main", on_render=lambda: None),
        )


class ContextTreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tree = ContextTree(
            Context(view_name="status"),
            ContextTree(
                Context(view_name="commits", transient=True),
                Context(view_name="reflog", window_name="commits", transient=True),
            ),
            Context(view_name="main"),
        )
        self.tree.add(
            ContextTree(
                Context(view_name="menu", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False),
                Context(view_name="help", kind=ContextKind.PERSISTENT_POPUP, controlled_bounds=False),
            )
        )

    def test_flatten_is_depth_first_in_registration_order(self) -> None:
        self.assertEqual(
            [context.view_name for context in self.tree.flatten()],
            ["status", "commits", "reflog", "main", "menu", "help"],
        )
        self.assertEqual(len(self.tree), 6)
        self.assertEqual([context.view_name for context in self.tree], ["status", "commits", "reflog", "main", "menu", "help"])

    def test_filters_keep_flatten_order(self) -> None:
        self.assertEqual(self.tree.popup_view_names(), ["menu", "help"])
        self.assertEqual([c.view_name for c in self.tree.transient_contexts()], ["commits", "reflog"])
        self.assertEqual(
            [c.view_name for c in self.tree.controlled_contexts()],
            ["status", "commits", "reflog", "main"],
        )

    def test_by_view_name(self) -> None:
        reflog = self.tree.by_view_name("reflog")
        self.assertIsNotNone(reflog)
        self.assertEqual(reflog.window_name, "commits")
        self.assertIsNone(self.tree.by_view_name("nope"))


if __name__ == "__main__":
    unittest.main()
