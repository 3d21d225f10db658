"""Tests for popup placement."""

from __future__ import annotations

import unittest

from lazylayout.layout.contexts import Context, ContextKind, ContextTree
from lazylayout.layout.geometry import Rect
from lazylayout.layout.popups import popup_rect, resize_popup_panels
from lazylayout.layout.views import ViewRegistry


def _popup_tree() -> ContextTree:
    return ContextTree(
        Context(view_name="main"),
        Context(view_name="menu", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False),
        Context(view_name="confirmation", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False),
    )


class PopupRectTests(unittest.TestCase):
    def test_popup_is_centered_with_minimum_width(self) -> None:
        self.assertEqual(popup_rect(80, 24, ["hello"] * 3, title="T"), Rect(19, 9, 60, 13))

    def test_popup_is_clipped_to_screen_margin(self) -> None:
        self.assertEqual(popup_rect(20, 10, ["x" * 100] * 50), Rect(2, 2, 17, 7))


class ResizePopupPanelsTests(unittest.TestCase):
    def test_places_visible_popups_and_tooltip_below_menu(self) -> None:
        surface = ViewRegistry(80, 24)
        menu = surface.create_view("menu", title="T")
        menu.lines = ["one", "two", "three"]
        tooltip = surface.create_view("tooltip")
        tooltip.lines = ["/path/to/one"]
        hidden = surface.create_view("confirmation")
        hidden.visible = False

        placed = resize_popup_panels(surface, _popup_tree())

        self.assertEqual(placed, ["menu", "tooltip"])
        self.assertEqual(menu.bounds, Rect(19, 9, 60, 13))
        self.assertEqual(tooltip.bounds, Rect(19, 14, 60, 16))

    def test_tooltip_moves_above_menu_without_room_below(self) -> None:
        surface = ViewRegistry(80, 14)
        menu = surface.create_view("menu")
        menu.lines = [str(idx) for idx in range(8)]
        surface.create_view("tooltip").lines = ["detail"]

        resize_popup_panels(surface, _popup_tree())

        self.assertEqual(menu.bounds, Rect(19, 2, 60, 11))
        self.assertEqual(surface.view("tooltip").bounds, Rect(19, 0, 60, 1))

    def test_missing_popup_views_are_ignored(self) -> None:
        surface = ViewRegistry(80, 24)
        self.assertEqual(resize_popup_panels(surface, _popup_tree()), [])


if __name__ == "__main__":
    unittest.main()
