"""Window-ownership authority for views that share a window."""

from __future__ import annotations


class WindowOwnership:
    """Track which view currently occupies each window.

    A window nobody has claimed is occupied by the view of the same name.
    """

    def __init__(self) -> None:
        self._occupants: dict[str, str] = {}

    def view_name_for_window(self, window_name: str) -> str:
        return self._occupants.get(window_name, window_name)

    def set_occupant(self, window_name: str, view_name: str) -> None:
        self._occupants[window_name] = view_name

    def reset(self) -> None:
        self._occupants.clear()


__all__ = ["WindowOwnership"]
