"""Lazy line readers that fill a view from a (possibly long) line source."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from itertools import islice

from .views import View

INITIAL_READ_PADDING = 10


class ViewBufferManager:
    """Fill ``view`` from ``source`` a page at a time.

    The first fill reads one screenful plus a little padding; callers pull
    more with ``read_lines`` (on scroll or when the view grows).
    """

    def __init__(self, view: View, source: Iterable[str]) -> None:
        self.view = view
        self._source: Iterator[str] = iter(source)
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def start(self) -> int:
        self.view.clear()
        return self.read_lines(self.view.inner_height + INITIAL_READ_PADDING)

    def read_lines(self, count: int) -> int:
        """Append up to ``count`` more lines; return how many were read."""
        if count <= 0 or self._exhausted:
            return 0
        chunk = [line.rstrip("\r\n") for line in islice(self._source, count)]
        if len(chunk) < count:
            self._exhausted = True
        self.view.append_lines(chunk)
        return len(chunk)

    def read_to_origin(self) -> int:
        """Make sure the lines below the current scroll origin are loaded."""
        wanted = self.view.origin_y + self.view.inner_height - self.view.content_height
        return self.read_lines(wanted)


__all__ = ["INITIAL_READ_PADDING", "ViewBufferManager"]
