"""Deferred actions run at the end of a layout pass."""

from __future__ import annotations

import logging
from collections.abc import Callable
from queue import Empty, Queue

logger = logging.getLogger(__name__)

DeferredAction = Callable[[], None]


class DeferredActionQueue:
    """Multi-producer, single-consumer FIFO of pass-end callbacks.

    ``enqueue`` may be called from any thread. ``drain`` runs on the pass
    thread only and never waits for producers.
    """

    def __init__(self) -> None:
        self._actions: Queue[DeferredAction] = Queue()

    def enqueue(self, action: DeferredAction) -> None:
        self._actions.put(action)

    def pending(self) -> int:
        return self._actions.qsize()

    def drain(self) -> int:
        """Run queued actions in FIFO order until the queue is empty.

        The first failing action stops the drain and its exception propagates;
        actions that already ran are not undone and the rest stay queued.
        """
        executed = 0
        while True:
            try:
                action = self._actions.get_nowait()
            except Empty:
                return executed
            action()
            executed += 1
            logger.debug("ran deferred action %d", executed)


__all__ = ["DeferredAction", "DeferredActionQueue"]
