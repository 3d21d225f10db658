"""Tests for the pass-end deferred action queue."""

from __future__ import annotations

import threading
import unittest

from lazylayout.layout.deferred import DeferredActionQueue


class DeferredActionQueueTests(unittest.TestCase):
    def test_drain_runs_actions_in_fifo_order(self) -> None:
        queue = DeferredActionQueue()
        ran: list[int] = []
        for idx in range(5):
            queue.enqueue(lambda idx=idx: ran.append(idx))

        self.assertEqual(queue.pending(), 5)
        self.assertEqual(queue.drain(), 5)
        self.assertEqual(ran, [0, 1, 2, 3, 4])
        self.assertEqual(queue.pending(), 0)
        self.assertEqual(queue.drain(), 0)

    def test_failure_stops_drain_and_propagates(self) -> None:
        queue = DeferredActionQueue()
        ran: list[str] = []

        def fail() -> None:
            raise RuntimeError("boom")

        queue.enqueue(lambda: ran.append("first"))
        queue.enqueue(fail)
        queue.enqueue(lambda: ran.append("third"))

        with self.assertRaisesRegex(RuntimeError, "boom"):
            queue.drain()

        self.assertEqual(ran, ["first"])
        self.assertEqual(queue.pending(), 1)
        self.assertEqual(queue.drain(), 1)
        self.assertEqual(ran, ["first", "third"])

    def test_actions_enqueued_while_draining_run_in_same_drain(self) -> None:
        queue = DeferredActionQueue()
        ran: list[str] = []
        queue.enqueue(lambda: queue.enqueue(lambda: ran.append("nested")))

        self.assertEqual(queue.drain(), 2)
        self.assertEqual(ran, ["nested"])

    def test_enqueue_is_safe_from_many_threads(self) -> None:
        queue = DeferredActionQueue()
        ran: list[int] = []
        lock = threading.Lock()

        def record(value: int) -> None:
            with lock:
                ran.append(value)

        def producer(offset: int) -> None:
            for idx in range(50):
                queue.enqueue(lambda value=offset + idx: record(value))

        threads = [threading.Thread(target=producer, args=(offset,)) for offset in (0, 100, 200, 300)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(queue.drain(), 200)
        self.assertEqual(sorted(ran), sorted([o + i for o in (0, 100, 200, 300) for i in range(50)]))


if __name__ == "__main__":
    unittest.main()
