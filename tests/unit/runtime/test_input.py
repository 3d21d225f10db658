"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, and control-key token mapping.
"""

import os
import time
import unittest

from lazylayout.runtime import input as input_mod


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=1), "")

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        os.write(self.write_fd, b"\x1b")
        started = time.monotonic()
        key = input_mod.read_key(self.read_fd, timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "ESC")
        self.assertLess(elapsed, 0.2)

    def test_arrow_and_shift_tab_sequences(self) -> None:
        os.write(self.write_fd, b"\x1b[A\x1b[Z")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "UP")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "SHIFT_TAB")

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        os.write(self.write_fd, b"\x1bq")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ESC")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "q")

    def test_control_keys_map_to_tokens(self) -> None:
        os.write(self.write_fd, b"\t\r\x03\x7f")
        keys = [input_mod.read_key(self.read_fd, timeout_ms=20) for _ in range(4)]
        self.assertEqual(keys, ["TAB", "ENTER", "CTRL_C", "BACKSPACE"])


if __name__ == "__main__":
    unittest.main()
