"""Targeted tests for text sanitization and fallback highlighting.

Ensures control bytes are escaped while standard whitespace is preserved.
Also protects plaintext spacing and unknown-style fallback.
"""

import re
import tempfile
import unittest
from pathlib import Path

from lazylayout.highlight import colorize_source, read_text, sanitize_terminal_text

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


class HighlightSanitizationTests(unittest.TestCase):
    def test_sanitize_terminal_text_escapes_control_bytes_but_keeps_common_whitespace(self) -> None:
        source = "a\tb\nc\rd\x07e\x1bf"
        sanitized = sanitize_terminal_text(source)

        self.assertEqual(sanitized, "a\tb\nc\rd\\x07e\\x1bf")
        self.assertNotIn("\x07", sanitized)
        self.assertNotIn("\x1b", sanitized)

    def test_colorize_keeps_spacing_for_extensionless_text(self) -> None:
        source = "Permission  is  hereby granted, free of charge:\n"

        rendered = colorize_source(source, Path("LICENSE"))

        self.assertEqual(ANSI_RE.sub("", rendered), source)

    def test_python_source_is_colored_and_unknown_style_falls_back(self) -> None:
        source = "def answer():\n    return 42\n"

        rendered = colorize_source(source, Path("answer.py"), style="no-such-style")

        self.assertIn("\x1b[", rendered)
        self.assertEqual(ANSI_RE.sub("", rendered), source)

    def test_read_text_falls_back_to_latin1(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "legacy.txt"
            path.write_bytes(b"caf\xe9\n")
            self.assertEqual(read_text(path), "café\n")


if __name__ == "__main__":
    unittest.main()
