"""Terminal control helpers for the full-screen session.

Owns raw-mode lifecycle, alternate-screen switching and frame output.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

FALLBACK_TERMINAL_SIZE = (80, 24)


def terminal_size() -> tuple[int, int]:
    """Return ``(columns, lines)`` of the controlling terminal."""
    term = shutil.get_terminal_size(FALLBACK_TERMINAL_SIZE)
    return max(1, term.columns), max(1, term.lines)


class TerminalController:
    """Manage terminal mode transitions for the session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        """Show the cursor, restore the main screen buffer and tty state."""
        os.write(self.stdout_fd, b"\x1b[0m\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def write_frame(self, frame: str) -> None:
        data = frame.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
