"""Main interactive event loop for the terminal UI.

Polls the terminal size, runs a layout pass whenever something changed,
writes the composed frame and dispatches keys to the session. The loop owns
no application state; everything lives on ``Session``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..layout.engine import LayoutEvent
from .input import read_key
from .render import compose_frame
from .session import Session
from .terminal import TerminalController, terminal_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 120
    error_backoff_seconds: float = 0.5


DEFAULT_LOOP_TIMING = RuntimeLoopTiming()


def run_pass_reporting_errors(session: Session, event: LayoutEvent) -> bool:
    """Run one pass; a failure is logged and shown instead of ending the app.

    Returns ``True`` when the pass completed. A failed lifecycle phase is
    retried by the next pass, so the loop only has to keep going.
    """
    try:
        session.run_pass(event)
    except Exception as exc:
        logger.exception("layout pass failed")
        session.set_status(f"error: {exc}")
        return False
    return True


def run_main_loop(
    session: Session,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming = DEFAULT_LOOP_TIMING,
    *,
    get_size: Callable[[], tuple[int, int]] = terminal_size,
    read: Callable[[int, int | None], str] = read_key,
) -> None:
    """Run the interactive TUI loop until a quit key is pressed.

    Each iteration handles resize bookkeeping, an optional layout pass and
    frame write, then waits briefly for one key.
    """
    last_size: tuple[int, int] | None = None
    dirty = True

    with terminal.raw_mode():
        while True:
            size = get_size()
            event = LayoutEvent.RENDER
            if size != last_size:
                session.surface.resize(*size)
                last_size = size
                event = LayoutEvent.RESIZE
                dirty = True
            if session.tick():
                dirty = True

            if dirty:
                completed = run_pass_reporting_errors(session, event)
                terminal.write_frame(compose_frame(session.surface))
                # Failed passes are retried until one completes.
                dirty = not completed
                if not completed:
                    time.sleep(timing.error_backoff_seconds)

            key = read(stdin_fd, timing.key_timeout_ms)
            if not key:
                continue
            if session.handle_key(key):
                return
            dirty = True


__all__ = ["DEFAULT_LOOP_TIMING", "RuntimeLoopTiming", "run_main_loop", "run_pass_reporting_errors"]
