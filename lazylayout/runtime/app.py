"""Runtime composition layer for lazylayout.

Loads persisted config and state, builds the session and starts the loop.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from ..highlight import DEFAULT_STYLE
from .config import load_app_state, load_user_config, remember_repo, save_app_state
from .loop import run_main_loop
from .repo import resolve_repo_root
from .session import Session
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_session(
    repo_path: Path,
    *,
    preview_path: Path | None = None,
    style: str = DEFAULT_STYLE,
    show_recent_repos: bool = False,
) -> Session:
    """Create a ``Session`` for ``repo_path`` from the persisted config and state."""
    repo_root = resolve_repo_root(repo_path)
    app_state = load_app_state()
    remember_repo(app_state, repo_root)
    return Session(
        repo_root,
        user_config=load_user_config(),
        app_state=app_state,
        preview_path=preview_path,
        style=style,
        show_recent_repos=show_recent_repos,
        save_state=save_app_state,
    )


def run_app(
    repo_path: Path,
    *,
    preview_path: Path | None = None,
    style: str = DEFAULT_STYLE,
    show_recent_repos: bool = False,
) -> None:
    """Run the full-screen application until the user quits."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("lazylayout needs an interactive terminal.")

    session = build_session(
        repo_path,
        preview_path=preview_path,
        style=style,
        show_recent_repos=show_recent_repos,
    )
    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    logger.info("starting in %s", session.repo_root)
    try:
        run_main_loop(session, terminal, stdin_fd)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("exiting")


__all__ = ["build_session", "run_app"]
