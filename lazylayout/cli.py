"""Command-line front door for lazylayout.

Parses CLI options, configures debug logging, and dispatches either into
one of the non-interactive helpers (``--logs``, ``--dump-layout``) or into
the interactive runtime.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .highlight import DEFAULT_STYLE
from .layout.geometry import resolve_window_dimensions
from .log import configure_logging, log_path
from .runtime import run_app
from .runtime.config import load_user_config

LOG_TAIL_LINES = 200


def _terminal_size_arg(value: str) -> tuple[int, int]:
    """argparse type for ``WIDTHxHEIGHT`` values."""
    width_text, sep, height_text = value.lower().partition("x")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}")
    try:
        width, height = int(width_text), int(height_text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid size: {value!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("width and height must be >= 1")
    return width, height


def dump_layout(width: int, height: int, information: str = "", app_status: str = "") -> str:
    """Return the resolved window rectangles for a terminal size as JSON."""
    options = load_user_config().layout_options()
    dimensions = resolve_window_dimensions(width, height, information, app_status, options)
    payload = {name: list(rect.as_tuple()) for name, rect in dimensions.items()}
    return json.dumps(payload, indent=2, sort_keys=True)


def tail_log(path: Path, lines: int = LOG_TAIL_LINES) -> str:
    if not path.exists():
        return f"No log file at {path}. Run with --debug to create one.\n"
    content = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return "\n".join(content[-lines:]) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazylayout",
        description="Terminal git panels driven by a resolve-and-bind layout engine.",
    )
    parser.add_argument("repo", nargs="?", default=None, help="Repository path. Defaults to current directory.")
    parser.add_argument("--file", metavar="PATH", help="Show PATH, highlighted, in the main panel.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for --file.")
    parser.add_argument("--recent", action="store_true", help="Open the recent repositories menu on startup.")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to the log file.")
    parser.add_argument("--logs", action="store_true", help="Print the end of the debug log and exit.")
    parser.add_argument(
        "--dump-layout",
        metavar="WxH",
        type=_terminal_size_arg,
        default=None,
        help="Print the window rectangles for a WIDTHxHEIGHT terminal as JSON and exit.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch lazylayout.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)

    if args.logs:
        sys.stdout.write(tail_log(log_path()))
        return

    if args.dump_layout is not None:
        width, height = args.dump_layout
        sys.stdout.write(dump_layout(width, height) + "\n")
        return

    configure_logging(args.debug)

    if default_path is None:
        default_path = Path.cwd()
    repo_path = Path(args.repo) if args.repo else default_path
    if not repo_path.is_dir():
        raise SystemExit(f"Not a directory: {repo_path}")

    preview_path: Path | None = None
    if args.file is not None:
        preview_path = Path(args.file)
        if not preview_path.is_file():
            raise SystemExit(f"File not found: {preview_path}")

    run_app(repo_path, preview_path=preview_path, style=args.style, show_recent_repos=args.recent)


if __name__ == "__main__":
    main()
