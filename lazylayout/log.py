"""Debug logging setup.

A full-screen session must never write log records to the terminal, so the
package logger only gets a file handler when ``--debug`` is passed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "lazylayout"
LOG_FILENAME = "development.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(debug: bool, path: Path | None = None) -> Path | None:
    """Attach a file handler to the package logger when ``debug`` is set.

    Returns the log file path, or ``None`` when logging stays disabled.
    """
    package_logger = logging.getLogger(APP_NAME)
    if not debug:
        return None

    target = path if path is not None else log_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    return target
