"""Background check for a newer installed version of the app."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from importlib import metadata

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "lazylayout"


def installed_version() -> str | None:
    """Return the version of the installed distribution, if any."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return None


class UpdateChecker:
    """Compare the running version with the installed one off the UI thread.

    The result is handed to ``report`` from the worker thread; callers route
    it through the deferred-action queue so it is applied inside a pass.
    """

    def __init__(
        self,
        running_version: str,
        report: Callable[[str], None],
        *,
        get_installed_version: Callable[[], str | None] = installed_version,
        wait_for_startup: Callable[[], object] | None = None,
    ) -> None:
        self.running_version = running_version
        self._report = report
        self._get_installed_version = get_installed_version
        self._wait_for_startup = wait_for_startup
        self._lock = threading.Lock()
        self._running = False

    def _worker(self) -> None:
        try:
            latest = self._get_installed_version()
        except Exception:
            logger.exception("update check failed")
            latest = None
        finally:
            with self._lock:
                self._running = False
        if latest and latest != self.running_version:
            if self._wait_for_startup is not None:
                # Reports must not race the startup popups.
                self._wait_for_startup()
            logger.info("version %s installed, running %s", latest, self.running_version)
            self._report(latest)

    def check_in_background(self) -> threading.Thread | None:
        """Start a check unless one is already running; never waits for it."""
        with self._lock:
            if self._running:
                return None
            self._running = True
        worker = threading.Thread(target=self._worker, name="lazylayout-update-check", daemon=True)
        worker.start()
        return worker


__all__ = ["UpdateChecker", "installed_version"]
