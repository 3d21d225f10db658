"""Cold-start phases run by the first layout passes.

The lifecycle moves through three states::

    UNINITIALIZED --process ready--> PROCESS_READY --repo ready--> REPO_READY
                                           ^                           |
                                           +------ repository switch --+

Each phase only records its transition after every step succeeded, so a
failing step aborts the pass and the whole phase runs again on the next one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .contexts import ContextTree
from .views import LifecycleError, UnknownViewError, ViewSurface

logger = logging.getLogger(__name__)

PROCESS_READY_PHASE = "process_ready"
REPO_READY_PHASE = "repo_ready"


class LifecycleState(Enum):
    UNINITIALIZED = "uninitialized"
    PROCESS_READY = "process_ready"
    REPO_READY = "repo_ready"


_ALLOWED_TRANSITIONS = frozenset(
    {
        (LifecycleState.UNINITIALIZED, LifecycleState.PROCESS_READY),
        (LifecycleState.PROCESS_READY, LifecycleState.REPO_READY),
        (LifecycleState.REPO_READY, LifecycleState.PROCESS_READY),
    }
)


@dataclass(frozen=True)
class StartupSettings:
    """Values the process-ready phase compares and persists."""

    disable_startup_popups: bool
    startup_popup_version: int
    app_version: str
    show_recent_repos: bool = False


@dataclass(frozen=True)
class ProcessStartupCallbacks:
    """Steps of the once-per-process startup phase, in execution order."""

    print_command_log_header: Callable[[], None]
    activate_default_context: Callable[[], None]
    stored_popup_version: Callable[[], int]
    show_intro_popup: Callable[[], None]
    show_breaking_changes_popup: Callable[[], None]
    save_last_version: Callable[[str], None]
    create_recent_repos_menu: Callable[[], None]
    check_for_update_in_background: Callable[[], None]


@dataclass(frozen=True)
class RepoStartupCallbacks:
    """Steps of the once-per-repository startup phase."""

    ordered_view_names: Callable[[], list[str]]
    activate_current_context: Callable[[], None]
    load_repo: Callable[[], None]


class Lifecycle:
    """Own the startup state machine and run pending phases."""

    def __init__(
        self,
        surface: ViewSurface,
        contexts: ContextTree,
        settings: StartupSettings,
        process_callbacks: ProcessStartupCallbacks,
        repo_callbacks: RepoStartupCallbacks,
    ) -> None:
        self.surface = surface
        self.contexts = contexts
        self.settings = settings
        self._process = process_callbacks
        self._repo = repo_callbacks
        self._state = LifecycleState.UNINITIALIZED
        self._show_recent_repos = settings.show_recent_repos
        self._startup_complete = threading.Event()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def process_ready(self) -> bool:
        return self._state is not LifecycleState.UNINITIALIZED

    @property
    def repo_ready(self) -> bool:
        return self._state is LifecycleState.REPO_READY

    def _transition(self, target: LifecycleState) -> None:
        if (self._state, target) not in _ALLOWED_TRANSITIONS:
            raise LifecycleError(f"illegal lifecycle transition {self._state.value} -> {target.value}")
        logger.debug("lifecycle %s -> %s", self._state.value, target.value)
        self._state = target

    def ensure_ready(self) -> list[str]:
        """Run whichever startup phases are still pending; return their names."""
        ran: list[str] = []
        if self._state is LifecycleState.UNINITIALIZED:
            self._run_process_ready()
            self._transition(LifecycleState.PROCESS_READY)
            ran.append(PROCESS_READY_PHASE)
        if self._state is LifecycleState.PROCESS_READY:
            self._run_repo_ready()
            self._transition(LifecycleState.REPO_READY)
            ran.append(REPO_READY_PHASE)
        return ran

    def reset_for_repo_switch(self) -> None:
        """Re-arm the repo phase; a no-op until it has run once."""
        if self._state is LifecycleState.REPO_READY:
            self._transition(LifecycleState.PROCESS_READY)

    def wait_for_startup(self, timeout: float | None = None) -> bool:
        """Block until the process-ready phase completed.

        Background workers started during that phase call this before they
        hand results back to the UI.
        """
        return self._startup_complete.wait(timeout)

    def _run_process_ready(self) -> None:
        steps = self._process
        steps.print_command_log_header()
        steps.activate_default_context()

        if not self.settings.disable_startup_popups:
            if steps.stored_popup_version() < self.settings.startup_popup_version:
                steps.show_intro_popup()
            else:
                steps.show_breaking_changes_popup()

        try:
            steps.save_last_version(self.settings.app_version)
        except OSError:
            logger.exception("could not save app state")

        if self._show_recent_repos:
            steps.create_recent_repos_menu()
            self._show_recent_repos = False

        steps.check_for_update_in_background()
        self._startup_complete.set()

    def _run_repo_ready(self) -> None:
        # Bottom first, so the last name ends up on top.
        for view_name in self._repo.ordered_view_names():
            try:
                self.surface.set_view_on_top(view_name)
            except UnknownViewError:
                logger.debug("not restacking %s: view not created yet", view_name)

        # Popups left open by the previous repository.
        for view_name in self.contexts.popup_view_names():
            try:
                self.surface.view(view_name).visible = False
            except UnknownViewError:
                continue

        self._repo.activate_current_context()
        self._repo.load_repo()


__all__ = [
    "Lifecycle",
    "LifecycleState",
    "PROCESS_READY_PHASE",
    "ProcessStartupCallbacks",
    "REPO_READY_PHASE",
    "RepoStartupCallbacks",
    "StartupSettings",
]
