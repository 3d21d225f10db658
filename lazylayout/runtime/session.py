"""Application session: the panels, their views and the layout engine.

``Session`` owns everything one running app needs: the view registry, the
context tree, window ownership, the startup lifecycle and the layout engine.
It implements the lifecycle steps (command-log header, default focus,
startup popups, recent-repositories menu, repository load) and the key
handling of the demo application.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from .. import __version__
from ..ansi import display_width
from ..highlight import DEFAULT_STYLE, colorize_source, read_text
from ..layout.buffers import ViewBufferManager
from ..layout.contexts import Context, ContextKind, ContextTree, WidthRerenderPolicy
from ..layout.deferred import DeferredActionQueue
from ..layout.engine import LayoutEngine, LayoutEvent, LayoutHooks, PassResult
from ..layout.geometry import SIDE_WINDOWS
from ..layout.lifecycle import Lifecycle, ProcessStartupCallbacks, RepoStartupCallbacks, StartupSettings
from ..layout.popups import resize_popup_panels
from ..layout.views import UnknownViewError, ViewRegistry
from ..layout.windows import WindowOwnership
from .config import STARTUP_POPUP_VERSION, AppState, UserConfig, remember_repo, save_app_state
from .repo import RepoSnapshot, load_repo_snapshot, resolve_repo_root
from .update_check import UpdateChecker, installed_version

logger = logging.getLogger(__name__)

INTRO_MESSAGE = (
    "Welcome to lazylayout!",
    "",
    "tab / shift-tab  move between panels",
    "j / k            scroll the focused panel",
    "J / K            scroll the main panel",
    "r                toggle commits / reflog",
    "R                recent repositories",
    "q                quit",
    "",
    "Press enter to continue.",
)

# version -> message shown once to users upgrading past it
BREAKING_CHANGES: dict[str, str] = {
    "0.1.0": "The side panel width is now configured with 'side_panel_percent' in config.json.",
}

COMMAND_LOG_HEADER = "Command log: git commands run for the panels are listed here."
LIMIT_MESSAGE = "Not enough space to render panels"
STATUS_MESSAGE_SECONDS = 3.0

SIDE_TITLES = {
    "status": "Status",
    "files": "Files",
    "branches": "Local branches",
    "commits": "Commits",
    "reflog": "Reflog",
    "stash": "Stash",
}

# Bottom first; later names end up on top.
ORDERED_VIEW_NAMES = (
    "status",
    "files",
    "branches",
    "commits",
    "reflog",
    "stash",
    "main",
    "secondary",
    "extras",
    "options",
    "appStatus",
    "information",
    "limit",
    "menu",
    "tooltip",
    "confirmation",
)


def parse_version(version: str) -> tuple[int, ...]:
    """Parse ``"1.2.3"`` into ``(1, 2, 3)``; non-numeric parts count as 0."""
    parts: list[int] = []
    for part in version.strip().split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def breaking_changes_since(last_version: str, current_version: str) -> list[str]:
    """Return messages for versions in ``(last_version, current_version]``."""
    if not last_version:
        return []
    last = parse_version(last_version)
    current = parse_version(current_version)
    return [
        message
        for version, message in sorted(BREAKING_CHANGES.items(), key=lambda item: parse_version(item[0]))
        if last < parse_version(version) <= current
    ]


def truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if display_width(text) <= width:
        return text
    out: list[str] = []
    used = 0
    for ch in text:
        ch_width = display_width(ch)
        if used + ch_width > width - 1:
            break
        out.append(ch)
        used += ch_width
    return "".join(out) + "…"


class Session:
    """One running application instance."""

    def __init__(
        self,
        repo_path: Path,
        *,
        user_config: UserConfig | None = None,
        app_state: AppState | None = None,
        surface: ViewRegistry | None = None,
        preview_path: Path | None = None,
        style: str = DEFAULT_STYLE,
        show_recent_repos: bool = False,
        save_state: Callable[[AppState], None] = save_app_state,
        load_repo: Callable[[Path], RepoSnapshot] = load_repo_snapshot,
        get_installed_version: Callable[[], str | None] = installed_version,
        version: str = __version__,
    ) -> None:
        self.user_config = user_config if user_config is not None else UserConfig()
        self.app_state = app_state if app_state is not None else AppState()
        self.surface = surface if surface is not None else ViewRegistry()
        self.preview_path = preview_path
        self.style = style
        self.version = version
        self._save_state = save_state
        self._load_repo = load_repo
        self.repo_root = repo_path.resolve()
        self.repo: RepoSnapshot | None = None
        self.ownership = WindowOwnership()
        self.buffer_managers: dict[str, ViewBufferManager] = {}
        self.status_message = ""
        self.status_message_until = 0.0
        self.information_text = f"lazylayout {version}"
        self.current_view_name = "files"
        self.menu_items: list[str] = []
        self.menu_selected = 0
        self._popup_stack: list[tuple[str, Callable[[], None] | None]] = []
        self._pending_repo_switch = False

        self.contexts = self._build_contexts()
        self._create_views()
        self.deferred = DeferredActionQueue()
        self.update_checker = UpdateChecker(
            version,
            self._report_update,
            get_installed_version=get_installed_version,
            wait_for_startup=lambda: self.lifecycle.wait_for_startup(),
        )
        self.lifecycle = Lifecycle(
            self.surface,
            self.contexts,
            StartupSettings(
                disable_startup_popups=self.user_config.disable_startup_popups,
                startup_popup_version=STARTUP_POPUP_VERSION,
                app_version=version,
                show_recent_repos=show_recent_repos,
            ),
            ProcessStartupCallbacks(
                print_command_log_header=self._print_command_log_header,
                activate_default_context=self._activate_default_context,
                stored_popup_version=lambda: self.app_state.startup_popup_version,
                show_intro_popup=self._after_pass(self._show_intro_popup),
                show_breaking_changes_popup=self._queue_breaking_changes_popup,
                save_last_version=self._save_last_version,
                create_recent_repos_menu=self._after_pass(self.open_recent_repos_menu),
                check_for_update_in_background=self.update_checker.check_in_background,
            ),
            RepoStartupCallbacks(
                ordered_view_names=lambda: list(ORDERED_VIEW_NAMES),
                activate_current_context=self._activate_current_context,
                load_repo=self._load_current_repo,
            ),
        )
        self.engine = LayoutEngine(
            self.surface,
            self.contexts,
            self.ownership,
            self.lifecycle,
            LayoutHooks(
                information=lambda: self.information_text,
                app_status=lambda: self.status_message,
                on_resize=self._on_resize,
                buffer_manager_for_view=self.buffer_managers.get,
                render_options=self._render_options,
            ),
            options=self.user_config.layout_options(),
            deferred=self.deferred,
        )

    def _build_contexts(self) -> ContextTree:
        def side(name: str, **kwargs) -> Context:
            return Context(view_name=name, on_render=lambda: self._render_side_view(name), **kwargs)

        side_panels = ContextTree(
            side("status", rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES),
            side("files"),
            side("branches"),
            ContextTree(
                side("commits", transient=True, rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES),
                side(
                    "reflog",
                    window_name="commits",
                    transient=True,
                    rerender_on_width=WidthRerenderPolicy.WHEN_WIDTH_CHANGES,
                ),
            ),
            side("stash"),
        )
        main_panels = ContextTree(
            Context(view_name="main", rerender_on_height=True, on_render=self._refill_main),
            Context(view_name="secondary"),
            Context(view_name="extras"),
        )
        bottom_line = ContextTree(
            Context(view_name="options"),
            Context(view_name="appStatus"),
            Context(view_name="information"),
            Context(view_name="limit"),
        )
        popups = ContextTree(
            Context(view_name="menu", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False),
            Context(view_name="confirmation", kind=ContextKind.TEMPORARY_POPUP, controlled_bounds=False),
        )
        return ContextTree(side_panels, main_panels, bottom_line, popups)

    def _create_views(self) -> None:
        for name, title in SIDE_TITLES.items():
            self.surface.create_view(name, title=title)
        self.surface.create_view("main", title="Main")
        self.surface.create_view("secondary", title="Secondary")
        self.surface.create_view("extras", title="Command log")
        for name in ("options", "appStatus", "information"):
            self.surface.create_view(name, frame=False)
        self.surface.create_view("limit", title="Error").set_content(LIMIT_MESSAGE)
        # Popup views are created the first time a popup opens.

    # -- passes -----------------------------------------------------------

    def run_pass(self, event: LayoutEvent = LayoutEvent.RENDER) -> PassResult:
        if self._pending_repo_switch:
            self._pending_repo_switch = False
            event = LayoutEvent.REPO_SWITCH
        return self.engine.run_pass(event)

    def tick(self, now: float | None = None) -> bool:
        """Expire the status message; return whether a new pass is needed."""
        now = time.monotonic() if now is None else now
        dirty = self.deferred.pending() > 0 or self.information_text != self.engine.snapshot.information
        if self.status_message and now >= self.status_message_until:
            self.status_message = ""
            dirty = True
        return dirty

    def set_status(self, message: str, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.status_message = message
        self.status_message_until = time.monotonic() + seconds

    # -- lifecycle steps --------------------------------------------------

    def _after_pass(self, action: Callable[[], None]) -> Callable[[], None]:
        # Popups opened during startup must survive the repo phase hiding them.
        return lambda: self.deferred.enqueue(action)

    def _print_command_log_header(self) -> None:
        extras = self.surface.view("extras")
        extras.append_lines([f"lazylayout {self.version}", COMMAND_LOG_HEADER, ""])

    def _activate_default_context(self) -> None:
        self.current_view_name = "files"
        self.surface.set_current_view("files")

    def _activate_current_context(self) -> None:
        # The repo phase has just hidden every popup view.
        self._popup_stack.clear()
        self.surface.set_current_view(self.current_view_name)

    def _show_intro_popup(self) -> None:
        def acknowledge() -> None:
            self.app_state.startup_popup_version = STARTUP_POPUP_VERSION
            self._save_state_logging_errors()

        self.show_popup("confirmation", "Welcome", list(INTRO_MESSAGE), on_close=acknowledge)

    def _queue_breaking_changes_popup(self) -> None:
        # Read before the same phase overwrites last_version.
        messages = breaking_changes_since(self.app_state.last_version, self.version)
        if messages:
            self.deferred.enqueue(lambda: self._show_breaking_changes_popup(messages))

    def _show_breaking_changes_popup(self, messages: list[str]) -> None:
        lines = ["Breaking changes since you last ran lazylayout:", ""]
        lines.extend(f"- {message}" for message in messages)
        self.show_popup("confirmation", "Breaking changes", lines)

    def _save_last_version(self, version: str) -> None:
        self.app_state.last_version = version
        self._save_state(self.app_state)

    def _save_state_logging_errors(self) -> None:
        try:
            self._save_state(self.app_state)
        except OSError:
            logger.exception("could not save app state")

    def _report_update(self, installed: str) -> None:
        # Runs on the checker thread; apply inside the next pass.
        def apply() -> None:
            self.information_text = f"lazylayout {installed} installed, restart to update"

        self.deferred.enqueue(apply)

    def _load_current_repo(self) -> None:
        self.repo = self._load_repo(self.repo_root)
        self.log_command(f"git status ({self.repo_root})")
        for name in ("status", "files", "branches", "commits", "reflog", "stash"):
            self._render_side_view(name)
        self._start_main_view()

    # -- content ------------------------------------------------------------

    def log_command(self, command: str) -> None:
        self.surface.view("extras").append_lines([command])

    def _side_lines(self, name: str, width: int) -> list[str]:
        repo = self.repo
        if repo is None:
            return []
        if name == "status":
            label = f"{repo.root.name} → {repo.branch}" if repo.is_repo else f"{repo.root.name} (not a git repository)"
            return [truncate(label, width)]
        if name == "commits":
            return [truncate(line, width) for line in repo.commits]
        if name == "reflog":
            return [truncate(line, width) for line in repo.reflog]
        return list({"files": repo.files, "branches": repo.branches, "stash": repo.stashes}.get(name, []))

    def _render_side_view(self, name: str) -> None:
        view = self.surface.view(name)
        view.lines = self._side_lines(name, view.inner_width)

    def _main_source(self) -> Iterator[str]:
        if self.preview_path is not None:
            source = read_text(self.preview_path)
            yield from colorize_source(source, self.preview_path, self.style).splitlines()
            return
        repo = self.repo
        if repo is None:
            return
        yield f"Repository: {repo.root}"
        yield f"Branch:     {repo.branch or '-'}"
        yield ""
        yield f"{len(repo.files)} changed files, {len(repo.branches)} branches, {len(repo.stashes)} stashes"
        yield ""
        yield from repo.commits

    def _start_main_view(self) -> None:
        manager = ViewBufferManager(self.surface.view("main"), self._main_source())
        self.buffer_managers["main"] = manager
        manager.start()

    def _refill_main(self) -> None:
        manager = self.buffer_managers.get("main")
        if manager is not None:
            manager.read_to_origin()

    def _on_resize(self) -> None:
        main = self.surface.view("main")
        logger.debug("main panel resized to %dx%d", main.inner_width, main.inner_height)
        self._refill_main()

    def _render_options(self) -> None:
        try:
            options = self.surface.view("options")
        except UnknownViewError:
            return
        if self.popup_active:
            options.set_content("enter: confirm | esc: close | j/k: select")
        else:
            options.set_content("tab: next panel | j/k: scroll | r: reflog | R: recent repos | q: quit")

    # -- focus and popups -----------------------------------------------

    @property
    def popup_active(self) -> bool:
        return bool(self._popup_stack)

    def focus_side_window(self, step: int) -> None:
        windows = list(SIDE_WINDOWS)
        current_window = self.contexts.by_view_name(self.current_view_name)
        window = current_window.window_name if current_window is not None else windows[0]
        idx = windows.index(window) if window in windows else 0
        target_window = windows[(idx + step) % len(windows)]
        self.current_view_name = self.ownership.view_name_for_window(target_window)
        self.surface.set_current_view(self.current_view_name)

    def toggle_reflog(self) -> None:
        occupant = self.ownership.view_name_for_window("commits")
        target = "reflog" if occupant == "commits" else "commits"
        self.ownership.set_occupant("commits", target)
        if self.current_view_name in {"commits", "reflog"}:
            self.current_view_name = target
            self.surface.set_current_view(target)

    def show_popup(
        self,
        view_name: str,
        title: str,
        lines: list[str],
        *,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        view = self.surface.create_view(view_name, title=title)
        view.title = title
        view.lines = list(lines)
        view.origin_y = 0
        view.visible = True
        self.surface.set_view_on_top(view_name)
        self._popup_stack = [entry for entry in self._popup_stack if entry[0] != view_name]
        self._popup_stack.append((view_name, on_close))
        self.surface.set_current_view(view_name)
        resize_popup_panels(self.surface, self.contexts)

    def close_popup(self) -> None:
        """Hide the topmost popup and focus whatever is below it."""
        if not self._popup_stack:
            return
        name, on_close = self._popup_stack.pop()
        self.surface.view(name).visible = False
        if name == "menu":
            self.surface.create_view("tooltip").clear()
        below = self._popup_stack[-1][0] if self._popup_stack else self.current_view_name
        self.surface.set_current_view(below)
        if on_close is not None:
            on_close()

    def open_recent_repos_menu(self) -> None:
        current = str(self.repo_root)
        self.menu_items = [repo for repo in self.app_state.recent_repos if repo != current]
        self.menu_selected = 0
        if not self.menu_items:
            self.set_status("No recent repositories")
            return
        labels = [Path(repo).name or repo for repo in self.menu_items]
        self.show_popup("menu", "Recent repositories", labels)
        self._update_menu_tooltip()

    def _update_menu_tooltip(self) -> None:
        tooltip = self.surface.create_view("tooltip", title="Path")
        self.surface.set_view_on_top("tooltip")
        if 0 <= self.menu_selected < len(self.menu_items):
            tooltip.lines = [self.menu_items[self.menu_selected]]
            tooltip.visible = True
        else:
            tooltip.clear()
        resize_popup_panels(self.surface, self.contexts)

    def move_menu_selection(self, step: int) -> None:
        if not self.menu_items:
            return
        self.menu_selected = max(0, min(len(self.menu_items) - 1, self.menu_selected + step))
        menu = self.surface.view("menu")
        if self.menu_selected < menu.origin_y:
            menu.origin_y = self.menu_selected
        elif self.menu_selected >= menu.origin_y + menu.inner_height:
            menu.origin_y = self.menu_selected - menu.inner_height + 1
        self._update_menu_tooltip()

    def switch_repo(self, path: Path) -> None:
        """Switch to another repository; the next pass re-runs the repo phase."""
        self.repo_root = resolve_repo_root(path)
        remember_repo(self.app_state, self.repo_root)
        self._save_state_logging_errors()
        self.current_view_name = "files"
        self._pending_repo_switch = True
        self.set_status(f"Switched to {self.repo_root.name}")

    # -- keys ---------------------------------------------------------------

    def scroll_view(self, view_name: str, amount: int) -> None:
        view = self.surface.view(view_name)
        if amount < 0:
            view.scroll_up(-amount)
            return
        manager = self.buffer_managers.get(view_name)
        if manager is not None:
            manager.read_lines(amount)
        view.scroll_down(amount)

    def handle_key(self, key: str) -> bool:
        """Dispatch one key; return ``True`` when the app should quit."""
        if self.popup_active:
            return self._handle_popup_key(key)
        if key in {"q", "CTRL_C"}:
            return True
        if key in {"TAB", "RIGHT", "l"}:
            self.focus_side_window(1)
        elif key in {"SHIFT_TAB", "LEFT", "h"}:
            self.focus_side_window(-1)
        elif key in {"j", "DOWN"}:
            self.scroll_view(self.current_view_name, 1)
        elif key in {"k", "UP"}:
            self.scroll_view(self.current_view_name, -1)
        elif key == "J":
            self.scroll_view("main", 1)
        elif key == "K":
            self.scroll_view("main", -1)
        elif key == "r":
            self.toggle_reflog()
        elif key == "R":
            self.open_recent_repos_menu()
        return False

    def _handle_popup_key(self, key: str) -> bool:
        if key == "CTRL_C":
            return True
        if self.surface.current_view_name == "menu":
            if key in {"j", "DOWN"}:
                self.move_menu_selection(1)
                return False
            if key in {"k", "UP"}:
                self.move_menu_selection(-1)
                return False
            if key == "ENTER" and self.menu_items:
                selected = Path(self.menu_items[self.menu_selected])
                self.close_popup()
                self.switch_repo(selected)
                return False
        if key in {"ENTER", "ESC", "q"}:
            self.close_popup()
        return False


__all__ = ["Session", "breaking_changes_since", "parse_version", "truncate"]
