"""Persistent JSON config and app-state helpers.

``config.json`` holds user preferences (startup popups, panel sizing);
``state.json`` holds what the app remembers between runs (popup version,
last version, recent repositories). Loading is defensive: malformed or
missing files fall back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..layout.geometry import LayoutOptions

APP_NAME = "lazylayout"
CONFIG_FILENAME = "config.json"
STATE_FILENAME = "state.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
STATE_PATH = CONFIG_DIR / STATE_FILENAME

# Bump when the intro popup changes enough that existing users should see it again.
STARTUP_POPUP_VERSION = 1
RECENT_REPOS_MAX = 20


@dataclass(frozen=True)
class UserConfig:
    disable_startup_popups: bool = False
    side_panel_percent: float | None = None
    split_main_panel: bool = False
    show_command_log: bool = True

    def layout_options(self) -> LayoutOptions:
        defaults = LayoutOptions()
        ratio = defaults.side_panel_ratio
        if self.side_panel_percent is not None:
            ratio = self.side_panel_percent / 100.0
        return LayoutOptions(
            side_panel_ratio=ratio,
            split_main=self.split_main_panel,
            show_command_log=self.show_command_log,
        )


@dataclass
class AppState:
    startup_popup_version: int = 0
    last_version: str = ""
    recent_repos: list[str] = field(default_factory=list)


def _load_json(path: Path) -> dict[str, object]:
    """Load a top-level JSON object, returning ``{}`` on any failure."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(path: Path, data: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def load_config() -> dict[str, object]:
    return _load_json(CONFIG_PATH)


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _load_percent(data: dict[str, object], key: str) -> float | None:
    """Read a percentage constrained to the open interval (0, 100)."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0 or value >= 100:
        return None
    return float(value)


def load_user_config() -> UserConfig:
    data = load_config()
    return UserConfig(
        disable_startup_popups=_load_bool(data, "disable_startup_popups", False),
        side_panel_percent=_load_percent(data, "side_panel_percent"),
        split_main_panel=_load_bool(data, "split_main_panel", False),
        show_command_log=_load_bool(data, "show_command_log", True),
    )


def _coerce_nonnegative_int(value: object) -> int:
    """Booleans and non-integers are treated as invalid and coerced to ``0``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def load_app_state() -> AppState:
    data = _load_json(STATE_PATH)
    last_version = data.get("last_version")
    raw_repos = data.get("recent_repos")
    recent_repos: list[str] = []
    if isinstance(raw_repos, list):
        recent_repos = [repo for repo in raw_repos if isinstance(repo, str) and repo]
    return AppState(
        startup_popup_version=_coerce_nonnegative_int(data.get("startup_popup_version", 0)),
        last_version=last_version if isinstance(last_version, str) else "",
        recent_repos=recent_repos[:RECENT_REPOS_MAX],
    )


def save_app_state(state: AppState) -> None:
    """Persist app state; raises ``OSError`` when the file cannot be written."""
    _write_json(
        STATE_PATH,
        {
            "startup_popup_version": max(0, state.startup_popup_version),
            "last_version": state.last_version,
            "recent_repos": list(state.recent_repos[:RECENT_REPOS_MAX]),
        },
    )


def remember_repo(state: AppState, repo_path: Path) -> None:
    """Move ``repo_path`` to the front of the recent-repositories list."""
    key = str(repo_path)
    state.recent_repos = [key, *(repo for repo in state.recent_repos if repo != key)][:RECENT_REPOS_MAX]


__all__ = [
    "AppState",
    "CONFIG_PATH",
    "RECENT_REPOS_MAX",
    "STARTUP_POPUP_VERSION",
    "STATE_PATH",
    "UserConfig",
    "load_app_state",
    "load_config",
    "load_user_config",
    "remember_repo",
    "save_app_state",
]
