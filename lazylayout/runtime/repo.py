"""Git-backed panel content for the side windows.

Only reads what the panels list; every git failure degrades to an empty
panel so a non-repository directory still lays out normally.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 2.0
COMMIT_LIMIT = 300


@dataclass(frozen=True)
class RepoSnapshot:
    root: Path
    branch: str = ""
    files: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)
    commits: list[str] = field(default_factory=list)
    stashes: list[str] = field(default_factory=list)
    reflog: list[str] = field(default_factory=list)

    @property
    def is_repo(self) -> bool:
        return bool(self.branch)


def _run_git(repo_root: Path, args: list[str]) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(repo_root), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError):
        logger.debug("git %s failed in %s", " ".join(args), repo_root, exc_info=True)
        return None


def _git_lines(repo_root: Path, args: list[str]) -> list[str]:
    proc = _run_git(repo_root, args)
    if proc is None or proc.returncode != 0:
        return []
    return [line for line in proc.stdout.splitlines() if line.strip()]


def resolve_repo_root(path: Path) -> Path:
    """Return the work-tree root containing ``path``, or ``path`` itself."""
    lines = _git_lines(path, ["rev-parse", "--show-toplevel"])
    if not lines:
        return path.resolve()
    return Path(lines[0]).resolve()


def load_repo_snapshot(repo_root: Path) -> RepoSnapshot:
    branch_lines = _git_lines(repo_root, ["rev-parse", "--abbrev-ref", "HEAD"])
    return RepoSnapshot(
        root=repo_root,
        branch=branch_lines[0] if branch_lines else "",
        files=_git_lines(repo_root, ["status", "--porcelain"]),
        branches=_git_lines(repo_root, ["branch", "--format=%(refname:short)"]),
        commits=_git_lines(repo_root, ["log", "--oneline", f"-n{COMMIT_LIMIT}"]),
        stashes=_git_lines(repo_root, ["stash", "list"]),
        reflog=_git_lines(repo_root, ["reflog", "--oneline", f"-n{COMMIT_LIMIT}"]),
    )


__all__ = ["RepoSnapshot", "load_repo_snapshot", "resolve_repo_root"]
