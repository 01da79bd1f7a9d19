"""Worktree data models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class WorktreeRecord:
    """Information about a git worktree, parsed from `git worktree list --porcelain`."""

    path: Path
    branch_name: str  # Empty for a detached HEAD
    commit_sha: str
    is_main: bool  # Is this the main working tree?
    is_dirty: Optional[bool] = None  # None = not checked yet

    @property
    def name(self) -> str:
        """Directory name, used as the key for per-worktree state."""
        return self.path.name

    def __str__(self) -> str:
        """String representation of worktree."""
        if self.is_dirty is None:
            status = "unknown"
        else:
            status = "dirty" if self.is_dirty else "clean"
        branch = self.branch_name or "(detached)"
        main_marker = " (main)" if self.is_main else ""
        return f"{branch} @ {self.path}{main_marker} [{status}]"
