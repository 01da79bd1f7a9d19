"""Git-related services for checkout-worktree."""

from .operations import GitOperations
from .worktrees import WorktreeService, find_next_available_path, open_repo

__all__ = [
    "GitOperations",
    "WorktreeService",
    "find_next_available_path",
    "open_repo",
]
