"""Data models for checkout-worktree."""

from .pull_request import PullRequestInfo
from .worktree import WorktreeRecord

__all__ = ["PullRequestInfo", "WorktreeRecord"]
