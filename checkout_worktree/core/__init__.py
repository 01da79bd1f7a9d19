"""Core workflow for checkout-worktree."""

from .checkout import WorktreeCheckout

__all__ = ["WorktreeCheckout"]
