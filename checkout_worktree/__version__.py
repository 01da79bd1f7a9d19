"""Version information for checkout-worktree."""

__version__ = "0.4.0"
