"""
checkout-worktree - Check out pull requests and branches into Git worktrees
"""

from .__version__ import __version__
from .core import WorktreeCheckout
from .cli.main import main

__all__ = ["WorktreeCheckout", "main", "__version__"]
