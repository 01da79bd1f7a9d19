"""Utility functions for checkout-worktree.

This package provides utility modules:
- parsing: PR reference parsing and slug generation
- tools: locating and running external command-line tools
"""

from .parsing import extract_pr_number, create_slug
from .tools import which, run_tool

__all__ = [
    # Parsing
    "extract_pr_number",
    "create_slug",
    # Tools
    "which",
    "run_tool",
]
