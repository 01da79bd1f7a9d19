"""Command-line argument parsing for checkout-worktree."""

import argparse
from pathlib import Path

from checkout_worktree.__version__ import __version__


def _add_repo_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        type=Path,
        metavar="PATH",
        help="Path to the main repository (default: ~/figma/figma)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its subcommands."""
    # Options shared by every subcommand, so they work after the subcommand name too
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Show verbose output"
    )
    common.add_argument(
        "--debug", action="store_true", default=argparse.SUPPRESS, help="Show debug information for troubleshooting"
    )

    parser = argparse.ArgumentParser(
        prog="checkout",
        description="Check out a GitHub PR or a branch into a worktree and start claude in it",
        epilog="PR lookups use GITHUB_TOKEN when set, otherwise the token of the logged-in gh CLI.",
        parents=[common],
    )
    parser.add_argument("--version", action="version", version=f"checkout {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    pr_parser = subparsers.add_parser(
        "pr", parents=[common], help="Create a worktree for a pull request and spawn claude to review it"
    )
    pr_parser.add_argument(
        "pr", metavar="PR", help="PR number or GitHub PR URL (e.g. 123 or https://github.com/org/repo/pull/123)"
    )
    pr_parser.add_argument(
        "--no-claude", action="store_true", help="Skip spawning claude after creating the worktree"
    )
    _add_repo_option(pr_parser)

    branch_parser = subparsers.add_parser(
        "branch", parents=[common], help="Create a worktree for a branch (new or from origin) and spawn claude"
    )
    branch_parser.add_argument("name", help="Branch name")
    branch_parser.add_argument(
        "--no-claude", action="store_true", help="Skip spawning claude after creating the worktree"
    )
    _add_repo_option(branch_parser)

    status_parser = subparsers.add_parser("status", parents=[common], help="List worktrees and their state")
    _add_repo_option(status_parser)

    clean_parser = subparsers.add_parser(
        "clean", parents=[common], help="Remove worktrees that have no uncommitted changes"
    )
    _add_repo_option(clean_parser)
    clean_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    return parser


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
