"""Worktree discovery and bookkeeping for checkout-worktree."""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import git

from checkout_worktree.constants import MAX_WORKTREE_SUFFIX
from checkout_worktree.exceptions import (
    ConfigurationError,
    ToolNotFoundError,
    WorktreeLimitError,
    git_operation_error,
)
from checkout_worktree.logging_config import get_logger
from checkout_worktree.models.worktree import WorktreeRecord

logger = get_logger(__name__)


def open_repo(path: Union[str, Path]) -> git.Repo:
    """Open the repository at `path`, mapping GitPython's errors onto ours."""
    try:
        return git.Repo(str(path))
    except (git.exc.NoSuchPathError, git.exc.InvalidGitRepositoryError):
        raise ConfigurationError(f"Repo not found at {path}")
    except git.exc.GitCommandNotFound as e:
        raise ToolNotFoundError("git", str(e)) from e


def find_next_available_path(directory: Path, base_name: str) -> Path:
    """Find a free sibling for `base_name` by appending -2, -3, ...

    Raises:
        WorktreeLimitError: If every suffix up to the limit is taken
    """
    for suffix in range(2, MAX_WORKTREE_SUFFIX + 1):
        candidate = directory / f"{base_name}-{suffix}"
        if not candidate.exists():
            return candidate

    raise WorktreeLimitError(f"Too many worktrees for {base_name}")


class WorktreeService:
    """Service for finding and inspecting git worktrees."""

    def __init__(self, repo_path: Union[str, Path]):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the main git repository
        """
        self.repo_path = Path(repo_path)

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance for the main repository."""
        return open_repo(self.repo_path)

    def _linked_worktrees(self) -> List[WorktreeRecord]:
        """Parse `git worktree list --porcelain`, leaving out the main repository."""
        try:
            output = self._get_repo().git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise git_operation_error("worktree list", e) from e

        root = self.repo_path.resolve()
        return [
            record
            for record in self._parse_porcelain(output)
            if not record.is_main and record.path.resolve() != root
        ]

    def find_existing_worktree(self, pattern: str) -> Optional[Path]:
        """Find the first linked worktree whose path contains `pattern`.

        Args:
            pattern: Substring to look for, e.g. "/pr-123-"

        Returns:
            Path of the first matching worktree in listing order, or None
        """
        for record in self._linked_worktrees():
            if pattern in str(record.path):
                logger.debug(f"Worktree matching '{pattern}': {record.path}")
                return record.path

        logger.debug(f"No worktree matches '{pattern}'")
        return None

    def find_branch_worktree(self, branch: str, base_name: str) -> Optional[Path]:
        """Find a linked worktree for a branch.

        Matches a worktree that has `branch` checked out, or whose directory
        is `base_name` or a numbered copy of it (`<base_name>-2`, ...).
        Worktrees created from the remote ref have a detached HEAD, so only
        the directory name identifies them.
        """
        copy_re = re.compile(rf"{re.escape(base_name)}-\d+")
        for record in self._linked_worktrees():
            name = record.path.name
            if record.branch_name == branch or name == base_name or copy_re.fullmatch(name):
                logger.debug(f"Worktree for branch '{branch}': {record.path}")
                return record.path

        logger.debug(f"No worktree for branch '{branch}'")
        return None

    def list_worktrees(self, check_dirty: bool = True) -> List[WorktreeRecord]:
        """Get every worktree except the main repository.

        Args:
            check_dirty: Query `git status` in each worktree to fill `is_dirty`

        Returns:
            List of WorktreeRecord objects, in listing order
        """
        records = self._linked_worktrees()

        if check_dirty:
            for record in records:
                if record.path.exists():
                    record.is_dirty = self.has_uncommitted_changes(record.path)

        logger.debug(f"Found {len(records)} worktrees")
        for record in records:
            logger.debug(f"  {record}")
        return records

    @staticmethod
    def _parse_porcelain(output: str) -> List[WorktreeRecord]:
        """Parse `git worktree list --porcelain`.

        Format:
            worktree /path/to/worktree
            HEAD commit_sha
            branch refs/heads/branch-name   (or "detached")
            (blank line between worktrees)
        """
        records: List[WorktreeRecord] = []
        current: Dict[str, Any] = {}

        def flush():
            if current.get("path"):
                records.append(
                    WorktreeRecord(
                        path=Path(current["path"]),
                        branch_name=current.get("branch", ""),
                        commit_sha=current.get("HEAD", ""),
                        # First worktree in list is always the main one
                        is_main=not records,
                    )
                )
            current.clear()

        for line in output.split("\n"):
            line = line.rstrip("\r")
            if not line.strip():
                flush()
                continue

            if line.startswith("worktree "):
                current["path"] = line.split(" ", 1)[1]
            elif line.startswith("HEAD "):
                current["HEAD"] = line.split(" ", 1)[1]
            elif line.startswith("branch "):
                branch_ref = line.split(" ", 1)[1]
                if branch_ref.startswith("refs/heads/"):
                    current["branch"] = branch_ref[len("refs/heads/"):]
            elif line == "detached":
                current["branch"] = ""

        # Last entry if no trailing blank line
        flush()
        return records

    def has_uncommitted_changes(self, worktree_path: Union[str, Path]) -> bool:
        """Check whether a worktree has staged, modified or untracked files."""
        try:
            status = git.cmd.Git(str(worktree_path)).status("--porcelain")
        except git.exc.GitCommandError as e:
            raise git_operation_error("status", e) from e
        except git.exc.GitCommandNotFound as e:
            raise ToolNotFoundError("git", str(e)) from e
        return bool(status.strip())

    def remove_worktree(self, worktree_path: Union[str, Path], force: bool = False) -> None:
        """Remove a worktree at the specified path.

        Args:
            worktree_path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked
        """
        args = ["remove", str(worktree_path)]
        if force:
            args.append("--force")

        try:
            self._get_repo().git.worktree(*args)
        except git.exc.GitCommandError as e:
            raise git_operation_error("worktree remove", e) from e
        logger.info(f"Removed worktree at {worktree_path}")

    def prune_worktrees(self) -> None:
        """Prune metadata of worktrees whose directories are gone."""
        try:
            self._get_repo().git.worktree("prune")
        except git.exc.GitCommandError as e:
            raise git_operation_error("worktree prune", e) from e
        logger.info("Pruned orphaned worktree metadata")
