"""Git operations service"""

from pathlib import Path
from typing import Optional, Union

import git

from checkout_worktree.constants import DEFAULT_BRANCH, REMOTE_NAME
from checkout_worktree.exceptions import CheckoutError, git_operation_error
from checkout_worktree.logging_config import get_logger
from checkout_worktree.services.git.worktrees import open_repo

logger = get_logger(__name__)


class GitOperations:
    """Service for the fetch/add/reset steps of provisioning a worktree."""

    def __init__(
        self,
        repo_path: Union[str, Path],
        remote_name: str = REMOTE_NAME,
        default_branch: str = DEFAULT_BRANCH,
    ):
        """Initialize the service.

        Args:
            repo_path: Path to the main git repository
            remote_name: Remote to fetch from
            default_branch: Fallback when the remote's HEAD is unknown
        """
        self.repo_path = Path(repo_path)
        self.remote_name = remote_name
        self.default_branch = default_branch

    def _get_repo(self, path: Optional[Union[str, Path]] = None) -> git.Repo:
        """Get a fresh git.Repo instance (main repository unless `path` is given)."""
        return open_repo(path if path is not None else self.repo_path)

    def get_remote_url(self) -> str:
        """URL of the configured remote."""
        repo = self._get_repo()
        try:
            return repo.remote(self.remote_name).url
        except ValueError:
            raise CheckoutError(f"Remote '{self.remote_name}' not found in {self.repo_path}")

    def fetch_branch(self, branch: str, path: Optional[Union[str, Path]] = None) -> None:
        """Fetch a single branch from the remote (updates FETCH_HEAD and origin/<branch>)."""
        logger.debug(f"Fetching {self.remote_name}/{branch}")
        try:
            self._get_repo(path).git.fetch(self.remote_name, branch)
        except git.exc.GitCommandError as e:
            raise git_operation_error("fetch", e, branch) from e

    def remote_branch_exists(self, branch: str) -> bool:
        """Check whether the remote has a branch with this name."""
        try:
            output = self._get_repo().git.ls_remote("--heads", self.remote_name, branch)
        except git.exc.GitCommandError as e:
            raise git_operation_error("ls-remote", e, branch) from e
        return any(line.endswith(f"refs/heads/{branch}") for line in output.splitlines())

    def get_default_branch(self) -> str:
        """Name of the remote's default branch, from refs/remotes/<remote>/HEAD."""
        try:
            ref = self._get_repo().git.symbolic_ref("--short", f"refs/remotes/{self.remote_name}/HEAD")
        except git.exc.GitCommandError as e:
            logger.debug(f"{self.remote_name}/HEAD not set, using {self.default_branch}: {e}")
            return self.default_branch

        prefix = f"{self.remote_name}/"
        return ref[len(prefix):] if ref.startswith(prefix) else ref

    def add_worktree_from_remote(self, worktree_path: Path, branch: str) -> str:
        """Create a worktree at <remote>/<branch>, falling back to FETCH_HEAD.

        The remote-tracking ref can be unusable right after a fetch (e.g. the
        branch is checked out in another worktree); FETCH_HEAD still points at
        the commit we just fetched.

        Returns:
            The ref the worktree was created from
        """
        repo = self._get_repo()
        ref_name = f"{self.remote_name}/{branch}"
        try:
            repo.git.worktree("add", str(worktree_path), ref_name)
            return ref_name
        except git.exc.GitCommandError as e:
            logger.info(f"git worktree add {ref_name} failed, retrying with FETCH_HEAD: {e}")

        try:
            repo.git.worktree("add", str(worktree_path), "FETCH_HEAD")
        except git.exc.GitCommandError as e:
            raise git_operation_error("worktree add", e, branch) from e
        return "FETCH_HEAD"

    def add_worktree_new_branch(self, worktree_path: Path, branch: str, base_branch: str) -> None:
        """Create a worktree on a new local branch starting at <remote>/<base_branch>."""
        try:
            self._get_repo().git.worktree(
                "add",
                "--no-track",
                "-b",
                branch,
                str(worktree_path),
                f"{self.remote_name}/{base_branch}",
            )
        except git.exc.GitCommandError as e:
            raise git_operation_error("worktree add", e, branch) from e

    def reset_to_remote(self, worktree_path: Path, branch: str) -> None:
        """Fetch `branch` inside a worktree and hard-reset it to the remote tip.

        Discards any uncommitted changes in the worktree.
        """
        self.fetch_branch(branch, path=worktree_path)
        try:
            self._get_repo(worktree_path).git.reset("--hard", f"{self.remote_name}/{branch}")
        except git.exc.GitCommandError as e:
            raise git_operation_error("reset", e, branch) from e
        logger.info(f"Reset {worktree_path} to {self.remote_name}/{branch}")
