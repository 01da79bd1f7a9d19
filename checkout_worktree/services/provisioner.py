"""Creation of new worktrees and their post-create hooks."""

import shutil
from pathlib import Path
from typing import Optional

from rich.console import Console

from checkout_worktree.config import Config
from checkout_worktree.constants import SYMBOL_STEP
from checkout_worktree.exceptions import CheckoutError
from checkout_worktree.logging_config import get_logger
from checkout_worktree.services.git import GitOperations
from checkout_worktree.services.trust_service import TrustService
from checkout_worktree.utils.tools import run_tool, which

console = Console()
logger = get_logger(__name__)


class WorktreeProvisioner:
    """Creates worktrees and prepares them for a session.

    Hooks whose tool or source file is missing are skipped; a hook that
    fails after starting aborts provisioning.
    """

    def __init__(
        self,
        config: Config,
        git_ops: GitOperations,
        trust_service: Optional[TrustService] = None,
        output: Optional[Console] = None,
    ):
        self.config = config
        self.git_ops = git_ops
        self.trust_service = trust_service or TrustService(config.claude_config_path)
        self.output = output or console

    def _step(self, message: str) -> None:
        self.output.print(f"[bold blue]{SYMBOL_STEP}[/bold blue] {message}... ", end="")

    def _done(self) -> None:
        self.output.print("[green]done[/green]")

    def _prepare_directory(self) -> None:
        try:
            self.config.worktrees_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CheckoutError(f"Failed to create worktrees dir: {e}") from e

    def provision_from_remote(self, worktree_path: Path, branch: str) -> Path:
        """Fetch `branch` and create a worktree at the remote tip."""
        self._prepare_directory()

        self._step(f"Fetching branch [yellow]{branch}[/yellow]")
        self.git_ops.fetch_branch(branch)
        self._done()

        self._step(f"Creating worktree at [cyan]{worktree_path}[/cyan]")
        ref = self.git_ops.add_worktree_from_remote(worktree_path, branch)
        self._done()
        logger.info(f"Created {worktree_path} from {ref}")

        self.run_hooks(worktree_path)
        return worktree_path

    def provision_new_branch(self, worktree_path: Path, branch: str) -> Path:
        """Create a worktree on a new branch started from the freshly fetched default branch."""
        self._prepare_directory()
        base_branch = self.git_ops.get_default_branch()

        self._step(f"Fetching [yellow]{base_branch}[/yellow]")
        self.git_ops.fetch_branch(base_branch)
        self._done()

        self._step(f"Creating branch [yellow]{branch}[/yellow] at [cyan]{worktree_path}[/cyan]")
        self.git_ops.add_worktree_new_branch(worktree_path, branch, base_branch)
        self._done()

        self.run_hooks(worktree_path)
        self.track_branch(worktree_path, base_branch)
        return worktree_path

    def run_hooks(self, worktree_path: Path) -> None:
        """Run the post-create hooks shared by both kinds of worktree."""
        self.trust_tools(worktree_path)
        self.copy_settings(worktree_path)
        self.register_trust(worktree_path)

    def trust_tools(self, worktree_path: Path) -> bool:
        """Run `mise trust` so the worktree's tool config is loaded."""
        if which("mise") is None:
            logger.debug("mise not installed, skipping mise trust")
            return False

        self._step("Running mise trust")
        run_tool(["mise", "trust"], cwd=worktree_path)
        self._done()
        return True

    def copy_settings(self, worktree_path: Path) -> int:
        """Copy untracked local settings files from the main checkout.

        Returns:
            Number of files copied
        """
        copied = 0
        for relative in self.config.settings_files:
            source = self.config.repo_root / relative
            if not source.is_file():
                logger.debug(f"No {relative} in {self.config.repo_root}, skipping")
                continue

            target = worktree_path / relative
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            except OSError as e:
                raise CheckoutError(f"Failed to copy {relative}: {e}") from e
            logger.info(f"Copied {relative} into {worktree_path}")
            copied += 1

        if copied:
            self.output.print(f"[bold blue]{SYMBOL_STEP}[/bold blue] Copied {copied} settings file(s)")
        return copied

    def register_trust(self, worktree_path: Path) -> bool:
        """Add the worktree to the assistant's trusted projects."""
        registered = self.trust_service.trust_worktree(
            self.config.repo_root.absolute(), worktree_path.absolute()
        )
        if registered:
            self.output.print(f"[bold blue]{SYMBOL_STEP}[/bold blue] Trusted worktree for claude")
        return registered

    def track_branch(self, worktree_path: Path, parent_branch: str) -> bool:
        """Register the new branch with Graphite (`gt track`)."""
        if which("gt") is None:
            logger.debug("gt not installed, skipping gt track")
            return False

        self._step("Running gt track")
        run_tool(["gt", "track", "--parent", parent_branch], cwd=worktree_path)
        self._done()
        return True
