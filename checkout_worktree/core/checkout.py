"""Core functionality for checkout-worktree"""

from pathlib import Path
from typing import Callable, Optional

from rich.console import Console

from checkout_worktree.config import Config
from checkout_worktree.constants import (
    PR_DIR_PREFIX,
    SYMBOL_DIRTY,
    SYMBOL_DONE,
    SYMBOL_STEP,
    SYMBOL_WARN,
)
from checkout_worktree.exceptions import CheckoutError, ConfigurationError
from checkout_worktree.logging_config import get_logger
from checkout_worktree.services.color_service import ColorService
from checkout_worktree.services.conflict_resolver import ConflictResolver, ResolverState
from checkout_worktree.services.display_service import DisplayService
from checkout_worktree.services.git import GitOperations, WorktreeService, find_next_available_path
from checkout_worktree.services.github_service import GitHubService
from checkout_worktree.services.provisioner import WorktreeProvisioner
from checkout_worktree.services.session_launcher import SessionLauncher
from checkout_worktree.services.terminal import TerminalDecorator
from checkout_worktree.services.trust_service import TrustService
from checkout_worktree.utils.parsing import create_slug, extract_pr_number

console = Console()
logger = get_logger(__name__)


class WorktreeCheckout:
    """Checks out pull requests and branches into worktrees of one repository."""

    def __init__(
        self,
        config: Config,
        github_service: Optional[GitHubService] = None,
        input_func: Optional[Callable[[str], str]] = None,
        launcher: Optional[SessionLauncher] = None,
        terminal: Optional[TerminalDecorator] = None,
        output: Optional[Console] = None,
    ):
        """Initialize WorktreeCheckout.

        Args:
            config: Configuration object
            github_service: PR lookup service (default: built from the origin remote)
            input_func: Reads one line of user input given a prompt
            launcher: Assistant session launcher
            terminal: Terminal decorator used around the session
            output: Console for progress output
        """
        self.config = config
        self.output = output or console

        if not config.repo_root.exists():
            raise ConfigurationError(f"Repo not found at {config.repo_root}")

        self.input_func = input_func or self.output.input
        self.worktree_service = WorktreeService(config.repo_root)
        self.git_ops = GitOperations(config.repo_root, config.remote_name, config.default_branch)
        self.trust_service = TrustService(config.claude_config_path)
        self.provisioner = WorktreeProvisioner(config, self.git_ops, self.trust_service, self.output)
        self.color_service = ColorService(config.colors_dir)
        self.resolver = ConflictResolver(self.input_func, self.output)
        self.launcher = launcher or SessionLauncher(prompt_template=config.prompt_template)
        self.terminal = terminal or TerminalDecorator()
        self.display_service = DisplayService(self.output)
        self._github_service = github_service

    @property
    def github_service(self) -> GitHubService:
        """PR lookup service, created on first use from the origin remote."""
        if self._github_service is None:
            self._github_service = GitHubService(self.git_ops.get_remote_url(), self.config.github_token)
        return self._github_service

    def _step(self, message: str, end: str = "\n") -> None:
        self.output.print(f"[bold blue]{SYMBOL_STEP}[/bold blue] {message}", end=end)

    def checkout_pr(self, pr_ref: str) -> Path:
        """Create or reuse a worktree for a pull request, then start a session.

        Args:
            pr_ref: PR number or GitHub PR URL

        Returns:
            Path of the worktree that was used
        """
        pr_number = extract_pr_number(pr_ref)
        self._step(f"PR #[cyan]{pr_number}[/cyan]")

        self._step("Fetching PR details... ", end="")
        pr = self.github_service.get_pull_request(pr_number)
        self.output.print("[green]done[/green]")
        self.output.print(f"  [dim]title:[/dim] [bold]{pr.title}[/bold]")
        self.output.print(f"  [dim]branch:[/dim] [yellow]{pr.head_ref}[/yellow]")

        prefix = PR_DIR_PREFIX.format(pr_number=pr_number)
        base_name = f"{prefix}{create_slug(pr.title)}"
        existing = self.worktree_service.find_existing_worktree(f"/{prefix}")

        final_path = self._resolve_target(
            existing,
            base_name,
            branch=pr.head_ref,
            provision=self.provisioner.provision_from_remote,
            can_reset=True,
        )
        self._finish(final_path, pr_number)
        return final_path

    def checkout_branch(self, branch: str) -> Path:
        """Create or reuse a worktree for a branch, then start a session.

        Branches that exist on the remote are checked out at the remote tip;
        other names become new branches off the default branch.
        """
        base_name = create_slug(branch)
        if not base_name:
            raise CheckoutError(f"Cannot derive a worktree name from branch '{branch}'")

        self._step(f"Branch [yellow]{branch}[/yellow]")
        on_remote = self.git_ops.remote_branch_exists(branch)
        provision = (
            self.provisioner.provision_from_remote if on_remote else self.provisioner.provision_new_branch
        )
        if not on_remote:
            logger.info(f"{branch} not on {self.config.remote_name}, creating a new branch")

        existing = self.worktree_service.find_branch_worktree(branch, base_name)
        final_path = self._resolve_target(
            existing, base_name, branch=branch, provision=provision, can_reset=on_remote
        )
        self._finish(final_path, None)
        return final_path

    def _resolve_target(
        self,
        existing: Optional[Path],
        base_name: str,
        branch: str,
        provision: Callable[[Path, str], Path],
        can_reset: bool,
    ) -> Path:
        """Pick the worktree to use: a fresh one, or ask about the existing one."""
        worktrees_dir = self.config.worktrees_dir

        if existing is None:
            return provision(worktrees_dir / base_name, branch)

        self.output.print(
            f"\n[bold yellow]{SYMBOL_WARN}[/bold yellow] Worktree already exists at [cyan]{existing}[/cyan]"
        )
        has_changes = self.worktree_service.has_uncommitted_changes(existing)
        if has_changes:
            self.output.print(
                f"  [bold yellow]{SYMBOL_DIRTY}[/bold yellow] [yellow]Worktree has uncommitted changes![/yellow]"
            )

        action = self.resolver.resolve(has_changes)
        if action is ResolverState.CREATE_NEW:
            new_path = find_next_available_path(worktrees_dir, base_name)
            return provision(new_path, branch)

        if can_reset:
            self._step("Updating to latest... ", end="")
            self.git_ops.reset_to_remote(existing, branch)
            self.output.print("[green]done[/green]")
        else:
            logger.info(f"{branch} has no remote counterpart, reusing {existing} as is")
        return existing

    def _finish(self, worktree_path: Path, pr_number: Optional[int]) -> None:
        """Report the worktree and hand over to the assistant (unless disabled)."""
        self.output.print()
        self.output.print(
            f"[bold green]{SYMBOL_DONE}[/bold green] Worktree ready at [bold cyan]{worktree_path}[/bold cyan]"
        )

        if not self.config.launch_claude:
            self.output.print(
                f"\n[bold yellow]tip:[/bold yellow] Run: [dim]cd[/dim] {worktree_path} [dim]&& claude[/dim]"
            )
            return

        command = " ".join(self.launcher.build_command(pr_number))
        self.output.print()
        self._step(f"Spawning [cyan]{command}[/cyan]...")
        self.output.print()

        color = self.color_service.pick_color(worktree_path)
        with self.terminal.decorate(worktree_path, color):
            self.launcher.launch(worktree_path, pr_number)

    def status(self) -> None:
        """Show every worktree of the repository with its state and color."""
        records = self.worktree_service.list_worktrees()
        colors = {}
        for record in records:
            color = self.color_service.get_color(record.name)
            if color:
                colors[record.name] = color
        self.display_service.display_worktree_table(records, colors)

    def clean(self, assume_yes: bool = False) -> int:
        """Remove worktrees without uncommitted changes.

        Args:
            assume_yes: Skip the confirmation prompt

        Returns:
            Number of worktrees removed
        """
        records = self.worktree_service.list_worktrees()
        removable = [r for r in records if r.is_dirty is False]
        skipped = [r for r in records if r.is_dirty]
        orphaned = [r for r in records if not r.path.exists()]

        self.display_service.display_clean_plan(removable, skipped)

        if not removable:
            self.output.print("Nothing to clean")
        elif not assume_yes:
            try:
                response = self.input_func("\nProceed with cleanup? \\[y/N] ")
            except EOFError:
                response = ""
            if response.strip().lower() not in ("y", "yes"):
                self.output.print("Cancelled")
                return 0

        for record in removable:
            self._step(f"Removing [cyan]{record.name}[/cyan]... ", end="")
            self.worktree_service.remove_worktree(record.path)
            self.color_service.release(record.name)
            self.output.print("[green]done[/green]")

        for record in orphaned:
            self.color_service.release(record.name)
        self.worktree_service.prune_worktrees()

        if removable:
            self.output.print(
                f"\n[bold green]{SYMBOL_DONE}[/bold green] Removed {len(removable)} worktree(s)"
            )
        return len(removable)
