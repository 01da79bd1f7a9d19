"""Display and formatting service for worktree listings"""
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from checkout_worktree.constants import PALETTE
from checkout_worktree.logging_config import get_logger
from checkout_worktree.models.worktree import WorktreeRecord

console = Console()
logger = get_logger(__name__)

COLOR_NAMES = {color.token: color.name for color in PALETTE}


def format_state(record: WorktreeRecord) -> str:
    if record.is_dirty is None:
        return "[dim]missing[/dim]" if not record.path.exists() else "[dim]unknown[/dim]"
    return "[yellow]dirty[/yellow]" if record.is_dirty else "[green]clean[/green]"


def format_color(token: Optional[str]) -> str:
    if not token:
        return ""
    # Swatch in the actual background color, followed by its name
    return f"[on #{token}]    [/on #{token}] {COLOR_NAMES.get(token, token)}"


class DisplayService:
    def __init__(self, output: Optional[Console] = None):
        self.output = output or console

    def display_worktree_table(self, records: List[WorktreeRecord], colors: Dict[str, str]) -> None:
        """Display a table of worktrees with their branch, state and color."""
        if not records:
            self.output.print("No worktrees found")
            return

        table = Table()
        table.add_column("Worktree")
        table.add_column("Branch")
        table.add_column("State")
        table.add_column("Color")
        table.add_column("Path", style="dim")

        for record in records:
            table.add_row(
                record.name,
                record.branch_name or "[dim](detached)[/dim]",
                format_state(record),
                format_color(colors.get(record.name)),
                str(record.path),
            )

        self.output.print(table)

        dirty = sum(1 for r in records if r.is_dirty)
        self.output.print(f"\nTotal worktrees: {len(records)}")
        if dirty:
            self.output.print(f"With uncommitted changes: {dirty}")

    def display_clean_plan(self, removable: List[WorktreeRecord], skipped: List[WorktreeRecord]) -> None:
        """List what `clean` is about to remove and what it leaves alone."""
        if removable:
            self.output.print("\nWorktrees that would be removed:")
            for record in removable:
                self.output.print(f"  {record.name} ({record.branch_name or 'detached'})")
        if skipped:
            self.output.print("\n[yellow]Skipping worktrees with uncommitted changes:[/yellow]")
            for record in skipped:
                self.output.print(f"  [yellow]{record.name}[/yellow] {record.path}")
