"""Interactive choice between reusing an existing worktree and creating a new one."""

from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from rich.console import Console

from checkout_worktree.constants import SYMBOL_ASK, SYMBOL_STEP, SYMBOL_WARN
from checkout_worktree.exceptions import CheckoutError
from checkout_worktree.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


class ResolverState(Enum):
    """States of the existing-worktree prompt."""
    MENU = "menu"
    CONFIRM_DISCARD = "confirm_discard"
    USE_EXISTING = "use_existing"
    CREATE_NEW = "create_new"


FINAL_STATES = (ResolverState.USE_EXISTING, ResolverState.CREATE_NEW)

# Fallback entry for answers not listed in a row
_ANY = "*"

# (state, has_changes) -> {answer: next state}
TRANSITIONS: Dict[Tuple[ResolverState, bool], Dict[str, ResolverState]] = {
    (ResolverState.MENU, False): {
        "1": ResolverState.USE_EXISTING,
        "2": ResolverState.CREATE_NEW,
        _ANY: ResolverState.MENU,
    },
    (ResolverState.MENU, True): {
        "1": ResolverState.CONFIRM_DISCARD,
        "2": ResolverState.CREATE_NEW,
        _ANY: ResolverState.MENU,
    },
    (ResolverState.CONFIRM_DISCARD, True): {
        "y": ResolverState.USE_EXISTING,
        "yes": ResolverState.USE_EXISTING,
        _ANY: ResolverState.MENU,
    },
}


def next_state(state: ResolverState, has_changes: bool, answer: str) -> ResolverState:
    """Apply one answer to the transition table."""
    table = TRANSITIONS[(state, has_changes)]
    normalized = answer.strip().lower()
    return table.get(normalized, table[_ANY])


class ConflictResolver:
    """Asks what to do with a worktree that already exists for the target."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None, output: Optional[Console] = None):
        """
        Args:
            input_func: Reads one answer given a prompt (default: the console's input)
            output: Console for menu and messages
        """
        self.output = output or console
        self.input_func = input_func or self.output.input

    def _ask(self, prompt: str) -> str:
        try:
            return self.input_func(prompt)
        except EOFError as e:
            raise CheckoutError("Failed to read input: no answer given") from e

    def _show_menu(self, has_changes: bool) -> None:
        self.output.print()
        if has_changes:
            self.output.print(
                "  [bold cyan]\\[1][/bold cyan] Use existing worktree "
                "[yellow](will discard uncommitted changes!)[/yellow]"
            )
        else:
            self.output.print("  [bold cyan]\\[1][/bold cyan] Use existing worktree")
        self.output.print("  [bold cyan]\\[2][/bold cyan] Create new worktree")
        self.output.print()

    def resolve(self, has_changes: bool) -> ResolverState:
        """Run the prompt until the user picks an action.

        Returns:
            ResolverState.USE_EXISTING or ResolverState.CREATE_NEW
        """
        state = ResolverState.MENU
        self._show_menu(has_changes)

        while state not in FINAL_STATES:
            if state is ResolverState.MENU:
                answer = self._ask(f"[bold magenta]{SYMBOL_ASK}[/bold magenta] Choose an option \\[1/2]: ")
                new_state = next_state(state, has_changes, answer)
                if new_state is ResolverState.MENU:
                    self.output.print(f"[bold red]{SYMBOL_WARN}[/bold red] Invalid option, please enter 1 or 2")
            else:
                answer = self._ask(
                    f"[bold yellow]{SYMBOL_WARN}[/bold yellow] Are you sure you want to discard changes? \\[y/N]: "
                )
                new_state = next_state(state, has_changes, answer)
                if new_state is ResolverState.MENU:
                    self.output.print(f"[bold blue]{SYMBOL_STEP}[/bold blue] Cancelled")
                    self._show_menu(has_changes)

            logger.debug(f"Resolver {state.value} + {answer!r} -> {new_state.value}")
            state = new_state

        return state
