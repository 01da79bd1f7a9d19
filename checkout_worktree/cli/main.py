"""Command-line entry point for checkout-worktree"""

import sys

from rich.console import Console

from checkout_worktree.config import Config
from checkout_worktree.constants import EXIT_ERROR, EXIT_INTERRUPTED, EXIT_OK
from checkout_worktree.core import WorktreeCheckout
from checkout_worktree.exceptions import CheckoutError
from checkout_worktree.logging_config import get_logger, setup_logging
from checkout_worktree.services.terminal import install_interrupt_handler, reset_terminal
from .args import parse_args

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    debug = getattr(parsed_args, "debug", False)

    try:
        config = Config.from_environment(
            repo_root=getattr(parsed_args, "repo", None),
            launch_claude=not getattr(parsed_args, "no_claude", False),
            assume_yes=getattr(parsed_args, "yes", False),
            verbose=getattr(parsed_args, "verbose", False),
            debug=debug,
        )

        setup_logging(verbose=config.verbose, debug=config.debug, log_dir=config.state_dir)
        install_interrupt_handler()

        if debug:
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        checkout = WorktreeCheckout(config)

        if parsed_args.command == "pr":
            checkout.checkout_pr(parsed_args.pr)
        elif parsed_args.command == "branch":
            checkout.checkout_branch(parsed_args.name)
        elif parsed_args.command == "status":
            checkout.status()
        elif parsed_args.command == "clean":
            checkout.clean(assume_yes=config.assume_yes)

        return EXIT_OK
    except KeyboardInterrupt:
        reset_terminal()
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_INTERRUPTED
    except CheckoutError as e:
        err_console.print(f"[bold red]error:[/bold red] {e}", highlight=False)
        if debug:
            err_console.print_exception()
        return EXIT_ERROR
    except Exception as e:
        err_console.print(f"[bold red]error:[/bold red] {e}", highlight=False)
        logger.debug("Unexpected error", exc_info=True)
        if debug:
            err_console.print_exception()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
