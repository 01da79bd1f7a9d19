"""Launches the assistant CLI inside a worktree."""

import signal
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from checkout_worktree.constants import DEFAULT_PROMPT_TEMPLATE
from checkout_worktree.exceptions import ToolFailedError, ToolNotFoundError
from checkout_worktree.logging_config import get_logger

logger = get_logger(__name__)


class SessionLauncher:
    """Runs `claude` in a worktree and waits for it to exit."""

    def __init__(self, command: str = "claude", prompt_template: str = DEFAULT_PROMPT_TEMPLATE):
        self.command = command
        self.prompt_template = prompt_template

    def build_prompt(self, pr_number: Optional[int]) -> Optional[str]:
        if pr_number is None:
            return None
        return self.prompt_template.format(pr_number=pr_number)

    def build_command(self, pr_number: Optional[int] = None) -> List[str]:
        args = [self.command]
        prompt = self.build_prompt(pr_number)
        if prompt:
            args.append(prompt)
        return args

    def launch(self, worktree_path: Union[str, Path], pr_number: Optional[int] = None) -> None:
        """Run the assistant session in the foreground.

        Ctrl-C belongs to the assistant while it runs, so SIGINT is swallowed
        in this process until the child exits.

        Raises:
            ToolNotFoundError: If the assistant couldn't be started
            ToolFailedError: If it exited with a non-zero status
        """
        args = self.build_command(pr_number)
        logger.info(f"Launching {' '.join(args)} in {worktree_path}")

        # A Python-level handler (not SIG_IGN) so the child gets default handling
        previous = signal.signal(signal.SIGINT, lambda signum, frame: None)
        try:
            result = subprocess.run(args, cwd=str(worktree_path), check=False)
        except OSError as e:
            raise ToolNotFoundError(self.command, str(e)) from e
        finally:
            signal.signal(signal.SIGINT, previous)

        if result.returncode != 0:
            raise ToolFailedError(self.command, f"{self.command} exited with error (exit {result.returncode})")
