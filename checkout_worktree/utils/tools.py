"""Locating and running the external command-line tools we wrap (gh, mise, gt)."""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from checkout_worktree.exceptions import ToolFailedError, ToolNotFoundError
from checkout_worktree.logging_config import get_logger

logger = get_logger(__name__)


def which(tool: str) -> Optional[Path]:
    """Return the full path of `tool` on PATH, or None if it isn't installed."""
    found = shutil.which(tool)
    return Path(found) if found else None


def run_tool(
    args: List[str],
    cwd: Optional[Union[str, Path]] = None,
    capture: bool = True,
) -> str:
    """Run an external tool to completion and return its stdout.

    Args:
        args: Command line, tool name first
        cwd: Working directory for the tool
        capture: Capture stdout/stderr (False lets the tool use the terminal)

    Returns:
        Captured stdout (empty string when not capturing)

    Raises:
        ToolNotFoundError: If the tool could not be started
        ToolFailedError: If the tool exited with a non-zero status
    """
    tool = args[0]
    logger.debug(f"Running {' '.join(args)} (cwd={cwd or '.'})")
    try:
        result = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=capture,
            text=True,
            check=False,
        )
    except OSError as e:
        raise ToolNotFoundError(tool, str(e)) from e

    if result.returncode != 0:
        raise ToolFailedError(
            tool,
            f"{' '.join(args[:2])} failed (exit {result.returncode})",
            result.stderr if capture else None,
        )

    return result.stdout if capture else ""
