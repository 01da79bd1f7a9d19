"""Terminal decoration: background color, title and badge for a worktree session.

Background color and badge use iTerm2's proprietary OSC 1337 sequences and
are only sent inside iTerm2. Title (OSC 0) and working directory (OSC 7)
are standard and sent to any TTY.

Whatever is set is undone exactly once: on leaving `decorate()`, or from the
SIGINT handler installed by `install_interrupt_handler()`.
"""

import base64
import os
import signal
import socket
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, TextIO, Union
from urllib.parse import quote

from checkout_worktree.constants import EXIT_INTERRUPTED
from checkout_worktree.logging_config import get_logger

logger = get_logger(__name__)

# Set while the terminal shows a decoration; shared with the signal handler
_terminal_modified = threading.Event()
_reset_lock = threading.Lock()
_active_decorator: Optional["TerminalDecorator"] = None


def osc(body: str) -> str:
    """Wrap an operating system command in ESC ] ... BEL."""
    return f"\033]{body}\007"


def set_background(color: str) -> str:
    return osc(f"1337;SetColors=bg={color}")


def reset_background() -> str:
    return osc("111")


def set_title(title: str) -> str:
    return osc(f"0;{title}")


def set_badge(text: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return osc(f"1337;SetBadgeFormat={encoded}")


def report_cwd(path: Union[str, Path], hostname: Optional[str] = None) -> str:
    """OSC 7: tell the terminal emulator the current working directory."""
    host = hostname if hostname is not None else socket.gethostname()
    return osc(f"7;file://{host}{quote(str(path))}")


def is_iterm(environ: Mapping[str, str]) -> bool:
    return environ.get("TERM_PROGRAM") == "iTerm.app" or environ.get("LC_TERMINAL") == "iTerm2"


class TerminalDecorator:
    """Writes decoration sequences for one worktree session to a terminal stream."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        environ: Optional[Mapping[str, str]] = None,
        hostname: Optional[str] = None,
    ):
        self.stream = stream if stream is not None else sys.stdout
        environ = environ if environ is not None else os.environ
        self.enabled = self._isatty(self.stream)
        self.iterm = is_iterm(environ)
        self.hostname = hostname
        self._original_cwd = os.getcwd()

    @staticmethod
    def _isatty(stream: TextIO) -> bool:
        try:
            return stream.isatty()
        except (AttributeError, ValueError):
            return False

    def _write(self, *sequences: str) -> None:
        self.stream.write("".join(sequences))
        self.stream.flush()

    def apply(self, worktree_path: Union[str, Path], color: str) -> bool:
        """Color and label the terminal for a worktree.

        Returns:
            False when the stream isn't a terminal and nothing was written
        """
        global _active_decorator

        if not self.enabled:
            logger.debug("Output is not a TTY, skipping terminal decoration")
            return False

        name = Path(worktree_path).name
        sequences = [set_title(name), report_cwd(worktree_path, self.hostname)]
        if self.iterm:
            sequences[:0] = [set_background(color), set_badge(name)]

        self._write(*sequences)
        _active_decorator = self
        _terminal_modified.set()
        logger.debug(f"Decorated terminal for {name} with {color}")
        return True

    def restore(self) -> None:
        """Write the sequences that undo `apply()`."""
        sequences = [set_title(""), report_cwd(self._original_cwd, self.hostname)]
        if self.iterm:
            sequences[:0] = [reset_background(), set_badge("")]
        self._write(*sequences)

    @contextmanager
    def decorate(self, worktree_path: Union[str, Path], color: str) -> Iterator[bool]:
        """Decorate the terminal for the duration of the block."""
        applied = self.apply(worktree_path, color)
        try:
            yield applied
        finally:
            reset_terminal()


def reset_terminal() -> bool:
    """Undo the active decoration, if any. Safe to call from a signal handler.

    Returns:
        True if reset sequences were written by this call
    """
    global _active_decorator

    # A handler interrupting a reset already in progress leaves it to finish
    if not _reset_lock.acquire(blocking=False):
        return False
    try:
        if not _terminal_modified.is_set():
            return False
        decorator = _active_decorator
        _terminal_modified.clear()
        _active_decorator = None
        if decorator is None:
            return False
        try:
            decorator.restore()
        except (OSError, ValueError) as e:
            logger.debug(f"Could not reset terminal: {e}")
            return False
        return True
    finally:
        _reset_lock.release()


def is_terminal_modified() -> bool:
    return _terminal_modified.is_set()


def _handle_interrupt(signum, frame):
    """Reset the terminal and exit with the conventional interrupt status."""
    reset_terminal()
    print(file=sys.stderr)  # New line after ^C
    sys.exit(EXIT_INTERRUPTED)


def install_interrupt_handler() -> None:
    """Install the SIGINT handler. Call once, from the main thread."""
    signal.signal(signal.SIGINT, _handle_interrupt)
