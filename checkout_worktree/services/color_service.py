"""Per-worktree terminal color assignment."""

from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from checkout_worktree.constants import PALETTE_TOKENS
from checkout_worktree.exceptions import CheckoutError
from checkout_worktree.logging_config import get_logger

logger = get_logger(__name__)


class ColorService:
    """Assigns each worktree a background color and remembers it.

    One file per worktree directory name under `colors_dir`, holding a
    palette token. Once written, a worktree keeps its color until the file
    is released.
    """

    def __init__(self, colors_dir: Union[str, Path], palette: Sequence[str] = PALETTE_TOKENS):
        if not palette:
            raise ValueError("palette cannot be empty")
        self.colors_dir = Path(colors_dir)
        self.palette = tuple(palette)

    def _state_file(self, name: str) -> Path:
        return self.colors_dir / name

    def get_color(self, name: str) -> Optional[str]:
        """Return the persisted color for a worktree name, if it is a palette color."""
        state_file = self._state_file(name)
        try:
            token = state_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read color for {name}: {e}")
            return None

        if token not in self.palette:
            logger.debug(f"Ignoring unknown color '{token}' for {name}")
            return None
        return token

    def assigned_colors(self) -> Dict[str, str]:
        """Map of worktree name to color for every persisted assignment."""
        if not self.colors_dir.is_dir():
            return {}

        assignments = {}
        for state_file in sorted(self.colors_dir.iterdir()):
            if not state_file.is_file():
                continue
            token = self.get_color(state_file.name)
            if token:
                assignments[state_file.name] = token
        return assignments

    def pick_color(self, worktree_path: Union[str, Path]) -> str:
        """Return the color for a worktree, assigning and persisting one if needed.

        Preference order: the existing assignment, the first palette color no
        other worktree uses, then a hash of the path (collisions possible).
        """
        path = Path(worktree_path)
        name = path.name

        existing = self.get_color(name)
        if existing:
            return existing

        used = set(self.assigned_colors().values())
        token = next((color for color in self.palette if color not in used), None)
        if token is None:
            token = self.palette[sum(str(path).encode()) % len(self.palette)]
            logger.debug(f"Palette exhausted, {name} shares color {token}")

        self._persist(name, token)
        return token

    def _persist(self, name: str, token: str) -> None:
        try:
            self.colors_dir.mkdir(parents=True, exist_ok=True)
            self._state_file(name).write_text(token + "\n", encoding="utf-8")
        except OSError as e:
            raise CheckoutError(f"Failed to save color for {name}: {e}") from e
        logger.info(f"Assigned color {token} to {name}")

    def release(self, name: str) -> bool:
        """Forget a worktree's color. Returns False if none was assigned."""
        try:
            self._state_file(name).unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Released color for {name}")
        return True
