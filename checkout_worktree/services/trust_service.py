"""Registration of new worktrees in the assistant's trust list (~/.claude.json)."""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from checkout_worktree.constants import DEFAULT_PROJECT_TEMPLATE, SESSION_USAGE_FIELDS
from checkout_worktree.exceptions import CheckoutError, ParseError
from checkout_worktree.logging_config import get_logger

logger = get_logger(__name__)

TRUST_FLAG = "hasTrustDialogAccepted"


def build_trust_entry(template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Clone a project entry for a new worktree.

    Session-usage fields are dropped and the trust flag is forced on.
    """
    entry = copy.deepcopy(template if template is not None else DEFAULT_PROJECT_TEMPLATE)
    for key in SESSION_USAGE_FIELDS:
        entry.pop(key, None)
    entry[TRUST_FLAG] = True
    return entry


def register_worktree(
    document: Dict[str, Any], repo_root: Union[str, Path], worktree_path: Union[str, Path]
) -> Dict[str, Any]:
    """Return a copy of `document` with a trusted entry for `worktree_path`.

    The entry is cloned from the main repository's entry when there is one.

    Raises:
        ParseError: If `projects` exists but isn't an object
    """
    updated = copy.deepcopy(document)
    projects = updated.setdefault("projects", {})
    if not isinstance(projects, dict):
        raise ParseError("'projects' in the assistant config is not a JSON object")

    template = projects.get(str(repo_root))
    if template is not None and not isinstance(template, dict):
        template = None

    projects[str(worktree_path)] = build_trust_entry(template)
    return updated


class TrustService:
    """Reads and writes the assistant's global config file."""

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path)

    def load(self) -> Optional[Dict[str, Any]]:
        """Load the config document, or None if the file doesn't exist.

        Raises:
            ParseError: If the file isn't a JSON object
        """
        if not self.config_path.exists():
            return None

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse {self.config_path}: {e}") from e
        except OSError as e:
            raise CheckoutError(f"Failed to read {self.config_path}: {e}") from e

        if not isinstance(document, dict):
            raise ParseError(f"Failed to parse {self.config_path}: expected a JSON object")
        return document

    def save(self, document: Dict[str, Any]) -> None:
        """Write the document back, replacing the file in one step."""
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self.config_path.parent, prefix=f".{self.config_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                    f.write("\n")
                if self.config_path.exists():
                    os.chmod(temp_path, self.config_path.stat().st_mode & 0o777)
                os.replace(temp_path, self.config_path)
            except BaseException:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CheckoutError(f"Failed to write {self.config_path}: {e}") from e

    def trust_worktree(self, repo_root: Union[str, Path], worktree_path: Union[str, Path]) -> bool:
        """Mark `worktree_path` as trusted.

        Returns:
            False if there is no config file to update (nothing was written)
        """
        document = self.load()
        if document is None:
            logger.debug(f"{self.config_path} not found, skipping trust registration")
            return False

        self.save(register_worktree(document, repo_root, worktree_path))
        logger.info(f"Trusted {worktree_path} in {self.config_path}")
        return True
