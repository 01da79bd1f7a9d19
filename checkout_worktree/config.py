"""Configuration handling for checkout-worktree"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from checkout_worktree.constants import (
    CLAUDE_CONFIG_FILENAME,
    DEFAULT_BRANCH,
    DEFAULT_PROMPT_TEMPLATE,
    DEFAULT_REPO_SUBPATH,
    DEFAULT_WORKTREES_SUBPATH,
    REMOTE_NAME,
    SETTINGS_FILES,
    STATE_SUBPATH,
)
from checkout_worktree.exceptions import ConfigurationError


@dataclass
class Config:
    """Configuration for checkout-worktree with validation."""

    home: Path
    repo_root: Optional[Path] = None  # None = $HOME/figma/figma
    worktrees_dir: Optional[Path] = None  # None = $HOME/figma-worktrees
    state_dir: Optional[Path] = None  # None = $HOME/.local/share/checkout
    claude_config_path: Optional[Path] = None  # None = $HOME/.claude.json

    # Git
    remote_name: str = REMOTE_NAME
    default_branch: str = DEFAULT_BRANCH  # used when origin/HEAD is not set

    # Session
    launch_claude: bool = True
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE

    # Execution modes
    assume_yes: bool = False
    verbose: bool = False
    debug: bool = False

    # GitHub integration
    github_token: Optional[str] = None

    # Copied from the main checkout into new worktrees
    settings_files: Tuple[str, ...] = SETTINGS_FILES

    def __post_init__(self):
        """Fill in derived paths and validate."""
        self.home = Path(self.home)
        if self.repo_root is None:
            self.repo_root = self.home / DEFAULT_REPO_SUBPATH
        if self.worktrees_dir is None:
            self.worktrees_dir = self.home / DEFAULT_WORKTREES_SUBPATH
        if self.state_dir is None:
            self.state_dir = self.home / STATE_SUBPATH
        if self.claude_config_path is None:
            self.claude_config_path = self.home / CLAUDE_CONFIG_FILENAME

        self.repo_root = Path(self.repo_root).expanduser().absolute()
        self.worktrees_dir = Path(self.worktrees_dir).expanduser().absolute()
        self.state_dir = Path(self.state_dir)
        self.claude_config_path = Path(self.claude_config_path)

        self._validate_home()
        self._validate_remote_name()
        self._validate_default_branch()
        self._validate_prompt_template()

    @property
    def colors_dir(self) -> Path:
        """Directory holding one color assignment file per worktree."""
        return self.state_dir / "colors"

    def _validate_home(self):
        """Validate home is an absolute path."""
        if not str(self.home) or not self.home.is_absolute():
            raise ConfigurationError(f"HOME must be an absolute path, got '{self.home}'")

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ConfigurationError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_default_branch(self):
        """Validate default_branch is not empty."""
        if not self.default_branch or not self.default_branch.strip():
            raise ConfigurationError("default_branch cannot be empty")
        self.default_branch = self.default_branch.strip()

    def _validate_prompt_template(self):
        """Validate prompt_template only uses the {pr_number} placeholder."""
        try:
            self.prompt_template.format(pr_number=0)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(f"Invalid prompt template '{self.prompt_template}': {e}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "home": str(self.home),
            "repo_root": str(self.repo_root),
            "worktrees_dir": str(self.worktrees_dir),
            "state_dir": str(self.state_dir),
            "claude_config_path": str(self.claude_config_path),
            "remote_name": self.remote_name,
            "default_branch": self.default_branch,
            "launch_claude": self.launch_claude,
            "prompt_template": self.prompt_template,
            "assume_yes": self.assume_yes,
            "verbose": self.verbose,
            "debug": self.debug,
            "github_token": "***" if self.github_token else None,
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = set(cls.__dataclass_fields__)
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Config":
        """Build a Config from the process environment plus CLI overrides.

        Recognized variables: HOME (required), CHECKOUT_REPO,
        CHECKOUT_WORKTREES_DIR, GITHUB_TOKEN.

        Raises:
            ConfigurationError: If HOME is not set
        """
        if environ is None:
            environ = os.environ

        home = environ.get("HOME")
        if not home:
            raise ConfigurationError("HOME not set")

        values = {"home": Path(home)}
        if environ.get("CHECKOUT_REPO"):
            values["repo_root"] = Path(environ["CHECKOUT_REPO"])
        if environ.get("CHECKOUT_WORKTREES_DIR"):
            values["worktrees_dir"] = Path(environ["CHECKOUT_WORKTREES_DIR"])
        if environ.get("GITHUB_TOKEN"):
            values["github_token"] = environ["GITHUB_TOKEN"]

        # CLI flags left at None don't override the environment
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
