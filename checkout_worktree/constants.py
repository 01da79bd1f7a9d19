"""Shared constants for checkout-worktree."""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class PaletteColor:
    """A terminal background color."""

    token: str  # six-digit hex, as written to the color state files
    name: str


# Muted backgrounds, readable with a light foreground
PALETTE: List[PaletteColor] = [
    PaletteColor("1e2233", "soft navy"),
    PaletteColor("1e2828", "soft sage"),
    PaletteColor("2d1f2d", "dusty plum"),
    PaletteColor("1f2d2d", "seafoam"),
    PaletteColor("2b2433", "lavender"),
    PaletteColor("33261f", "warm taupe"),
    PaletteColor("1f2b33", "powder blue"),
    PaletteColor("2d2626", "dusty rose"),
    PaletteColor("262d26", "soft mint"),
    PaletteColor("332b1f", "soft peach"),
    PaletteColor("261f2d", "soft violet"),
    PaletteColor("1f332b", "soft teal"),
]

PALETTE_TOKENS: Tuple[str, ...] = tuple(color.token for color in PALETTE)


# Default locations, relative to $HOME
DEFAULT_REPO_SUBPATH = "figma/figma"
DEFAULT_WORKTREES_SUBPATH = "figma-worktrees"
STATE_SUBPATH = ".local/share/checkout"
CLAUDE_CONFIG_FILENAME = ".claude.json"

REMOTE_NAME = "origin"
DEFAULT_BRANCH = "master"

# Highest "-N" suffix tried for one worktree base name
MAX_WORKTREE_SUFFIX = 100

PR_DIR_PREFIX = "pr-{pr_number}-"

DEFAULT_PROMPT_TEMPLATE = "/checkout-pr {pr_number}"


# Files copied from the main checkout into every new worktree, when present
SETTINGS_FILES: Tuple[str, ...] = (
    ".claude/settings.local.json",
    ".vscode/settings.json",
)


# Per-session bookkeeping that must not be cloned into a new project entry
SESSION_USAGE_FIELDS: Tuple[str, ...] = (
    "history",
    "lastSessionId",
    "lastCost",
    "lastAPIDuration",
    "lastAPIDurationWithoutRetries",
    "lastToolDuration",
    "lastDuration",
    "lastLinesAdded",
    "lastLinesRemoved",
    "lastTotalInputTokens",
    "lastTotalOutputTokens",
    "lastTotalCacheCreationInputTokens",
    "lastTotalCacheReadInputTokens",
    "lastTotalWebSearchRequests",
    "lastModelUsage",
    "exampleFiles",
    "exampleFilesGeneratedAt",
)

DEFAULT_PROJECT_TEMPLATE = {
    "allowedTools": [],
    "mcpContextUris": [],
    "mcpServers": {},
    "enabledMcpjsonServers": [],
    "disabledMcpjsonServers": [],
    "hasTrustDialogAccepted": True,
    "projectOnboardingSeenCount": 0,
    "hasClaudeMdExternalIncludesApproved": False,
    "hasClaudeMdExternalIncludesWarningShown": False,
}


# Symbol constants
SYMBOL_STEP = "→"
SYMBOL_DONE = "✓"
SYMBOL_WARN = "!"
SYMBOL_DIRTY = "⚠"
SYMBOL_ASK = "?"

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130
