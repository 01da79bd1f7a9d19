"""Parsing of user-supplied PR references and titles."""

import re

from checkout_worktree.exceptions import ParseError

_PULL_URL_RE = re.compile(r"/pull/(\d+)")
_HYPHEN_RUN_RE = re.compile(r"-+")

# Titles often start with a "category: " prefix
_PREFIX_SEPARATOR = ": "
_MAX_SLUG_WORDS = 4


def extract_pr_number(text: str) -> int:
    """Extract a pull request number from a number or a GitHub PR URL.

    Args:
        text: e.g. "123" or "https://github.com/org/repo/pull/123/files"

    Returns:
        The PR number

    Raises:
        ParseError: If neither form matches
    """
    candidate = text.strip()
    if candidate.isascii() and candidate.isdigit():
        return int(candidate)

    match = _PULL_URL_RE.search(candidate)
    if match:
        return int(match.group(1))

    raise ParseError(
        f"Could not parse PR number from '{text}'. Expected a number or GitHub PR URL."
    )


def create_slug(title: str) -> str:
    """Turn a PR title or branch name into a short, filesystem-safe identifier.

    >>> create_slug("multiplayer: Fix cursor jumping on reconnect")
    'fix-cursor-jumping-on'
    """
    _, separator, rest = title.partition(_PREFIX_SEPARATOR)
    text = rest if separator else title

    slug = "".join(ch if ch.isalnum() else "-" for ch in text.lower())
    slug = _HYPHEN_RUN_RE.sub("-", slug).strip("-")

    words = [word for word in slug.split("-") if word]
    return "-".join(words[:_MAX_SLUG_WORDS])
