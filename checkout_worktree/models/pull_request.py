"""Pull request data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PullRequestInfo:
    """The parts of a GitHub pull request needed to check it out."""

    number: int
    title: str
    head_ref: str  # Branch name the PR was opened from
