"""GitHub API integration service"""

from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from github import Auth, Github, GithubException

from checkout_worktree.exceptions import GitHubAPIError, ToolFailedError, ToolNotFoundError
from checkout_worktree.logging_config import get_logger
from checkout_worktree.models.pull_request import PullRequestInfo
from checkout_worktree.utils.tools import run_tool, which

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger(__name__)


def parse_github_repo(remote_url: str) -> str:
    """Extract "org/repo" from an SSH or HTTPS GitHub remote URL."""
    if "github.com" not in remote_url:
        raise GitHubAPIError("parse_remote", f"Not a GitHub remote: {remote_url}")

    if remote_url.startswith("git@"):
        # Handle SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split("github.com:", 1)[1]
    else:
        # Handle HTTPS URL format (https://github.com/org/repo.git)
        path = urlparse(remote_url).path.strip("/")

    if path.endswith(".git"):
        path = path[:-4]
    return path


def _describe(error: GithubException) -> str:
    """Short message for a GithubException ("Not Found", "Bad credentials", ...)."""
    data = error.data if isinstance(error.data, dict) else {}
    return data.get("message") or str(error)


class GitHubService:
    """Looks up pull requests for the repository behind a git remote."""

    def __init__(self, remote_url: str, token: Optional[str] = None):
        """Initialize the service.

        Args:
            remote_url: URL of the repository's GitHub remote
            token: GitHub token; when omitted, `gh auth token` is asked for one
        """
        self.remote_url = remote_url
        self.github_repo = parse_github_repo(remote_url)
        self._token = token
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None

    def _resolve_token(self) -> str:
        """Return the configured token, or the one the gh CLI is logged in with."""
        if self._token:
            return self._token

        if which("gh") is None:
            raise ToolNotFoundError("gh", "not installed and GITHUB_TOKEN is not set")

        try:
            token = run_tool(["gh", "auth", "token"]).strip()
        except ToolFailedError as e:
            raise ToolFailedError("gh", "gh auth token failed", e.stderr) from e
        if not token:
            raise GitHubAPIError("authenticate", "gh returned an empty token; run 'gh auth login'")

        self._token = token
        return token

    def _get_repo(self) -> "Repository":
        """Get the PyGithub repository, connecting on first use."""
        if self.gh_repo is None:
            self.github = Github(auth=Auth.Token(self._resolve_token()))
            try:
                self.gh_repo = self.github.get_repo(self.github_repo)
            except GithubException as e:
                raise GitHubAPIError("get_repo", f"{self.github_repo}: {_describe(e)}") from e
            logger.debug(f"[GitHub] Connected to {self.github_repo}")
        return self.gh_repo

    def get_pull_request(self, pr_number: int) -> PullRequestInfo:
        """Fetch the title and head branch of a pull request.

        Raises:
            GitHubAPIError: If the PR doesn't exist or the API call fails
        """
        repo = self._get_repo()
        try:
            pull = repo.get_pull(pr_number)
        except GithubException as e:
            raise GitHubAPIError("get_pull", f"#{pr_number}: {_describe(e)}") from e

        logger.debug(f"[GitHub] PR #{pr_number}: {pull.title!r} from {pull.head.ref}")
        return PullRequestInfo(number=pull.number, title=pull.title, head_ref=pull.head.ref)
