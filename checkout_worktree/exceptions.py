"""Custom exceptions for checkout-worktree"""

from typing import Optional


class CheckoutError(Exception):
    """Base exception for all checkout-worktree errors."""
    pass


class ConfigurationError(CheckoutError):
    """Exception raised for missing or invalid configuration (HOME, repo path)."""
    pass


class ParseError(CheckoutError):
    """Exception raised when user input or a state file cannot be parsed."""
    pass


class WorktreeLimitError(CheckoutError):
    """Exception raised when no free worktree directory name is left."""
    pass


class ToolNotFoundError(CheckoutError):
    """Exception raised when an external tool cannot be launched."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        self.message = message

        error_msg = f"Failed to run {tool}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ToolFailedError(CheckoutError):
    """Exception raised when an external tool ran but exited with an error."""

    def __init__(self, tool: str, message: Optional[str] = None, stderr: Optional[str] = None):
        self.tool = tool
        self.message = message
        self.stderr = (stderr or "").strip()

        error_msg = message or f"{tool} failed"
        if self.stderr:
            error_msg += f": {self.stderr}"

        super().__init__(error_msg)


class GitOperationError(ToolFailedError):
    """Exception raised for errors in Git operations."""

    def __init__(
        self,
        operation: str,
        branch: Optional[str] = None,
        message: Optional[str] = None,
        stderr: Optional[str] = None,
    ):
        self.operation = operation
        self.branch = branch

        error_msg = f"git {operation} failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f" ({message})"

        super().__init__("git", error_msg, stderr)


class GitHubAPIError(CheckoutError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


def git_operation_error(operation: str, error: Exception, branch: Optional[str] = None) -> GitOperationError:
    """Build a GitOperationError from a GitPython GitCommandError."""
    stderr = (error.stderr if hasattr(error, "stderr") else str(error)) or ""
    status = error.status if hasattr(error, "status") else "unknown"

    # GitPython reports stderr as "\n  stderr: '<text>'"
    stderr = stderr.strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'")

    return GitOperationError(operation, branch, f"exit {status}", stderr)
