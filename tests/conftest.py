"""Pytest fixtures for checkout-worktree tests"""
import io
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest
from rich.console import Console

from checkout_worktree.config import Config
from checkout_worktree.models.pull_request import PullRequestInfo
from checkout_worktree.services import terminal


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def home_dir(temp_dir, monkeypatch):
    """A fake $HOME."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("CHECKOUT_REPO", raising=False)
    monkeypatch.delenv("CHECKOUT_WORKTREES_DIR", raising=False)
    return home


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


@pytest.fixture
def upstream_repo(temp_dir):
    """The repository playing GitHub: `main` plus a `feature-x` branch."""
    repo_path = temp_dir / "upstream"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_user(repo)

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")

    repo.git.checkout("-b", "feature-x")
    feature_file = repo_path / "feature.txt"
    feature_file.write_text("Feature content\n")
    repo.index.add(["feature.txt"])
    repo.index.commit("Add feature")
    repo.git.checkout("main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo(upstream_repo, home_dir):
    """The main checkout at ~/figma/figma, cloned from the upstream repository."""
    repo_path = home_dir / "figma" / "figma"
    repo_path.parent.mkdir(parents=True)
    repo = git.Repo.clone_from(upstream_repo.working_dir, repo_path)
    _configure_user(repo)

    yield repo

    repo.close()


@pytest.fixture
def config(home_dir, git_repo):
    """Config pointing at the fake home, with no assistant session."""
    return Config(home=home_dir, launch_claude=False)


@pytest.fixture
def pull_request():
    return PullRequestInfo(number=42, title="multiplayer: Fix the thing that broke", head_ref="feature-x")


@pytest.fixture
def mock_github_service(pull_request):
    """Create a mock GitHubService returning `pull_request`."""
    from checkout_worktree.services.github_service import GitHubService

    service = Mock(spec=GitHubService)
    service.get_pull_request = Mock(return_value=pull_request)
    return service


@pytest.fixture
def output():
    """A console that records instead of printing."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)


def scripted(*answers):
    """Input function answering prompts from a fixed script; EOF once it runs out."""
    remaining = list(answers)
    prompts = []

    def _input(prompt):
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    _input.prompts = prompts
    _input.remaining = remaining
    return _input


@pytest.fixture
def scripted_input():
    return scripted


@pytest.fixture(autouse=True)
def reset_terminal_state():
    """Leave no decoration active between tests."""
    yield
    terminal.reset_terminal()
