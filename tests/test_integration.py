"""End-to-end tests: real repositories, mocked GitHub and assistant"""
import io
from unittest.mock import Mock, patch

import git
import pytest

from checkout_worktree.cli.main import main
from checkout_worktree.config import Config
from checkout_worktree.constants import PALETTE_TOKENS
from checkout_worktree.core import WorktreeCheckout
from checkout_worktree.exceptions import CheckoutError, ParseError
from checkout_worktree.services import terminal
from checkout_worktree.services.session_launcher import SessionLauncher
from checkout_worktree.services.terminal import TerminalDecorator


PR_DIR = "pr-42-fix-the-thing-that"


@pytest.fixture(autouse=True)
def no_optional_tools():
    """Run as if mise and gt weren't installed."""
    with patch("checkout_worktree.services.provisioner.which", return_value=None):
        yield


@pytest.fixture
def make_checkout(config, mock_github_service, output, scripted_input):
    """Build a WorktreeCheckout answering prompts from a script."""
    def _make(*answers, **kwargs):
        kwargs.setdefault("config", config)
        return WorktreeCheckout(
            github_service=mock_github_service,
            input_func=scripted_input(*answers),
            output=output,
            **kwargs,
        )
    return _make


class FakeTTY(io.StringIO):
    def isatty(self):
        return True


def push_upstream_commit(upstream_repo, branch, filename, content):
    """Advance `branch` on the upstream repository by one commit."""
    upstream_repo.git.checkout(branch)
    path = f"{upstream_repo.working_dir}/{filename}"
    with open(path, "w") as f:
        f.write(content)
    upstream_repo.index.add([filename])
    commit = upstream_repo.index.commit(f"Update {filename}")
    upstream_repo.git.checkout("main")
    return commit


class TestCheckoutPullRequest:
    """Test `checkout pr`."""

    def test_creates_worktree(self, make_checkout, config, mock_github_service, output, git_repo):
        checkout = make_checkout()

        path = checkout.checkout_pr("https://github.com/figma/figma/pull/42")

        assert path == config.worktrees_dir / PR_DIR
        assert (path / "feature.txt").read_text() == "Feature content\n"
        assert git.Repo(path).head.commit == git_repo.refs["origin/feature-x"].commit
        mock_github_service.get_pull_request.assert_called_once_with(42)
        assert "Worktree ready at" in output.file.getvalue()

    def test_reuse_clean_worktree_resets_to_remote(self, make_checkout, upstream_repo):
        first = make_checkout().checkout_pr("42")
        new_commit = push_upstream_commit(upstream_repo, "feature-x", "feature.txt", "Updated\n")

        checkout = make_checkout("1")
        path = checkout.checkout_pr("42")

        assert path == first
        assert git.Repo(path).head.commit.hexsha == new_commit.hexsha
        assert (path / "feature.txt").read_text() == "Updated\n"

    def test_create_new_worktree_alongside(self, make_checkout, config, mock_github_service, output):
        make_checkout().checkout_pr("42")

        path = make_checkout("2").checkout_pr("42")

        assert path == config.worktrees_dir / f"{PR_DIR}-2"
        assert (path / "feature.txt").exists()
        assert (config.worktrees_dir / PR_DIR).exists()

    def test_dirty_worktree_declined_keeps_changes(self, make_checkout, config, mock_github_service, output):
        first = make_checkout().checkout_pr("42")
        (first / "feature.txt").write_text("work in progress\n")

        checkout = make_checkout("1", "n", "2")
        path = checkout.checkout_pr("42")

        assert path == config.worktrees_dir / f"{PR_DIR}-2"
        assert (first / "feature.txt").read_text() == "work in progress\n"
        text = output.file.getvalue()
        assert "uncommitted changes" in text
        assert "Cancelled" in text

    def test_dirty_worktree_confirmed_discards_changes(self, make_checkout, config, mock_github_service, output):
        first = make_checkout().checkout_pr("42")
        (first / "feature.txt").write_text("work in progress\n")

        path = make_checkout("1", "y").checkout_pr("42")

        assert path == first
        assert (first / "feature.txt").read_text() == "Feature content\n"

    def test_no_answer_aborts(self, make_checkout, config, mock_github_service, output):
        make_checkout().checkout_pr("42")

        with pytest.raises(CheckoutError, match="Failed to read input"):
            make_checkout().checkout_pr("42")

    def test_bad_pr_reference(self, make_checkout, config, mock_github_service, output):
        with pytest.raises(ParseError):
            make_checkout().checkout_pr("not-a-pr")
        mock_github_service.get_pull_request.assert_not_called()

    def test_missing_repo(self, home_dir, mock_github_service, output):
        config = Config(home=home_dir, launch_claude=False)
        with pytest.raises(CheckoutError, match="Repo not found"):
            WorktreeCheckout(config, github_service=mock_github_service, output=output)


class TestCheckoutBranch:
    """Test `checkout branch`."""

    def test_remote_branch(self, make_checkout, config, mock_github_service, output, git_repo):
        path = make_checkout().checkout_branch("feature-x")

        assert path == config.worktrees_dir / "feature-x"
        assert git.Repo(path).head.commit == git_repo.refs["origin/feature-x"].commit

    def test_new_branch(self, make_checkout, config, mock_github_service, output, git_repo):
        path = make_checkout().checkout_branch("dh/new-thing")

        assert path == config.worktrees_dir / "dh-new-thing"
        worktree = git.Repo(path)
        assert worktree.active_branch.name == "dh/new-thing"
        assert worktree.head.commit == git_repo.refs["origin/main"].commit

    def test_reuse_local_branch_without_reset(self, make_checkout, config, mock_github_service, output):
        first = make_checkout().checkout_branch("dh/new-thing")
        (first / "notes.txt").write_text("keep me\n")
        wt = git.Repo(first)
        wt.git.add("notes.txt")
        wt.git.commit("-m", "Local work")

        path = make_checkout("1").checkout_branch("dh/new-thing")

        assert path == first
        assert (first / "notes.txt").read_text() == "keep me\n"

    def test_rerun_remote_branch_offers_existing_worktree(self, make_checkout, upstream_repo):
        first = make_checkout().checkout_branch("feature-x")
        new_commit = push_upstream_commit(upstream_repo, "feature-x", "feature.txt", "Updated\n")

        checkout = make_checkout("1")
        path = checkout.checkout_branch("feature-x")

        assert path == first
        assert checkout.input_func.prompts
        assert git.Repo(path).head.commit.hexsha == new_commit.hexsha

    def test_rerun_remote_branch_create_new(self, make_checkout, config):
        make_checkout().checkout_branch("feature-x")

        path = make_checkout("2").checkout_branch("feature-x")

        assert path == config.worktrees_dir / "feature-x-2"

    def test_main_checkout_branch_is_not_reused(self, make_checkout, config, git_repo):
        """Test checking out the main checkout's branch creates a worktree instead of resetting the main checkout."""
        main_head = git_repo.head.commit
        (config.repo_root / "local.txt").write_text("untracked work\n")

        path = make_checkout().checkout_branch("main")

        assert path == config.worktrees_dir / "main"
        assert git_repo.head.commit == main_head
        assert (config.repo_root / "local.txt").exists()

    def test_unusable_branch_name(self, make_checkout, config, mock_github_service, output):
        with pytest.raises(CheckoutError, match="Cannot derive a worktree name"):
            make_checkout().checkout_branch("///")


class TestSession:
    """Test handing over to the assistant."""

    def test_launches_with_decoration(self, make_checkout, home_dir, git_repo, mock_github_service, output):
        config = Config(home=home_dir)
        stream = FakeTTY()
        decorator = TerminalDecorator(stream=stream, environ={"TERM_PROGRAM": "iTerm.app"}, hostname="host")

        launcher = Mock(spec=SessionLauncher)
        launcher.build_command.return_value = ["claude", "/checkout-pr 42"]
        seen = {}
        launcher.launch.side_effect = lambda path, pr: seen.update(modified=terminal.is_terminal_modified())

        checkout = make_checkout(config=config, launcher=launcher, terminal=decorator)
        path = checkout.checkout_pr("42")

        launcher.launch.assert_called_once_with(path, 42)
        assert seen["modified"] is True
        assert not terminal.is_terminal_modified()
        assert f"bg={PALETTE_TOKENS[0]}" in stream.getvalue()
        assert "\033]111\007" in stream.getvalue()
        assert (config.colors_dir / PR_DIR).read_text() == PALETTE_TOKENS[0] + "\n"

    def test_no_claude_prints_tip(self, make_checkout, config, mock_github_service, output):
        make_checkout().checkout_pr("42")

        assert "&& claude" in output.file.getvalue()
        assert not config.colors_dir.exists()


class TestStatusAndClean:
    """Test `checkout status` and `checkout clean`."""

    def test_status_lists_worktrees(self, make_checkout, config, mock_github_service, output):
        checkout = make_checkout()
        checkout.checkout_pr("42")
        output.file.truncate(0)
        output.file.seek(0)

        checkout.status()

        text = output.file.getvalue()
        assert PR_DIR in text
        assert "Total worktrees: 1" in text

    def test_status_without_worktrees(self, make_checkout, config, mock_github_service, output):
        make_checkout().status()
        assert "No worktrees found" in output.file.getvalue()

    def test_clean_skips_dirty(self, make_checkout, config, mock_github_service, output):
        checkout = make_checkout()
        clean_path = checkout.checkout_branch("feature-x")
        dirty_path = checkout.checkout_pr("42")
        (dirty_path / "feature.txt").write_text("work in progress\n")
        checkout.color_service.pick_color(clean_path)

        removed = checkout.clean(assume_yes=True)

        assert removed == 1
        assert not clean_path.exists()
        assert dirty_path.exists()
        assert checkout.color_service.get_color(clean_path.name) is None
        assert [r.path for r in checkout.worktree_service.list_worktrees()] == [dirty_path]

    def test_clean_declined(self, make_checkout, config, mock_github_service, output):
        path = make_checkout().checkout_pr("42")

        removed = make_checkout("n").clean()

        assert removed == 0
        assert path.exists()
        assert "Cancelled" in output.file.getvalue()

    def test_clean_confirmed(self, make_checkout, config, mock_github_service, output):
        path = make_checkout().checkout_pr("42")

        assert make_checkout("y").clean() == 1
        assert not path.exists()


class TestMain:
    """Test the command-line entry point."""

    @pytest.fixture(autouse=True)
    def cli_patches(self, mock_github_service):
        with patch("checkout_worktree.cli.main.install_interrupt_handler"), \
                patch("checkout_worktree.cli.main.setup_logging"), \
                patch("checkout_worktree.core.checkout.GitHubService", return_value=mock_github_service):
            yield

    def test_pr_without_claude(self, git_repo, home_dir):
        assert main(["pr", "42", "--no-claude"]) == 0
        assert (home_dir / "figma-worktrees" / PR_DIR).is_dir()

    def test_status(self, git_repo):
        assert main(["status"]) == 0

    def test_clean_yes(self, git_repo, home_dir):
        main(["pr", "42", "--no-claude"])

        assert main(["clean", "--yes"]) == 0
        assert not (home_dir / "figma-worktrees" / PR_DIR).exists()

    def test_unparseable_pr(self, git_repo, capsys):
        assert main(["pr", "abc", "--no-claude"]) == 1
        assert "Could not parse PR number" in capsys.readouterr().err

    def test_missing_repo(self, home_dir, temp_dir, capsys):
        assert main(["status", "--repo", str(temp_dir / "nope")]) == 1
        assert "Repo not found" in capsys.readouterr().err

    def test_missing_subcommand(self, home_dir):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
