"""Tests for ColorService"""
import pytest

from checkout_worktree.constants import PALETTE, PALETTE_TOKENS
from checkout_worktree.services.color_service import ColorService


@pytest.fixture
def colors_dir(temp_dir):
    return temp_dir / "state" / "colors"


@pytest.fixture
def color_service(colors_dir):
    return ColorService(colors_dir)


class TestPalette:
    """Test the palette definition."""

    def test_twelve_distinct_colors(self):
        assert len(PALETTE) == 12
        assert len(set(PALETTE_TOKENS)) == 12

    def test_tokens_are_hex(self):
        for token in PALETTE_TOKENS:
            assert len(token) == 6
            int(token, 16)


class TestPickColor:
    """Test color assignment."""

    def test_first_assignment_uses_first_color(self, color_service, colors_dir):
        token = color_service.pick_color("/wt/pr-1-a")

        assert token == PALETTE_TOKENS[0]
        assert (colors_dir / "pr-1-a").read_text() == token + "\n"

    def test_assignment_is_stable(self, color_service):
        first = color_service.pick_color("/wt/pr-1-a")
        color_service.pick_color("/wt/pr-2-b")

        assert color_service.pick_color("/wt/pr-1-a") == first

    def test_stable_across_instances(self, colors_dir):
        first = ColorService(colors_dir).pick_color("/wt/pr-1-a")
        assert ColorService(colors_dir).pick_color("/wt/pr-1-a") == first

    def test_distinct_while_palette_lasts(self, color_service):
        tokens = [color_service.pick_color(f"/wt/tree-{i}") for i in range(len(PALETTE_TOKENS))]
        assert len(set(tokens)) == len(PALETTE_TOKENS)

    def test_exhausted_palette_falls_back_to_hash(self, temp_dir):
        service = ColorService(temp_dir / "colors", palette=["aaaaaa", "bbbbbb"])
        service.pick_color("/wt/one")
        service.pick_color("/wt/two")

        path = "/wt/three"
        expected = ["aaaaaa", "bbbbbb"][sum(path.encode()) % 2]
        assert service.pick_color(path) == expected
        assert service.get_color("three") == expected

    def test_unknown_persisted_color_is_reassigned(self, color_service, colors_dir):
        colors_dir.mkdir(parents=True)
        (colors_dir / "pr-1-a").write_text("zzzzzz\n")

        assert color_service.pick_color("/wt/pr-1-a") == PALETTE_TOKENS[0]

    def test_empty_palette_rejected(self, temp_dir):
        with pytest.raises(ValueError):
            ColorService(temp_dir, palette=[])


class TestRelease:
    """Test releasing assignments."""

    def test_release_frees_color(self, color_service):
        color_service.pick_color("/wt/pr-1-a")
        color_service.pick_color("/wt/pr-2-b")

        assert color_service.release("pr-1-a") is True
        assert color_service.get_color("pr-1-a") is None
        assert color_service.pick_color("/wt/pr-3-c") == PALETTE_TOKENS[0]

    def test_release_unknown(self, color_service):
        assert color_service.release("nope") is False

    def test_assigned_colors(self, color_service):
        assert color_service.assigned_colors() == {}
        color_service.pick_color("/wt/a")
        color_service.pick_color("/wt/b")

        assert color_service.assigned_colors() == {"a": PALETTE_TOKENS[0], "b": PALETTE_TOKENS[1]}
