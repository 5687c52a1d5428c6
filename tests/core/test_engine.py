"""Tests for DiffxEngine against real repositories."""

from __future__ import annotations

from pathlib import Path

import pytest

from diffx.core.engine import DiffxEngine
from diffx.errors import GitError, InvalidInputError
from diffx.models.enums import OutputMode


@pytest.fixture
def feature_repo(tmp_repo: Path, git, commit) -> Path:
    """``main`` plus a ``feature`` branch (checked out) with two commits."""
    git(tmp_repo, "checkout", "-q", "-b", "feature")
    commit(tmp_repo, "a.txt", "alpha\n", "add a")
    commit(tmp_repo, "b.txt", "beta\n", "add b")
    return tmp_repo


class TestExplicitTarget:
    @pytest.mark.asyncio
    async def test_local_range_diff(self, feature_repo: Path):
        out = await DiffxEngine(feature_repo).diff("main..feature")
        assert out.range_kind == "local-range"
        assert (out.left, out.right) == ("main", "feature")
        assert "+alpha" in out.text
        assert "+beta" in out.text

    @pytest.mark.asyncio
    async def test_modes(self, feature_repo: Path):
        engine = DiffxEngine(feature_repo)
        names = await engine.diff("main..feature", OutputMode.NAME_ONLY)
        assert names.text == "a.txt\nb.txt\n"
        stat = await engine.diff("main..feature", "stat")
        assert "2 files changed" in stat.text

    @pytest.mark.asyncio
    async def test_paths_limit_output(self, feature_repo: Path):
        out = await DiffxEngine(feature_repo).diff("main..feature", OutputMode.NAME_ONLY, ["b.txt"])
        assert out.text == "b.txt\n"

    @pytest.mark.asyncio
    async def test_patch_mode_is_unified_diff(self, feature_repo: Path):
        out = await DiffxEngine(feature_repo).diff("main..feature", OutputMode.PATCH)
        assert out.text.startswith("diff --git a/a.txt b/a.txt")
        assert "Subject:" not in out.text
        assert "+beta" in out.text

    @pytest.mark.asyncio
    async def test_invalid_target(self, tmp_repo: Path):
        with pytest.raises(InvalidInputError):
            await DiffxEngine(tmp_repo).diff("not a range")

    @pytest.mark.asyncio
    async def test_missing_ref(self, tmp_repo: Path):
        with pytest.raises(InvalidInputError, match="Right ref does not exist: nope"):
            await DiffxEngine(tmp_repo).diff("main..nope")

    @pytest.mark.asyncio
    async def test_resolved_context(self, feature_repo: Path):
        async with DiffxEngine(feature_repo).resolved("main..feature") as refs:
            assert (refs.left, refs.right) == ("main", "feature")


class TestNoTarget:
    @pytest.mark.asyncio
    async def test_dirty_worktree_against_head(self, tmp_repo: Path):
        (tmp_repo / "README.md").write_text("# Edited\n")
        out = await DiffxEngine(tmp_repo).diff()
        assert out.left == "HEAD"
        assert out.range_kind == "worktree"
        assert "+# Edited" in out.text

    @pytest.mark.asyncio
    async def test_only_untracked_files(self, tmp_repo: Path):
        (tmp_repo / "new.txt").write_text("fresh\n")
        out = await DiffxEngine(tmp_repo).diff()
        assert out.range_kind == "worktree"
        assert "diff --git a/new.txt b/new.txt" in out.text
        assert "new file mode" in out.text
        assert "+fresh" in out.text

    @pytest.mark.asyncio
    async def test_untracked_appended_after_tracked_changes(self, tmp_repo: Path):
        (tmp_repo / "README.md").write_text("# Edited\n")
        (tmp_repo / "new.txt").write_text("fresh\n")
        (tmp_repo / ".gitignore").write_text("*.log\n")
        (tmp_repo / "skip.log").write_text("noise\n")
        out = await DiffxEngine(tmp_repo).diff(None, OutputMode.NAME_ONLY)
        assert out.text.splitlines() == ["README.md", ".gitignore", "new.txt"]

    @pytest.mark.asyncio
    async def test_untracked_respects_paths(self, tmp_repo: Path):
        (tmp_repo / "keep.txt").write_text("k\n")
        (tmp_repo / "drop.txt").write_text("d\n")
        out = await DiffxEngine(tmp_repo).diff(None, OutputMode.NAME_ONLY, ["keep.txt"])
        assert out.text == "keep.txt\n"

    @pytest.mark.asyncio
    async def test_clean_worktree_uses_auto_base(self, feature_repo: Path, git):
        base = git(feature_repo, "rev-parse", "main")
        out = await DiffxEngine(feature_repo).diff(None, OutputMode.NAME_ONLY)
        assert out.range_kind == "auto-base"
        assert out.base_ref == "main"
        assert out.left == base
        assert out.right == "HEAD"
        assert out.text == "a.txt\nb.txt\n"

    @pytest.mark.asyncio
    async def test_clean_worktree_without_base(self, tmp_repo: Path, git):
        git(tmp_repo, "branch", "-M", "solo")
        with pytest.raises(InvalidInputError, match="Could not determine a base branch"):
            await DiffxEngine(tmp_repo).diff()


class TestPlumbingFailures:
    @pytest.mark.asyncio
    async def test_git_failure_surfaces_as_git_error(self, tmp_path: Path):
        # Not a repository: ``git status`` fails
        with pytest.raises(GitError):
            await DiffxEngine(tmp_path).diff()

