"""Tests for the local ref resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from diffx.core.git_client import GitClient
from diffx.core.resolvers.base import ResolveContext
from diffx.core.resolvers.local import resolve_local_refs
from diffx.errors import InvalidInputError
from diffx.models.refs import LocalRange, PullRequestRef


class TestResolveLocalRefs:
    @pytest.mark.asyncio
    async def test_same_ref_twice(self, ctx):
        refs = await resolve_local_refs(LocalRange("main", "main"), ctx)
        assert (refs.left, refs.right) == ("main", "main")
        assert refs.cleanup is None

    @pytest.mark.asyncio
    async def test_strips_branch_and_tag_prefixes(self, ctx, fake_client):
        refs = await resolve_local_refs(LocalRange("refs/heads/main", "refs/tags/v1"), ctx)
        assert (refs.left, refs.right) == ("main", "v1")
        fake_client.ref_exists_any.assert_any_await("main")
        fake_client.ref_exists_any.assert_any_await("v1")

    @pytest.mark.asyncio
    async def test_missing_left_named(self, ctx, fake_client):
        fake_client.ref_exists_any.side_effect = lambda rev: rev != "gone"
        with pytest.raises(InvalidInputError, match="Left ref does not exist: gone"):
            await resolve_local_refs(LocalRange("gone", "main"), ctx)

    @pytest.mark.asyncio
    async def test_missing_right_named(self, ctx, fake_client):
        fake_client.ref_exists_any.side_effect = lambda rev: rev != "gone"
        with pytest.raises(InvalidInputError, match="Right ref does not exist: gone"):
            await resolve_local_refs(LocalRange("main", "gone"), ctx)

    @pytest.mark.asyncio
    async def test_both_missing_reports_left(self, ctx, fake_client):
        fake_client.ref_exists_any.return_value = False
        with pytest.raises(InvalidInputError, match="Left ref"):
            await resolve_local_refs(LocalRange("a", "b"), ctx)

    @pytest.mark.asyncio
    async def test_wrong_variant(self, ctx):
        with pytest.raises(InvalidInputError):
            await resolve_local_refs(PullRequestRef("o/r", 1), ctx)

    @pytest.mark.asyncio
    async def test_real_repo_rev_expressions(self, tmp_repo: Path, commit):
        commit(tmp_repo, "a.txt", "a\n", "second")
        ctx = ResolveContext(client=GitClient(tmp_repo))
        refs = await resolve_local_refs(LocalRange("HEAD~1", "HEAD"), ctx)
        assert (refs.left, refs.right) == ("HEAD~1", "HEAD")
