"""Tests for the remote shorthand and git URL resolvers."""

from __future__ import annotations

from pathlib import Path

import pytest

from diffx.core.git_client import GitClient
from diffx.core.range_parser import parse_range
from diffx.core.resolvers.base import ResolveContext
from diffx.core.resolvers.remote import resolve_git_url_refs, resolve_remote_refs
from diffx.errors import GitCommandError, GitError, InvalidInputError
from diffx.models.refs import GitUrlRange, RemoteRange


class TestResolveRemoteRefs:
    @pytest.mark.asyncio
    async def test_end_to_end_from_parse(self, ctx, fake_client, temp_prefix):
        ref_range = parse_range("owner/repo@v1.0..owner/repo@v2.0")
        assert ref_range.owner_repo == "owner/repo"

        refs = await resolve_remote_refs(ref_range, ctx)

        left_ref, right_ref = f"{temp_prefix}/left", f"{temp_prefix}/right"
        assert (refs.left, refs.right) == (left_ref, right_ref)
        fake_client.fetch_from_url.assert_awaited_once_with(
            "https://github.com/owner/repo.git",
            [f"v1.0:{left_ref}", f"v2.0:{right_ref}"],
            1,
        )

        await refs.cleanup()
        fake_client.delete_refs.assert_awaited_once()
        assert list(fake_client.delete_refs.await_args.args[0]) == [left_ref, right_ref]

    @pytest.mark.asyncio
    async def test_malformed_side(self, ctx, fake_client):
        with pytest.raises(InvalidInputError, match="Invalid remote ref format"):
            await resolve_remote_refs(RemoteRange("owner/repo", "v1", "owner/repo@v2"), ctx)
        fake_client.fetch_from_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repository_mismatch(self, ctx):
        with pytest.raises(InvalidInputError):
            await resolve_remote_refs(RemoteRange("owner/repo", "owner/repo@v1", "other/repo@v2"), ctx)

    @pytest.mark.asyncio
    async def test_fetch_failure_wraps_git_message(self, ctx, fake_client, temp_prefix):
        fake_client.fetch_from_url.side_effect = GitCommandError(
            ["git", "fetch"], 128, "fatal: couldn't find remote ref v9"
        )
        with pytest.raises(GitError) as exc_info:
            await resolve_remote_refs(RemoteRange("o/r", "o/r@v1", "o/r@v9"), ctx)
        assert str(exc_info.value).startswith("Failed to fetch remote refs: ")
        assert "couldn't find remote ref v9" in str(exc_info.value)
        fake_client.delete_refs.assert_awaited_once()
        assert set(fake_client.delete_refs.await_args.args[0]) == {
            f"{temp_prefix}/left",
            f"{temp_prefix}/right",
        }


class TestResolveGitUrlRefs:
    @pytest.mark.asyncio
    async def test_same_url_single_fetch(self, ctx, fake_client, temp_prefix):
        url = "git@github.com:o/r.git"
        refs = await resolve_git_url_refs(GitUrlRange(url, url, "main", "dev"), ctx)
        fake_client.fetch_from_url.assert_awaited_once_with(
            url, [f"main:{temp_prefix}/left", f"dev:{temp_prefix}/right"], 1
        )
        assert refs.cleanup is not None

    @pytest.mark.asyncio
    async def test_different_urls_two_fetches(self, ctx, fake_client, temp_prefix):
        await resolve_git_url_refs(GitUrlRange("https://a/x.git", "https://b/y.git", "main", "dev"), ctx)
        calls = fake_client.fetch_from_url.await_args_list
        assert [c.args for c in calls] == [
            ("https://a/x.git", [f"main:{temp_prefix}/left"], 1),
            ("https://b/y.git", [f"dev:{temp_prefix}/right"], 1),
        ]

    @pytest.mark.asyncio
    async def test_failure_is_git_error(self, ctx, fake_client):
        fake_client.fetch_from_url.side_effect = GitCommandError(["git", "fetch"], 128, "unreachable")
        with pytest.raises(GitError, match="Failed to fetch refs from git URL: .*unreachable"):
            await resolve_git_url_refs(GitUrlRange("https://a/x.git", "https://a/x.git", "m", "d"), ctx)

    @pytest.mark.asyncio
    async def test_real_fetch_over_file_url(self, tmp_repo: Path, upstream_repo: Path, git, commit):
        first = git(upstream_repo, "rev-parse", "HEAD")
        git(upstream_repo, "tag", "v1")
        second = commit(upstream_repo, "b.txt", "b\n", "second")

        client = GitClient(tmp_repo)
        url = upstream_repo.as_uri()
        refs = await resolve_git_url_refs(GitUrlRange(url, url, "v1", "main"), ResolveContext(client=client))

        assert git(tmp_repo, "rev-parse", refs.left) == first
        assert git(tmp_repo, "rev-parse", refs.right) == second
        assert "+b" in await client.diff(refs.left, refs.right)

        await refs.cleanup()
        assert not await client.ref_exists_any(refs.left)
        assert not await client.ref_exists_any(refs.right)
