"""Resolvers for refs living in another repository: owner/repo shorthand and git URLs."""

from __future__ import annotations

import logging
import re

from diffx.core.resolvers.base import (
    ResolveContext,
    TempRefCleanup,
    build_github_url,
    split_owner_repo,
    staging,
)
from diffx.errors import InvalidInputError
from diffx.models.refs import GitUrlRange, RemoteRange, ResolvedRefs

logger = logging.getLogger(__name__)

_REMOTE_SIDE_RE = re.compile(r"^([^/]+/[^@]+)@(.+)$")


async def resolve_remote_refs(ref_range: RemoteRange, ctx: ResolveContext) -> ResolvedRefs:
    """Fetch ``owner/repo@left`` and ``owner/repo@right`` from GitHub into temp refs."""
    if not isinstance(ref_range, RemoteRange) or not ref_range.owner_repo:
        raise InvalidInputError("Invalid ref type for remote resolver")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    left_ref = _remote_side_ref(ref_range.left, ref_range.owner_repo)
    right_ref = _remote_side_ref(ref_range.right, ref_range.owner_repo)

    url = build_github_url(owner, repo)
    prefix = ctx.allocator.new_prefix()
    left_dest = f"{prefix}/left"
    right_dest = f"{prefix}/right"

    logger.debug("Fetching %s and %s from %s", left_ref, right_ref, url)
    async with staging(ctx.client, [left_dest, right_dest], "Failed to fetch remote refs"):
        await ctx.client.fetch_from_url(
            url,
            [f"{left_ref}:{left_dest}", f"{right_ref}:{right_dest}"],
            ctx.fetch.shallow_depth,
        )

    return ResolvedRefs(
        left=left_dest,
        right=right_dest,
        cleanup=TempRefCleanup(ctx.client, [left_dest, right_dest]),
    )


async def resolve_git_url_refs(ref_range: GitUrlRange, ctx: ResolveContext) -> ResolvedRefs:
    """Fetch refs from arbitrary git URLs; one network call when both URLs match."""
    if not isinstance(ref_range, GitUrlRange) or not ref_range.left_git_url or not ref_range.right_git_url:
        raise InvalidInputError("Invalid ref type for git URL resolver")

    prefix = ctx.allocator.new_prefix()
    left_dest = f"{prefix}/left"
    right_dest = f"{prefix}/right"
    left_spec = f"{ref_range.left}:{left_dest}"
    right_spec = f"{ref_range.right}:{right_dest}"
    depth = ctx.fetch.shallow_depth

    async with staging(ctx.client, [left_dest, right_dest], "Failed to fetch refs from git URL"):
        if ref_range.left_git_url == ref_range.right_git_url:
            await ctx.client.fetch_from_url(ref_range.left_git_url, [left_spec, right_spec], depth)
        else:
            await ctx.client.fetch_from_url(ref_range.left_git_url, [left_spec], depth)
            await ctx.client.fetch_from_url(ref_range.right_git_url, [right_spec], depth)

    return ResolvedRefs(
        left=left_dest,
        right=right_dest,
        cleanup=TempRefCleanup(ctx.client, [left_dest, right_dest]),
    )


def _remote_side_ref(side: str, owner_repo: str) -> str:
    m = _REMOTE_SIDE_RE.match(side)
    if not m:
        raise InvalidInputError(f"Invalid remote ref format: {side}")
    if m.group(1) != owner_repo:
        raise InvalidInputError(
            f"Remote refs must name the same repository: {side} is not in {owner_repo}"
        )
    return m.group(2)
