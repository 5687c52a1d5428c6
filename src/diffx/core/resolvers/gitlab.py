"""GitLab merge request resolver."""

from __future__ import annotations

import logging

from diffx.core.resolvers.base import (
    ResolveContext,
    TempRefCleanup,
    build_gitlab_url,
    split_owner_repo,
    staging,
)
from diffx.errors import InvalidInputError
from diffx.models.refs import GitLabMergeRequestRef, ResolvedRefs

logger = logging.getLogger(__name__)


async def resolve_gitlab_mr_refs(ref_range: GitLabMergeRequestRef, ctx: ResolveContext) -> ResolvedRefs:
    """Resolve an MR to ``merge^1..merge``, same shape as a GitHub PR."""
    if not isinstance(ref_range, GitLabMergeRequestRef):
        raise InvalidInputError("Invalid GitLab MR ref")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    number = ref_range.mr_number
    prefix = ctx.allocator.new_prefix()
    head = f"{prefix}/merge-requests/{number}/head"
    merge = f"{prefix}/merge-requests/{number}/merge"

    logger.debug("Fetching MR %s!%d", ref_range.owner_repo, number)
    async with staging(ctx.client, [head, merge], "Failed to fetch GitLab MR refs"):
        await ctx.client.fetch_from_url(
            build_gitlab_url(owner, repo),
            [
                f"refs/merge-requests/{number}/head:{head}",
                f"refs/merge-requests/{number}/merge:{merge}",
            ],
            ctx.fetch.history_depth,
        )

    return ResolvedRefs(left=f"{merge}^1", right=merge, cleanup=TempRefCleanup(ctx.client, [head, merge]))
