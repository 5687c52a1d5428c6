"""GitHub resolvers: pull requests, PR ranges, commits, PR changes and compare URLs."""

from __future__ import annotations

import logging
from typing import Union

from diffx.core.resolvers.base import (
    ResolveContext,
    TempRefCleanup,
    build_github_url,
    is_commit_sha,
    split_owner_repo,
    staging,
)
from diffx.errors import GitCommandError, GitError, InvalidInputError
from diffx.models.refs import (
    GitHubCommitUrl,
    GitHubCompareUrl,
    GitHubPullRequestChangesUrl,
    GitHubPullRequestUrl,
    PullRequest,
    PullRequestRange,
    PullRequestRef,
    ResolvedRefs,
)

logger = logging.getLogger(__name__)

PullRequestTarget = Union[PullRequestRef, GitHubPullRequestUrl]


async def _fetch_pull_request(pr: PullRequest, prefix: str, ctx: ResolveContext) -> tuple[str, str]:
    """Fetch a PR's head and merge refs under ``prefix``; returns (head, merge)."""
    head = f"{prefix}/pull/{pr.number}/head"
    merge = f"{prefix}/pull/{pr.number}/merge"
    await ctx.client.fetch_from_url(
        build_github_url(pr.owner, pr.repo),
        [
            f"refs/pull/{pr.number}/head:{head}",
            f"refs/pull/{pr.number}/merge:{merge}",
        ],
        ctx.fetch.history_depth,
    )
    return head, merge


async def resolve_pr_refs(ref_range: PullRequestTarget, ctx: ResolveContext) -> ResolvedRefs:
    """Resolve a PR to ``merge^1..merge``.

    The merge ref is the PR merged into its base as of GitHub's last
    computation, so its first parent is the base at that moment. This matches
    the "Files changed" view even when the base branch has moved on since.
    """
    if not isinstance(ref_range, (PullRequestRef, GitHubPullRequestUrl)):
        raise InvalidInputError("Invalid PR ref")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    pr = PullRequest(owner=owner, repo=repo, number=ref_range.pr_number)
    prefix = ctx.allocator.new_prefix()
    refs = [f"{prefix}/pull/{pr.number}/head", f"{prefix}/pull/{pr.number}/merge"]

    logger.debug("Fetching PR %s#%d", pr.owner_repo, pr.number)
    async with staging(ctx.client, refs, "Failed to fetch PR refs"):
        _head, merge = await _fetch_pull_request(pr, prefix, ctx)

    return ResolvedRefs(left=f"{merge}^1", right=merge, cleanup=TempRefCleanup(ctx.client, refs))


async def resolve_pr_range_refs(ref_range: PullRequestRange, ctx: ResolveContext) -> ResolvedRefs:
    """Diff the heads of two pull requests."""
    if not isinstance(ref_range, PullRequestRange):
        raise InvalidInputError("Invalid PR range")

    prefix = ctx.allocator.new_prefix()
    left_prefix = f"{prefix}/left"
    right_prefix = f"{prefix}/right"
    refs = [
        f"{left_prefix}/pull/{ref_range.left_pr.number}/head",
        f"{left_prefix}/pull/{ref_range.left_pr.number}/merge",
        f"{right_prefix}/pull/{ref_range.right_pr.number}/head",
        f"{right_prefix}/pull/{ref_range.right_pr.number}/merge",
    ]

    async with staging(ctx.client, refs, "Failed to fetch PR range refs"):
        left_head, _ = await _fetch_pull_request(ref_range.left_pr, left_prefix, ctx)
        right_head, _ = await _fetch_pull_request(ref_range.right_pr, right_prefix, ctx)

    return ResolvedRefs(left=left_head, right=right_head, cleanup=TempRefCleanup(ctx.client, refs))


async def resolve_github_commit_refs(ref_range: GitHubCommitUrl, ctx: ResolveContext) -> ResolvedRefs:
    """Show one commit: ``commit^..commit``."""
    if not isinstance(ref_range, GitHubCommitUrl) or not ref_range.commit_sha:
        raise InvalidInputError("Invalid GitHub commit URL")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    commit_ref = f"{ctx.allocator.new_prefix()}/commit/{ref_range.commit_sha}"

    async with staging(ctx.client, [commit_ref], "Failed to fetch commit refs"):
        await ctx.client.fetch_from_url(
            build_github_url(owner, repo),
            [f"{ref_range.commit_sha}:{commit_ref}"],
            ctx.fetch.history_depth,
        )

    return ResolvedRefs(
        left=f"{commit_ref}^",
        right=commit_ref,
        cleanup=TempRefCleanup(ctx.client, [commit_ref]),
    )


async def resolve_github_pr_changes_refs(
    ref_range: GitHubPullRequestChangesUrl, ctx: ResolveContext
) -> ResolvedRefs:
    """Diff the two commits named in the URL, as given."""
    if (
        not isinstance(ref_range, GitHubPullRequestChangesUrl)
        or not ref_range.left_commit_sha
        or not ref_range.right_commit_sha
    ):
        raise InvalidInputError("Invalid GitHub PR changes URL")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    prefix = ctx.allocator.new_prefix()
    left_ref = f"{prefix}/left-commit/{ref_range.left_commit_sha}"
    right_ref = f"{prefix}/right-commit/{ref_range.right_commit_sha}"

    async with staging(ctx.client, [left_ref, right_ref], "Failed to fetch PR changes refs"):
        await ctx.client.fetch_from_url(
            build_github_url(owner, repo),
            [
                f"{ref_range.left_commit_sha}:{left_ref}",
                f"{ref_range.right_commit_sha}:{right_ref}",
            ],
            ctx.fetch.history_depth,
        )

    return ResolvedRefs(
        left=left_ref,
        right=right_ref,
        cleanup=TempRefCleanup(ctx.client, [left_ref, right_ref]),
    )


def _candidate_refspecs(ref: str, dest: str) -> list[str]:
    """SHA-looking refs are fetched directly; names try branches, then tags."""
    if is_commit_sha(ref):
        return [f"{ref}:{dest}"]
    return [f"refs/heads/{ref}:{dest}", f"refs/tags/{ref}:{dest}"]


async def _fetch_first(url: str, ref: str, dest: str, ctx: ResolveContext) -> str:
    """Fetch the first candidate refspec that exists; returns it.

    The error from the last candidate propagates when none can be fetched.
    """
    *fallbacks, last = _candidate_refspecs(ref, dest)
    for refspec in fallbacks:
        try:
            await ctx.client.fetch_from_url(url, [refspec], ctx.fetch.shallow_depth)
            return refspec
        except GitCommandError as exc:
            logger.debug("Refspec %s not available from %s: %s", refspec, url, exc)
    await ctx.client.fetch_from_url(url, [last], ctx.fetch.shallow_depth)
    return last


async def _try_merge_base(ctx: ResolveContext, left: str, right: str) -> str | None:
    try:
        merge_base = await ctx.client.merge_base(left, right)
    except GitCommandError as exc:
        logger.debug("No merge base yet for %s and %s: %s", left, right, exc)
        return None
    return merge_base or None


async def resolve_github_compare_refs(ref_range: GitHubCompareUrl, ctx: ResolveContext) -> ResolvedRefs:
    """Resolve a compare URL with three-dot semantics: ``merge-base..right``.

    The right side may live in another fork. Refs are fetched shallow first;
    if that history has no merge base, both refspecs are re-fetched once at
    ``merge_base_deepen_depth`` before giving up.
    """
    if not isinstance(ref_range, GitHubCompareUrl) or not ref_range.left_ref or not ref_range.right_ref:
        raise InvalidInputError("Invalid GitHub compare URL")

    owner, repo = split_owner_repo(ref_range.owner_repo)
    left_url = build_github_url(owner, repo)
    right_url = build_github_url(ref_range.right_owner or owner, ref_range.right_repo or repo)

    prefix = ctx.allocator.new_prefix()
    left_ref = f"{prefix}/left/{ref_range.left_ref}"
    right_ref = f"{prefix}/right/{ref_range.right_ref}"
    refs = [left_ref, right_ref]

    async with staging(ctx.client, refs, "Failed to fetch compare refs"):
        left_spec = await _fetch_first(left_url, ref_range.left_ref, left_ref, ctx)
        right_spec = await _fetch_first(right_url, ref_range.right_ref, right_ref, ctx)

        merge_base = await _try_merge_base(ctx, left_ref, right_ref)
        if merge_base is None:
            depth = ctx.fetch.merge_base_deepen_depth
            logger.debug("Deepening compare fetch to %d commits", depth)
            await ctx.client.fetch_from_url(left_url, [left_spec], depth)
            await ctx.client.fetch_from_url(right_url, [right_spec], depth)
            merge_base = await _try_merge_base(ctx, left_ref, right_ref)

    if merge_base is None:
        await ctx.client.delete_refs(refs)
        raise GitError(
            f"Failed to determine merge base for {ref_range.left_ref}...{ref_range.right_ref} "
            f"within {ctx.fetch.merge_base_deepen_depth} commits"
        )

    return ResolvedRefs(left=merge_base, right=right_ref, cleanup=TempRefCleanup(ctx.client, refs))
