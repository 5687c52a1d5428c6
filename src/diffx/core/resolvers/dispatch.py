"""Resolver dispatch: one handler per RefRange kind."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from diffx.core.resolvers.base import ResolveContext, run_cleanup
from diffx.core.resolvers.github import (
    resolve_github_commit_refs,
    resolve_github_compare_refs,
    resolve_github_pr_changes_refs,
    resolve_pr_range_refs,
    resolve_pr_refs,
)
from diffx.core.resolvers.gitlab import resolve_gitlab_mr_refs
from diffx.core.resolvers.local import resolve_local_refs
from diffx.core.resolvers.remote import resolve_git_url_refs, resolve_remote_refs
from diffx.models.enums import RefType
from diffx.models.refs import RefRange, ResolvedRefs

Resolver = Callable[[RefRange, ResolveContext], Awaitable[ResolvedRefs]]

RESOLVERS: dict[RefType, Resolver] = {
    RefType.LOCAL_RANGE: resolve_local_refs,
    RefType.REMOTE_RANGE: resolve_remote_refs,
    RefType.PR_REF: resolve_pr_refs,
    RefType.GITHUB_URL: resolve_pr_refs,
    RefType.PR_RANGE: resolve_pr_range_refs,
    RefType.GIT_URL_RANGE: resolve_git_url_refs,
    RefType.GITHUB_COMMIT_URL: resolve_github_commit_refs,
    RefType.GITHUB_PR_CHANGES_URL: resolve_github_pr_changes_refs,
    RefType.GITHUB_COMPARE_URL: resolve_github_compare_refs,
    RefType.GITLAB_MR_REF: resolve_gitlab_mr_refs,
}  # type: ignore[dict-item]

_missing = set(RefType) - set(RESOLVERS)
if _missing:
    raise RuntimeError(f"No resolver registered for: {sorted(t.value for t in _missing)}")


async def resolve_refs(ref_range: RefRange, ctx: ResolveContext) -> ResolvedRefs:
    """Resolve any parsed range to two revisions."""
    return await RESOLVERS[ref_range.kind](ref_range, ctx)


@asynccontextmanager
async def resolved_refs(ref_range: RefRange, ctx: ResolveContext) -> AsyncIterator[ResolvedRefs]:
    """Resolve, yield the refs, and always run their cleanup afterwards."""
    refs = await resolve_refs(ref_range, ctx)
    try:
        yield refs
    finally:
        await run_cleanup(refs)
