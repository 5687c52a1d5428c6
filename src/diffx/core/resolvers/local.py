"""Local ref resolver: branches, tags, SHAs and rev expressions already in the repo."""

from __future__ import annotations

from diffx.core.resolvers.base import ResolveContext, normalize_ref
from diffx.errors import InvalidInputError
from diffx.models.refs import LocalRange, ResolvedRefs


async def resolve_local_refs(ref_range: LocalRange, ctx: ResolveContext) -> ResolvedRefs:
    """Validate both sides exist locally. No fetch, no cleanup."""
    if not isinstance(ref_range, LocalRange):
        raise InvalidInputError("Invalid ref type for local resolver")

    left = normalize_ref(ref_range.left)
    right = normalize_ref(ref_range.right)

    if not await ctx.client.ref_exists_any(left):
        raise InvalidInputError(f"Left ref does not exist: {ref_range.left}")
    if not await ctx.client.ref_exists_any(right):
        raise InvalidInputError(f"Right ref does not exist: {ref_range.right}")

    return ResolvedRefs(left=left, right=right)
