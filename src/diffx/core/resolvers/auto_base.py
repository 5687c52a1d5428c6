"""Auto-base resolver: diff HEAD against the merge base with the default branch."""

from __future__ import annotations

import logging

from diffx.core.resolvers.base import ResolveContext
from diffx.errors import GitCommandError, InvalidInputError
from diffx.models.refs import AutoBaseRefs

logger = logging.getLogger(__name__)


async def resolve_auto_base_refs(ctx: ResolveContext) -> AutoBaseRefs:
    """Infer the base branch and return ``merge_base..HEAD``.

    Raises:
        InvalidInputError: no default branch could be found, or it shares no
            history with HEAD. The message suggests an explicit range.
    """
    base_ref = await ctx.client.get_default_branch_ref()
    if not base_ref:
        raise InvalidInputError(
            "Could not determine a base branch automatically. "
            "Provide an explicit range (e.g., main..HEAD)."
        )

    try:
        merge_base = await ctx.client.merge_base(base_ref, "HEAD")
    except GitCommandError as exc:
        logger.debug("merge-base %s HEAD failed: %s", base_ref, exc)
        merge_base = ""

    if not merge_base:
        raise InvalidInputError(
            f"Could not find a merge base with {base_ref}. "
            f"Provide an explicit range (e.g., {base_ref}..HEAD)."
        )

    logger.debug("Auto base %s at %s", base_ref, merge_base)
    return AutoBaseRefs(left=merge_base, right="HEAD", base_ref=base_ref, merge_base=merge_base)
