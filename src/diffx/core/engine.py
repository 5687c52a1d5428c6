"""DiffxEngine — parse, resolve, diff, clean up."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Sequence

from diffx.config import DiffxConfig
from diffx.core.git_client import GitClient
from diffx.core.range_parser import parse_range
from diffx.core.resolvers.auto_base import resolve_auto_base_refs
from diffx.core.resolvers.base import ResolveContext
from diffx.core.resolvers.dispatch import resolved_refs
from diffx.errors import GitCommandError, GitError
from diffx.models.enums import OutputMode
from diffx.models.refs import AutoBaseRefs, ResolvedRefs

logger = logging.getLogger(__name__)

WORKTREE = "worktree"


@dataclass(frozen=True)
class DiffOutput:
    """Rendered diff plus how the endpoints were chosen."""

    text: str
    left: str
    right: str
    range_kind: str
    base_ref: str | None = None


class DiffxEngine:
    """Runs one diff target through the parse → resolve → diff pipeline.

    With no target, a dirty worktree (untracked files included) is diffed
    against HEAD; a clean one is diffed from its merge base with the default
    branch.
    """

    def __init__(
        self,
        repo_path: str | Path = ".",
        *,
        config: DiffxConfig | None = None,
        ctx: ResolveContext | None = None,
    ):
        self.repo_path = Path(repo_path).resolve()
        self._config = config or DiffxConfig()
        self._ctx = ctx or ResolveContext.from_config(self.repo_path, self._config)

    @property
    def client(self) -> GitClient:
        return self._ctx.client

    async def auto_base(self) -> AutoBaseRefs:
        """Infer the base branch for HEAD; see ``resolve_auto_base_refs``."""
        return await resolve_auto_base_refs(self._ctx)

    @asynccontextmanager
    async def resolved(self, target: str) -> AsyncIterator[ResolvedRefs]:
        """Parse and resolve ``target``; temp refs are removed on exit."""
        ref_range = parse_range(target)
        async with resolved_refs(ref_range, self._ctx) as refs:
            yield refs

    async def diff(
        self,
        target: str | None = None,
        mode: OutputMode | str = OutputMode.DIFF,
        paths: Sequence[str] = (),
    ) -> DiffOutput:
        mode = OutputMode(mode)
        flags = mode.git_flags

        try:
            if target:
                ref_range = parse_range(target)
                async with resolved_refs(ref_range, self._ctx) as refs:
                    text = await self.client.diff(refs.left, refs.right, flags=flags, paths=paths)
                    return DiffOutput(text, refs.left, refs.right, ref_range.kind.value)

            if await self.client.has_worktree_changes():
                logger.debug("Worktree is dirty, diffing against HEAD")
                text = await self.client.diff_against_worktree("HEAD", flags=flags, paths=paths)
                text += await self._untracked_output(flags, paths)
                return DiffOutput(text, "HEAD", WORKTREE, WORKTREE)

            auto = await self.auto_base()
            text = await self.client.diff(auto.left, auto.right, flags=flags, paths=paths)
            return DiffOutput(text, auto.left, auto.right, "auto-base", base_ref=auto.base_ref)
        except GitCommandError as exc:
            raise GitError(str(exc)) from exc

    async def _untracked_output(self, flags: Sequence[str], paths: Sequence[str]) -> str:
        """Untracked files rendered as additions, in ``ls-files`` order."""
        untracked = await self.client.untracked_files(paths)
        if untracked:
            logger.debug("Appending %d untracked file(s)", len(untracked))
        chunks = [await self.client.diff_untracked(name, flags=flags) for name in untracked]
        return "".join(chunks)
