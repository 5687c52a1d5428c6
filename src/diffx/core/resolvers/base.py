"""Shared pieces for resolvers: context, temp ref cleanup, URL helpers."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Iterable

from diffx.config import DiffxConfig, FetchConfig
from diffx.core.git_client import GitClient
from diffx.core.temp_refs import TempRefAllocator
from diffx.errors import GitCommandError, GitError, InvalidInputError
from diffx.models.refs import ResolvedRefs

logger = logging.getLogger(__name__)

_COMMIT_SHA_RE = re.compile(r"^[a-f0-9]{7,40}$", re.IGNORECASE)
_BRANCH_OR_TAG_PREFIX_RE = re.compile(r"^refs/(heads|tags)/")


@dataclass
class ResolveContext:
    """Collaborators a resolver needs: git plumbing, temp refs, fetch depths."""

    client: GitClient
    allocator: TempRefAllocator = field(default_factory=TempRefAllocator)
    fetch: FetchConfig = field(default_factory=FetchConfig)

    @classmethod
    def from_config(cls, repo_path: str | Path, config: DiffxConfig) -> ResolveContext:
        return cls(
            client=GitClient(repo_path, timeouts=config.timeouts),
            allocator=TempRefAllocator(root=config.fetch.temp_ref_root),
            fetch=config.fetch,
        )


class TempRefCleanup:
    """Deletes a fixed set of temp refs. Idempotent and never raises."""

    def __init__(self, client: GitClient, refs: Iterable[str]) -> None:
        self._client = client
        self.refs = tuple(refs)
        self._done = False

    async def __call__(self) -> None:
        if self._done:
            return
        self._done = True
        try:
            await self._client.delete_refs(self.refs)
        except Exception:
            logger.debug("Temp ref cleanup failed for %s", self.refs, exc_info=True)


async def run_cleanup(refs: ResolvedRefs) -> None:
    """Invoke ``refs.cleanup`` if present, discarding any error."""
    if refs.cleanup is None:
        return
    try:
        await refs.cleanup()
    except Exception:
        logger.debug("Ignoring cleanup error", exc_info=True)


@asynccontextmanager
async def staging(client: GitClient, refs: Iterable[str], failure: str) -> AsyncIterator[None]:
    """Wrap fetches into temp refs.

    A plumbing failure deletes whatever was staged and is re-raised as
    ``GitError("<failure>: <git message>")``.
    """
    refs = tuple(refs)
    try:
        yield
    except GitCommandError as exc:
        await client.delete_refs(refs)
        raise GitError(f"{failure}: {exc}") from exc


def build_github_url(owner: str, repo: str) -> str:
    return f"https://github.com/{owner}/{repo}.git"


def build_gitlab_url(owner: str, repo: str) -> str:
    return f"git@gitlab.com:{owner}/{repo}.git"


def split_owner_repo(owner_repo: str) -> tuple[str, str]:
    owner, _, repo = owner_repo.partition("/")
    if not owner or not repo:
        raise InvalidInputError(f"Invalid owner/repo: {owner_repo}")
    return owner, repo


def normalize_ref(ref: str) -> str:
    """Drop a leading ``refs/heads/`` or ``refs/tags/``."""
    return _BRANCH_OR_TAG_PREFIX_RE.sub("", ref)


def is_commit_sha(ref: str) -> bool:
    """True for 7-40 hex characters (abbreviated or full SHA)."""
    return bool(_COMMIT_SHA_RE.match(ref))
