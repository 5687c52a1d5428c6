"""Async git plumbing client.

Thin wrapper over the ``git`` binary: every call is one subprocess run in the
repository root with a hard timeout and a non-interactive environment.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from diffx.config import TimeoutConfig
from diffx.errors import GitCommandError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_NAMES = ("main", "master", "develop", "trunk")


@dataclass(frozen=True)
class GitResult:
    argv: list[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitClient:
    """Runs git commands against one repository."""

    def __init__(self, repo_path: str | Path = ".", *, timeouts: TimeoutConfig | None = None) -> None:
        self.repo_path = Path(repo_path).resolve()
        self._timeouts = timeouts or TimeoutConfig()

    # ── Plumbing primitives used by resolvers ────────────────────

    async def fetch_from_url(self, url: str, refspecs: Sequence[str], depth: int) -> None:
        """Shallow-fetch ``refspecs`` from ``url`` without configuring a remote."""
        await self.run(
            ["fetch", "--no-tags", "--depth", str(depth), url, *refspecs],
            timeout=self._timeouts.fetch,
        )

    async def ref_exists_any(self, rev: str) -> bool:
        """True if ``rev`` names any commit-ish: branch, tag, SHA, or rev expression."""
        res = await self.run(["rev-parse", "--verify", "--quiet", rev], check=False)
        return res.ok

    async def merge_base(self, left: str, right: str) -> str:
        res = await self.run(["merge-base", left, right])
        return res.stdout.strip()

    async def delete_refs(self, refs: Iterable[str]) -> None:
        """Delete each ref independently. Missing refs and failures are ignored."""
        for ref in refs:
            try:
                res = await self.run(["update-ref", "-d", ref], check=False)
            except GitCommandError as exc:
                logger.debug("Could not delete %s: %s", ref, exc)
                continue
            if not res.ok:
                logger.debug("Could not delete %s: %s", ref, res.stderr.strip())

    async def get_remotes(self) -> list[str]:
        res = await self.run(["remote"])
        return [line.strip() for line in res.stdout.splitlines() if line.strip()]

    async def get_remote_head_ref(self, remote: str) -> str | None:
        """Short name of ``<remote>/HEAD``'s target (e.g. ``origin/main``), if set."""
        res = await self.run(
            ["symbolic-ref", "--quiet", "--short", f"refs/remotes/{remote}/HEAD"],
            check=False,
        )
        ref = res.stdout.strip()
        return ref if res.ok and ref else None

    async def get_default_branch_ref(self) -> str | None:
        """Best-effort default branch, remote or local.

        Order: each remote's symbolic HEAD (``origin`` first), then the
        conventional branch names per remote, then the same names locally.
        """
        remotes = await self.get_remotes()
        if "origin" in remotes:
            remotes = ["origin", *(r for r in remotes if r != "origin")]

        for remote in remotes:
            head = await self.get_remote_head_ref(remote)
            if head:
                return head

        for remote in remotes:
            for branch in DEFAULT_BRANCH_NAMES:
                ref = f"{remote}/{branch}"
                if await self.ref_exists_any(ref):
                    return ref

        for branch in DEFAULT_BRANCH_NAMES:
            if await self.ref_exists_any(branch):
                return branch

        return None

    # ── Repository state and diff generation ─────────────────────

    async def has_worktree_changes(self) -> bool:
        """True if there are staged, unstaged, or untracked changes."""
        res = await self.run(["status", "--porcelain"])
        return bool(res.stdout.strip())

    async def diff(
        self,
        left: str,
        right: str,
        *,
        flags: Sequence[str] = (),
        paths: Sequence[str] = (),
    ) -> str:
        res = await self.run(["diff", *flags, left, right, "--", *paths])
        return res.stdout

    async def diff_against_worktree(
        self,
        ref: str,
        *,
        flags: Sequence[str] = (),
        paths: Sequence[str] = (),
    ) -> str:
        res = await self.run(["diff", *flags, ref, "--", *paths])
        return res.stdout

    async def untracked_files(self, paths: Sequence[str] = ()) -> list[str]:
        """Untracked files that are not ignored, relative to the repo root."""
        res = await self.run(["ls-files", "-z", "--others", "--exclude-standard", "--", *paths])
        return [name for name in res.stdout.split("\0") if name]

    async def diff_untracked(self, path: str, *, flags: Sequence[str] = ()) -> str:
        """Render an untracked file as an addition against ``/dev/null``."""
        # --no-index exits 1 when the inputs differ
        res = await self.run(["diff", "--no-index", *flags, "--", os.devnull, path], check=False)
        if res.returncode not in (0, 1):
            raise GitCommandError(res.argv, res.returncode, res.stderr)
        return res.stdout

    # ── Process handling ─────────────────────────────────────────

    async def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        check: bool = True,
    ) -> GitResult:
        """Run ``git <args>`` in the repository.

        Raises:
            GitCommandError: if git cannot be spawned, times out, or (with
                ``check``) exits non-zero.
        """
        argv = ["git", *args]
        timeout = timeout if timeout is not None else self._timeouts.git
        logger.debug("Running %s", " ".join(argv))

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.repo_path),
                env=_build_env(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            if not self.repo_path.is_dir():
                raise GitCommandError(argv, 128, f"repository path does not exist: {self.repo_path}") from e
            raise GitCommandError(argv, 127, "git executable not found in PATH.") from e

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise GitCommandError(argv, 124, f"timed out after {timeout}s") from None

        result = GitResult(
            argv=argv,
            stdout=out.decode("utf-8", errors="replace"),
            stderr=err.decode("utf-8", errors="replace"),
            returncode=proc.returncode if proc.returncode is not None else -1,
        )
        if check and not result.ok:
            raise GitCommandError(argv, result.returncode, result.stderr)
        return result


def _build_env() -> dict[str, str]:
    """Environment that keeps git from prompting or paging."""
    env = dict(os.environ)
    env.update(
        {
            "GIT_TERMINAL_PROMPT": "0",
            "GCM_INTERACTIVE": "Never",
            "GIT_PAGER": "cat",
            "LC_ALL": "C",
        }
    )
    return env
