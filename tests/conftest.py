"""Shared test fixtures for diffx."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from diffx.config import FetchConfig
from diffx.core.git_client import GitClient
from diffx.core.resolvers.base import ResolveContext
from diffx.core.temp_refs import TempRefAllocator


def _git(repo_path: Path, *args: str) -> str:
    """Run a git command in the given repo, raising on failure."""
    proc = subprocess.run(
        ["git", *args],
        cwd=str(repo_path),
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def _init_repo(path: Path) -> Path:
    _git(path, "init", "-q")
    _git(path, "config", "user.email", "test@test.com")
    _git(path, "config", "user.name", "Test")
    _git(path, "config", "commit.gpgsign", "false")
    (path / "README.md").write_text("# Test Repo\n")
    _git(path, "add", "-A")
    _git(path, "commit", "-q", "-m", "init")
    _git(path, "branch", "-M", "main")
    return path


def _commit(repo_path: Path, name: str, content: str, message: str) -> str:
    """Write a file, commit it, and return the new HEAD sha."""
    (repo_path / name).write_text(content)
    _git(repo_path, "add", "-A")
    _git(repo_path, "commit", "-q", "-m", message)
    return _git(repo_path, "rev-parse", "HEAD")


@pytest.fixture
def git():
    """The ``_git`` helper, for tests outside this module."""
    return _git


@pytest.fixture
def commit():
    """The ``_commit`` helper, for tests outside this module."""
    return _commit


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one commit on ``main``."""
    return _init_repo(tmp_path)


@pytest.fixture
def upstream_repo(tmp_path_factory) -> Path:
    """A second repository to fetch from over ``file://``."""
    return _init_repo(tmp_path_factory.mktemp("upstream"))


@pytest.fixture
def fixed_allocator() -> TempRefAllocator:
    """Allocator with a pinned clock and random source."""
    return TempRefAllocator(clock=lambda: 1.0, random_bytes=lambda n: b"\x00" * n)


@pytest.fixture
def temp_prefix() -> str:
    """Prefix produced by ``fixed_allocator``: base36(1000) == "rs"."""
    return "refs/diffx/tmp/rs-0000000000000000"


@pytest.fixture
def fake_client() -> MagicMock:
    """A GitClient stand-in whose plumbing calls all succeed."""
    client = MagicMock(spec=GitClient)
    client.fetch_from_url = AsyncMock(return_value=None)
    client.ref_exists_any = AsyncMock(return_value=True)
    client.merge_base = AsyncMock(return_value="base0000sha")
    client.delete_refs = AsyncMock(return_value=None)
    client.get_default_branch_ref = AsyncMock(return_value="origin/main")
    client.get_remote_head_ref = AsyncMock(return_value=None)
    client.get_remotes = AsyncMock(return_value=["origin"])
    return client


@pytest.fixture
def ctx(fake_client: MagicMock, fixed_allocator: TempRefAllocator) -> ResolveContext:
    return ResolveContext(client=fake_client, allocator=fixed_allocator, fetch=FetchConfig())
