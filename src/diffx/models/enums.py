"""Enums used across the diffx system."""

from __future__ import annotations

from enum import Enum, IntEnum


class RefType(str, Enum):
    """Tag of a parsed range variant."""

    LOCAL_RANGE = "local-range"
    REMOTE_RANGE = "remote-range"
    PR_REF = "pr-ref"
    GITHUB_URL = "github-url"
    PR_RANGE = "pr-range"
    GIT_URL_RANGE = "git-url-range"
    GITHUB_COMMIT_URL = "github-commit-url"
    GITHUB_PR_CHANGES_URL = "github-pr-changes-url"
    GITHUB_COMPARE_URL = "github-compare-url"
    GITLAB_MR_REF = "gitlab-mr-ref"


class ErrorKind(str, Enum):
    """Category of a failure surfaced to the caller."""

    INVALID_INPUT = "invalid-input"
    GIT_ERROR = "git-error"


class ExitCode(IntEnum):
    """Process exit codes for the CLI."""

    SUCCESS = 0
    INVALID_INPUT = 2
    GIT_ERROR = 3

    @classmethod
    def from_kind(cls, kind: ErrorKind) -> ExitCode:
        if kind == ErrorKind.INVALID_INPUT:
            return cls.INVALID_INPUT
        return cls.GIT_ERROR


class OutputMode(str, Enum):
    """What the diff generator emits for a resolved range."""

    DIFF = "diff"
    PATCH = "patch"
    STAT = "stat"
    NUMSTAT = "numstat"
    SHORTSTAT = "shortstat"
    NAME_ONLY = "name-only"
    NAME_STATUS = "name-status"
    SUMMARY = "summary"

    @property
    def git_flags(self) -> list[str]:
        """Extra ``git diff`` flags for this mode."""
        if self in (OutputMode.DIFF, OutputMode.PATCH):
            return []
        return [f"--{self.value}"]
