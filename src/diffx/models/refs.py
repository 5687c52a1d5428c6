"""Data models for parsed diff targets and their resolution."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, ClassVar, Optional, Union

from diffx.models.enums import RefType


# ── Parsed range variants ────────────────────────────────────────


@dataclass(frozen=True)
class PullRequest:
    """A pull request on a GitHub repository."""

    owner: str
    repo: str
    number: int

    @property
    def owner_repo(self) -> str:
        return f"{self.owner}/{self.repo}"


class _RangeBase:
    kind: ClassVar[RefType]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)  # type: ignore[call-overload]
        return {"type": self.kind.value, **data}


@dataclass(frozen=True)
class LocalRange(_RangeBase):
    """``left..right`` against the local repository."""

    kind: ClassVar[RefType] = RefType.LOCAL_RANGE

    left: str
    right: str


@dataclass(frozen=True)
class RemoteRange(_RangeBase):
    """``owner/repo@left..owner/repo@right``; sides keep their ``owner/repo@`` prefix."""

    kind: ClassVar[RefType] = RefType.REMOTE_RANGE

    owner_repo: str
    left: str
    right: str


@dataclass(frozen=True)
class PullRequestRef(_RangeBase):
    """``github:owner/repo#N``."""

    kind: ClassVar[RefType] = RefType.PR_REF

    owner_repo: str
    pr_number: int
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class GitHubPullRequestUrl(_RangeBase):
    """``https://github.com/owner/repo/pull/N``."""

    kind: ClassVar[RefType] = RefType.GITHUB_URL

    owner_repo: str
    pr_number: int
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class PullRequestRange(_RangeBase):
    """Two pull requests joined by ``..``; their heads are diffed."""

    kind: ClassVar[RefType] = RefType.PR_RANGE

    left_pr: PullRequest
    right_pr: PullRequest
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class GitUrlRange(_RangeBase):
    """Refs on arbitrary git URLs (SSH or HTTPS, any host)."""

    kind: ClassVar[RefType] = RefType.GIT_URL_RANGE

    left_git_url: str
    right_git_url: str
    left: str
    right: str


@dataclass(frozen=True)
class GitHubCommitUrl(_RangeBase):
    """``https://github.com/owner/repo/commit/<sha>``."""

    kind: ClassVar[RefType] = RefType.GITHUB_COMMIT_URL

    owner_repo: str
    commit_sha: str
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class GitHubPullRequestChangesUrl(_RangeBase):
    """``https://github.com/owner/repo/pull/N/changes/<sha>..<sha>``."""

    kind: ClassVar[RefType] = RefType.GITHUB_PR_CHANGES_URL

    owner_repo: str
    pr_number: int
    left_commit_sha: str
    right_commit_sha: str
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class GitHubCompareUrl(_RangeBase):
    """``https://github.com/owner/repo/compare/<left>...<right>``.

    ``right_owner``/``right_repo`` are set for cross-fork comparisons.
    """

    kind: ClassVar[RefType] = RefType.GITHUB_COMPARE_URL

    owner_repo: str
    left_ref: str
    right_ref: str
    right_owner: Optional[str] = None
    right_repo: Optional[str] = None
    left: str = ""
    right: str = ""


@dataclass(frozen=True)
class GitLabMergeRequestRef(_RangeBase):
    """``gitlab:owner/repo!N``."""

    kind: ClassVar[RefType] = RefType.GITLAB_MR_REF

    owner_repo: str
    mr_number: int
    left: str = ""
    right: str = ""


RefRange = Union[
    LocalRange,
    RemoteRange,
    PullRequestRef,
    GitHubPullRequestUrl,
    PullRequestRange,
    GitUrlRange,
    GitHubCommitUrl,
    GitHubPullRequestChangesUrl,
    GitHubCompareUrl,
    GitLabMergeRequestRef,
]


# ── Resolution results ───────────────────────────────────────────

Cleanup = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class ResolvedRefs:
    """Two revisions ready for diffing, plus the cleanup for any temp refs."""

    left: str
    right: str
    cleanup: Optional[Cleanup] = None


@dataclass(frozen=True)
class AutoBaseRefs:
    """Result of inferring the base branch for the current HEAD."""

    left: str
    right: str
    base_ref: str
    merge_base: str
