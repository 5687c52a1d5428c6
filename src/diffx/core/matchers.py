"""Format matchers — one pure function per supported target grammar.

Each matcher returns a parsed range variant, or None when the input is not in
its grammar. Matchers never partially match and never touch git.
"""

from __future__ import annotations

import re

from diffx.models.refs import (
    GitHubCommitUrl,
    GitHubCompareUrl,
    GitHubPullRequestChangesUrl,
    GitHubPullRequestUrl,
    GitLabMergeRequestRef,
    GitUrlRange,
    LocalRange,
    PullRequest,
    PullRequestRange,
    PullRequestRef,
    RemoteRange,
)

_GITHUB = r"^https?://github\.com/([^/]+)/([^/]+)"

_PR_URL_RE = re.compile(_GITHUB + r"/pull/(\d+)(/.*)?$", re.IGNORECASE)
_COMMIT_URL_RE = re.compile(_GITHUB + r"/commit/([a-f0-9]+)$", re.IGNORECASE)
_PR_CHANGES_URL_RE = re.compile(
    _GITHUB + r"/pull/(\d+)/changes/([a-f0-9]+)\.\.([a-f0-9]+)$", re.IGNORECASE
)
_COMPARE_URL_RE = re.compile(_GITHUB + r"/compare/(.+)\.\.\.(.+)$", re.IGNORECASE)
_CROSS_FORK_COLON_RE = re.compile(r"^([^:]+):([^:]+):(.+)$")
_CROSS_FORK_SLASH_RE = re.compile(r"^([^:]+):([^/]+)/(.+)$")

_PR_REF_RE = re.compile(r"^github:([^/]+)/([^/]+)#(\d+)$", re.IGNORECASE)
_MR_REF_RE = re.compile(r"^gitlab:([^/]+)/([^/]+)!(\d+)$", re.IGNORECASE)
_GITHUB_RANGE_RE = re.compile(r"^github:([^/]+)/([^@]+)@(.+)\.\.(.+)$", re.IGNORECASE)
_GITLAB_RANGE_RE = re.compile(r"^gitlab:([^/]+)/([^@]+)@(.+)\.\.(.+)$", re.IGNORECASE)

_REMOTE_SIDE_RE = re.compile(r"^([^/]+)/([^@]+)@(.+)$")


def looks_like_git_url(value: str) -> bool:
    """Heuristic: ``scheme://...`` or scp-like ``user@host:path``."""
    return "://" in value or ("@" in value and ":" in value)


# ── GitHub ───────────────────────────────────────────────────────


def match_github_pr_url(value: str) -> GitHubPullRequestUrl | None:
    pr = _parse_pr_url(value)
    if pr is None:
        return None
    return GitHubPullRequestUrl(owner_repo=pr.owner_repo, pr_number=pr.number)


def match_github_commit_url(value: str) -> GitHubCommitUrl | None:
    m = _COMMIT_URL_RE.match(value)
    if not m:
        return None
    return GitHubCommitUrl(owner_repo=f"{m.group(1)}/{m.group(2)}", commit_sha=m.group(3))


def match_github_pr_changes_url(value: str) -> GitHubPullRequestChangesUrl | None:
    m = _PR_CHANGES_URL_RE.match(value)
    if not m:
        return None
    return GitHubPullRequestChangesUrl(
        owner_repo=f"{m.group(1)}/{m.group(2)}",
        pr_number=int(m.group(3)),
        left_commit_sha=m.group(4),
        right_commit_sha=m.group(5),
    )


def match_github_compare_url(value: str) -> GitHubCompareUrl | None:
    """Match a compare URL, splitting a cross-fork right side when present.

    Cross-fork right sides are ``owner:repo:ref`` or ``owner:repo/ref``.
    """
    m = _COMPARE_URL_RE.match(value)
    if not m:
        return None

    owner_repo = f"{m.group(1)}/{m.group(2)}"
    left_ref, right_ref = m.group(3), m.group(4)

    fork = _CROSS_FORK_COLON_RE.match(right_ref) or _CROSS_FORK_SLASH_RE.match(right_ref)
    if fork:
        return GitHubCompareUrl(
            owner_repo=owner_repo,
            left_ref=left_ref,
            right_ref=fork.group(3),
            right_owner=fork.group(1),
            right_repo=fork.group(2),
        )

    return GitHubCompareUrl(owner_repo=owner_repo, left_ref=left_ref, right_ref=right_ref)


def match_github_pr_ref(value: str) -> PullRequestRef | None:
    pr = _parse_pr_ref(value)
    if pr is None:
        return None
    return PullRequestRef(owner_repo=pr.owner_repo, pr_number=pr.number)


def match_github_ref_range(value: str) -> GitUrlRange | None:
    """``github:owner/repo@left..right`` — fetched over SSH."""
    return _match_host_ref_range(value, _GITHUB_RANGE_RE, "github.com")


def match_pr_range(value: str) -> PullRequestRange | None:
    """Two PR URLs or ``github:`` PR refs, in any combination, joined by ``..``."""
    if ".." not in value:
        return None
    parts = value.split("..")
    if len(parts) != 2:
        return None

    left = _parse_pr_url(parts[0].strip()) or _parse_pr_ref(parts[0].strip())
    right = _parse_pr_url(parts[1].strip()) or _parse_pr_ref(parts[1].strip())
    if left is None or right is None:
        return None
    return PullRequestRange(left_pr=left, right_pr=right)


# ── GitLab ───────────────────────────────────────────────────────


def match_gitlab_mr_ref(value: str) -> GitLabMergeRequestRef | None:
    m = _MR_REF_RE.match(value)
    if not m:
        return None
    return GitLabMergeRequestRef(owner_repo=f"{m.group(1)}/{m.group(2)}", mr_number=int(m.group(3)))


def match_gitlab_ref_range(value: str) -> GitUrlRange | None:
    """``gitlab:owner/repo@left..right`` — fetched over SSH."""
    return _match_host_ref_range(value, _GITLAB_RANGE_RE, "gitlab.com")


# ── Generic git URLs ─────────────────────────────────────────────


def match_git_url_range(value: str) -> GitUrlRange | None:
    """Match ``<url>@left..<url>@right`` or the same-URL form ``<url>@left..right``."""
    sep = value.find("..")
    if sep == -1:
        return None

    left_part, right_part = value[:sep], value[sep + 2:]
    left_at = left_part.rfind("@")
    right_at = right_part.rfind("@")
    if left_at != -1 and right_at != -1:
        left_url, left_ref = left_part[:left_at], left_part[left_at + 1:]
        right_url, right_ref = right_part[:right_at], right_part[right_at + 1:]
        if looks_like_git_url(left_url) and looks_like_git_url(right_url):
            return GitUrlRange(
                left_git_url=left_url,
                right_git_url=right_url,
                left=left_ref,
                right=right_ref,
            )

    # Same-URL form: the last "@" before the first ".." splits URL from refs
    at = value.rfind("@", 0, sep + 1)
    if at == -1:
        return None
    url = value[:at]
    refs = value[at + 1:].split("..")
    if len(refs) != 2 or not looks_like_git_url(url):
        return None
    return GitUrlRange(left_git_url=url, right_git_url=url, left=refs[0], right=refs[1])


# ── Shorthand and local ──────────────────────────────────────────


def match_remote_range(value: str) -> RemoteRange | None:
    """``owner/repo@left..right`` or ``owner/repo@left..owner/repo@right``.

    Both sides must name the same repository when the right side is qualified.
    """
    sep = value.find("..")
    if sep == -1:
        return None

    left_part = value[:sep].strip()
    right_part = value[sep + 2:].strip()
    if not left_part or not right_part:
        return None

    left = _parse_remote_side(left_part)
    if left is None:
        return None
    owner, repo, left_ref = left
    owner_repo = f"{owner}/{repo}"

    right = _parse_remote_side(right_part)
    if right is not None:
        if right[:2] != (owner, repo):
            return None
        right_ref = right[2]
    else:
        right_ref = right_part

    return RemoteRange(
        owner_repo=owner_repo,
        left=f"{owner_repo}@{left_ref}",
        right=f"{owner_repo}@{right_ref}",
    )


def match_local_range(value: str) -> LocalRange | None:
    parts = value.split("..")
    if len(parts) != 2:
        return None
    left, right = parts[0].strip(), parts[1].strip()
    if not left or not right:
        return None
    return LocalRange(left=left, right=right)


# ── Helpers ──────────────────────────────────────────────────────


def _parse_pr_url(value: str) -> PullRequest | None:
    m = _PR_URL_RE.match(value)
    if not m:
        return None
    return PullRequest(owner=m.group(1), repo=m.group(2), number=int(m.group(3)))


def _parse_pr_ref(value: str) -> PullRequest | None:
    m = _PR_REF_RE.match(value)
    if not m:
        return None
    return PullRequest(owner=m.group(1), repo=m.group(2), number=int(m.group(3)))


def _parse_remote_side(value: str) -> tuple[str, str, str] | None:
    m = _REMOTE_SIDE_RE.match(value)
    if not m:
        return None
    owner, repo, ref = (g.strip() for g in m.groups())
    if not owner or not repo or not ref:
        return None
    return owner, repo, ref


def _match_host_ref_range(value: str, pattern: re.Pattern[str], host: str) -> GitUrlRange | None:
    m = pattern.match(value)
    if not m:
        return None
    owner, repo = m.group(1), m.group(2)
    left, right = m.group(3).strip(), m.group(4).strip()
    if not owner or not repo or not left or not right:
        return None
    url = f"git@{host}:{owner}/{repo}.git"
    return GitUrlRange(left_git_url=url, right_git_url=url, left=left, right=right)
