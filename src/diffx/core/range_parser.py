"""Range parser — turn a free-form diff target into a typed RefRange."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from diffx.core import matchers
from diffx.errors import InvalidInputError
from diffx.models.refs import RefRange

logger = logging.getLogger(__name__)

Matcher = Callable[[str], Optional[RefRange]]

# Tried top to bottom; the first match wins. Order matters because grammars
# overlap: a PR range and a PR-changes URL both contain "..", a compare URL
# contains "...", and almost anything with ".." is also a local range.
MATCHER_PRECEDENCE: tuple[tuple[str, Matcher], ...] = (
    ("pr-range", matchers.match_pr_range),
    ("git-url-range", matchers.match_git_url_range),
    ("github-compare-url", matchers.match_github_compare_url),
    ("github-pr-changes-url", matchers.match_github_pr_changes_url),
    ("github-pr-url", matchers.match_github_pr_url),
    ("github-commit-url", matchers.match_github_commit_url),
    ("github-ref-range", matchers.match_github_ref_range),
    ("gitlab-ref-range", matchers.match_gitlab_ref_range),
    ("github-pr-ref", matchers.match_github_pr_ref),
    ("gitlab-mr-ref", matchers.match_gitlab_mr_ref),
    ("remote-range", matchers.match_remote_range),
    ("local-range", matchers.match_local_range),
)

SUPPORTED_FORMATS: tuple[tuple[str, str], ...] = (
    ("Local refs", "main..feature, abc123..def456"),
    ("Remote refs", "owner/repo@main..owner/repo@feature"),
    ("Git URL", "git@github.com:owner/repo.git@main..feature"),
    ("Git URL (HTTPS)", "https://github.com/owner/repo.git@main..feature"),
    ("GitHub refs", "github:owner/repo@main..feature"),
    ("GitHub PR ref", "github:owner/repo#123"),
    ("GitHub PR range", "github:owner/repo#123..github:owner/repo#456"),
    ("GitHub PR URL", "https://github.com/owner/repo/pull/123"),
    ("PR URL range", "https://github.com/owner/repo/pull/123..https://github.com/owner/repo/pull/456"),
    ("GitHub commit URL", "https://github.com/owner/repo/commit/abc123"),
    ("GitHub PR changes URL", "https://github.com/owner/repo/pull/123/changes/abc123..def456"),
    ("GitHub compare URL", "https://github.com/owner/repo/compare/main...feature"),
    ("Cross-fork compare", "https://github.com/owner/repo/compare/main...other:repo:feature"),
    ("GitLab refs", "gitlab:owner/repo@main..feature"),
    ("GitLab MR ref", "gitlab:owner/repo!123"),
)


def parse_range(value: str) -> RefRange:
    """Parse ``value`` with the first matching grammar in MATCHER_PRECEDENCE.

    Raises:
        InvalidInputError: if no grammar accepts the input.
    """
    for name, matcher in MATCHER_PRECEDENCE:
        parsed = matcher(value)
        if parsed is not None:
            logger.debug("Parsed %r as %s", value, name)
            return parsed

    raise InvalidInputError(_unsupported_message(value))


def _unsupported_message(value: str) -> str:
    lines = [f"Invalid range or URL: {value}", "", "Supported formats:"]
    lines.extend(f"  - {label}: {example}" for label, example in SUPPORTED_FORMATS)
    return "\n".join(lines)
