"""Error types for diffx.

Callers tell failures apart by class (or ``kind``), never by message text.
"""

from __future__ import annotations

from diffx.models.enums import ErrorKind, ExitCode


class DiffxError(Exception):
    """Base error surfaced to diffx callers."""

    kind: ErrorKind = ErrorKind.GIT_ERROR

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.from_kind(self.kind)


class InvalidInputError(DiffxError):
    """Deterministic, caller-fixable failure (bad syntax, missing local ref)."""

    kind = ErrorKind.INVALID_INPUT


class GitError(DiffxError):
    """Environment-dependent failure (network, auth, unknown remote ref)."""

    kind = ErrorKind.GIT_ERROR


class GitCommandError(Exception):
    """A git subprocess exited non-zero, timed out, or could not be spawned."""

    def __init__(self, argv: list[str], returncode: int, stderr: str) -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"{' '.join(argv)} failed: {detail}")


def handle_error(exc: BaseException) -> DiffxError:
    """Normalize any exception into a typed DiffxError."""
    if isinstance(exc, DiffxError):
        return exc
    return GitError(str(exc))
