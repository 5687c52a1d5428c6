"""Tests for diffx error types."""

from __future__ import annotations

from diffx.errors import (
    DiffxError,
    GitCommandError,
    GitError,
    InvalidInputError,
    handle_error,
)
from diffx.models.enums import ErrorKind, ExitCode


class TestErrorKinds:
    def test_invalid_input(self):
        err = InvalidInputError("bad range")
        assert err.kind is ErrorKind.INVALID_INPUT
        assert err.exit_code == ExitCode.INVALID_INPUT == 2

    def test_git_error(self):
        err = GitError("fetch failed")
        assert err.kind is ErrorKind.GIT_ERROR
        assert err.exit_code == ExitCode.GIT_ERROR == 3

    def test_both_are_diffx_errors(self):
        assert isinstance(InvalidInputError("x"), DiffxError)
        assert isinstance(GitError("x"), DiffxError)

    def test_git_command_error_is_not_a_diffx_error(self):
        assert not isinstance(GitCommandError(["git"], 1, ""), DiffxError)


class TestGitCommandError:
    def test_message_uses_stderr(self):
        err = GitCommandError(["git", "fetch", "url"], 128, "fatal: repository not found\n")
        assert str(err) == "git fetch url failed: fatal: repository not found"
        assert err.returncode == 128

    def test_message_falls_back_to_exit_code(self):
        err = GitCommandError(["git", "merge-base", "a", "b"], 1, "  ")
        assert str(err) == "git merge-base a b failed: exit code 1"


class TestHandleError:
    def test_passes_diffx_errors_through(self):
        err = InvalidInputError("bad")
        assert handle_error(err) is err

    def test_wraps_other_exceptions(self):
        result = handle_error(RuntimeError("spawn failed"))
        assert isinstance(result, GitError)
        assert str(result) == "spawn failed"
