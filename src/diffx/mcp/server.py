"""diffx MCP server — FastMCP with stdio transport."""

from __future__ import annotations

import os
from pathlib import Path

from diffx.config import DiffxConfig
from diffx.core.engine import DiffxEngine
from diffx.core.range_parser import parse_range
from diffx.errors import DiffxError
from diffx.mcp.formatters import format_diff, format_error, format_range
from diffx.models.enums import OutputMode


def _get_repo_path() -> Path:
    """Determine repo path from env or cwd."""
    return Path(os.environ.get("DIFFX_REPO_PATH", os.getcwd())).resolve()


def create_server():
    """Create the diffx MCP server."""
    from mcp.server.fastmcp import FastMCP

    mcp = FastMCP(
        "diffx",
        instructions="Diff local ranges, remote refs, GitHub PRs, GitLab MRs, commit and compare URLs",
    )

    @mcp.tool()
    def diffx_parse(target: str) -> str:
        """Show how a diff target is interpreted, without touching git.

        Args:
            target: Range, PR/MR ref, or GitHub URL (e.g. main..HEAD,
                github:owner/repo#123, https://github.com/o/r/compare/a...b)
        """
        repo_path = _get_repo_path()
        config = DiffxConfig.load(repo_path)
        try:
            ref_range = parse_range(target)
        except DiffxError as exc:
            return format_error(exc)
        return format_range(ref_range.to_dict(), max_chars=config.output.max_output_chars)

    @mcp.tool()
    async def diffx_diff(
        target: str = "",
        mode: str = "",
        paths: list[str] | None = None,
    ) -> str:
        """Diff a target in the current repository.

        Remote targets are fetched into temporary refs that are removed
        before this returns.

        Args:
            target: Range, PR/MR ref, or GitHub URL (default: uncommitted
                changes, or the branch against its merge base)
            mode: diff, patch, stat, numstat, shortstat, name-only,
                name-status or summary (default from config)
            paths: Limit the diff to these paths
        """
        repo_path = _get_repo_path()
        config = DiffxConfig.load(repo_path)
        try:
            output_mode = OutputMode(mode or config.output.mode)
        except ValueError:
            return f"Invalid mode '{mode}'. Must be one of: {', '.join(m.value for m in OutputMode)}"

        engine = DiffxEngine(repo_path, config=config)
        try:
            output = await engine.diff(target or None, output_mode, paths or ())
        except DiffxError as exc:
            return format_error(exc)
        return format_diff(output, max_chars=config.output.max_output_chars)

    return mcp


def main():
    """Entry point for diffx-mcp."""
    from diffx.logging_setup import setup_logging

    repo_path = _get_repo_path()
    config = DiffxConfig.load(repo_path)
    setup_logging(config.logging)

    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
