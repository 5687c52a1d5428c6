"""diffx CLI — Typer-based command interface."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from diffx.config import DiffxConfig
from diffx.core.engine import DiffxEngine
from diffx.core.range_parser import parse_range
from diffx.errors import DiffxError, handle_error
from diffx.models.enums import OutputMode

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="diffx",
    help="Diff any git target: local ranges, remotes, PRs, MRs, commit and compare URLs.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

# Global state set by the callback
_verbose: bool = False


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """diffx — turn a free-form diff target into two diffable git revisions."""
    global _verbose
    _verbose = verbose


def _load(repo_path: Path) -> tuple[Path, DiffxConfig]:
    repo_path = repo_path.resolve()
    config = DiffxConfig.load(repo_path)

    from diffx.logging_setup import setup_logging
    setup_logging(config.logging, verbose=_verbose)
    return repo_path, config


def _fail(exc: BaseException) -> typer.Exit:
    """Print a DiffxError in red and build the matching exit."""
    error = handle_error(exc)
    logger.debug("Command failed", exc_info=True)
    err_console.print(f"[red]{escape(str(error))}[/red]", highlight=False)
    return typer.Exit(int(error.exit_code))


def _pick_mode(
    mode: Optional[OutputMode],
    stat: bool,
    numstat: bool,
    name_only: bool,
    name_status: bool,
    default: str,
) -> OutputMode:
    shortcuts = [
        (stat, OutputMode.STAT),
        (numstat, OutputMode.NUMSTAT),
        (name_only, OutputMode.NAME_ONLY),
        (name_status, OutputMode.NAME_STATUS),
    ]
    chosen = [m for flag, m in shortcuts if flag]
    if mode is not None:
        chosen.insert(0, mode)
    if len(set(chosen)) > 1:
        raise typer.BadParameter("Choose only one output mode")
    if chosen:
        return chosen[0]
    try:
        return OutputMode(default)
    except ValueError:
        raise typer.BadParameter(f"Invalid output mode in config: {default}") from None


@app.command()
def diff(
    target: Optional[str] = typer.Argument(None, help="Range, PR/MR ref, or GitHub URL (default: auto)"),
    paths: Optional[List[str]] = typer.Argument(None, help="Limit the diff to these paths (after --)"),
    mode: Optional[OutputMode] = typer.Option(None, "--mode", "-m", help="Output mode"),
    stat: bool = typer.Option(False, "--stat", help="Same as --mode stat"),
    numstat: bool = typer.Option(False, "--numstat", help="Same as --mode numstat"),
    name_only: bool = typer.Option(False, "--name-only", help="Same as --mode name-only"),
    name_status: bool = typer.Option(False, "--name-status", help="Same as --mode name-status"),
    repo_path: Path = typer.Option(Path("."), "--repo", "-r", help="Repository path"),
) -> None:
    """Print the diff for TARGET.

    With no TARGET: uncommitted changes against HEAD, or, on a clean
    worktree, the current branch against its merge base with the default
    branch.
    """
    repo_path, config = _load(repo_path)
    output_mode = _pick_mode(mode, stat, numstat, name_only, name_status, config.output.mode)
    engine = DiffxEngine(repo_path, config=config)

    try:
        result = asyncio.run(engine.diff(target, output_mode, paths or ()))
    except DiffxError as exc:
        raise _fail(exc)

    typer.echo(result.text, nl=False)


@app.command()
def parse(
    target: str = typer.Argument(help="Range, PR/MR ref, or GitHub URL"),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON"),
) -> None:
    """Show how TARGET is parsed, without touching git."""
    try:
        ref_range = parse_range(target)
    except DiffxError as exc:
        raise _fail(exc)

    data = ref_range.to_dict()
    if output_json:
        console.print_json(json.dumps(data))
        return

    table = Table(title=f"Parsed: {escape(target)}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        if value in (None, ""):
            continue
        table.add_row(key, escape(_display_value(value)))
    console.print(table)


@app.command()
def resolve(
    target: Optional[str] = typer.Argument(None, help="Range, PR/MR ref, or GitHub URL (default: auto base)"),
    repo_path: Path = typer.Option(Path("."), "--repo", "-r", help="Repository path"),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON"),
) -> None:
    """Resolve TARGET to two revisions, print them, and clean up temp refs.

    Revisions are resolved to commit SHAs before the temp refs are removed.
    """
    repo_path, config = _load(repo_path)
    engine = DiffxEngine(repo_path, config=config)

    try:
        data = asyncio.run(_resolve_endpoints(engine, target))
    except DiffxError as exc:
        raise _fail(exc)

    if output_json:
        console.print_json(json.dumps(data))
        return

    table = Table(title="Resolved Range")
    table.add_column("Side", style="bold")
    table.add_column("Revision")
    table.add_column("Commit", style="dim")
    table.add_row("left", data["left"], data["left_sha"])
    table.add_row("right", data["right"], data["right_sha"])
    console.print(table)
    if data.get("base_ref"):
        console.print(f"[dim]Base branch: {data['base_ref']}[/dim]")


async def _resolve_endpoints(engine: DiffxEngine, target: str | None) -> dict:
    try:
        if target is None:
            auto = await engine.auto_base()
            return {
                "left": auto.left,
                "right": auto.right,
                "left_sha": auto.merge_base,
                "right_sha": await _rev_parse(engine, auto.right),
                "base_ref": auto.base_ref,
            }

        async with engine.resolved(target) as refs:
            return {
                "left": refs.left,
                "right": refs.right,
                "left_sha": await _rev_parse(engine, refs.left),
                "right_sha": await _rev_parse(engine, refs.right),
            }
    except DiffxError:
        raise
    except Exception as exc:
        raise handle_error(exc) from exc


async def _rev_parse(engine: DiffxEngine, rev: str) -> str:
    res = await engine.client.run(["rev-parse", "--verify", f"{rev}^{{commit}}"])
    return res.stdout.strip()


def _display_value(value) -> str:
    if isinstance(value, dict):
        return f"{value.get('owner')}/{value.get('repo')}#{value.get('number')}"
    return str(value)
