"""LLM-friendly output formatting with 4K token cap."""

from __future__ import annotations

from diffx.core.engine import DiffOutput

# Approximate 4K tokens ≈ 16K chars
MAX_OUTPUT_CHARS = 16_000


def format_range(range_dict: dict, *, max_chars: int = MAX_OUTPUT_CHARS) -> str:
    """Format a parsed RefRange (from ``to_dict()``) for LLM consumption."""
    lines: list[str] = []
    lines.append(f"## Parsed Target: {range_dict.get('type', '?')}")
    lines.append("")

    for key, value in range_dict.items():
        if key == "type" or value in (None, ""):
            continue
        if isinstance(value, dict):
            value = f"{value.get('owner', '?')}/{value.get('repo', '?')}#{value.get('number', '?')}"
        lines.append(f"- **{key}**: {value}")

    return _truncate("\n".join(lines), max_chars=max_chars)


def format_diff(output: DiffOutput, *, max_chars: int = MAX_OUTPUT_CHARS) -> str:
    """Format a diff with a short header naming the endpoints."""
    lines: list[str] = []
    lines.append(f"## Diff ({output.range_kind}): {output.left}..{output.right}")
    if output.base_ref:
        lines.append(f"Base branch: {output.base_ref}")
    lines.append("")

    if output.text.strip():
        lines.append(output.text.rstrip("\n"))
    else:
        lines.append("No changes.")

    return _truncate("\n".join(lines), max_chars=max_chars)


def format_error(error: Exception) -> str:
    kind = getattr(error, "kind", None)
    label = kind.value if kind is not None else "error"
    return f"diffx failed ({label}): {error}"


def _truncate(text: str, *, max_chars: int = MAX_OUTPUT_CHARS) -> str:
    """Truncate to stay within token budget."""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 50] + "\n\n... (output truncated)"
