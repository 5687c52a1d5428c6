"""Centralized configuration for diffx.

Loads from .diffx/config.toml -> env vars -> defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

# Single deepening step when a shallow compare fetch lacks a merge base.
# Very deep histories can still come up short.
MERGE_BASE_DEEPEN_DEPTH = 200


@dataclass(frozen=True)
class TimeoutConfig:
    """Timeout settings for git subprocess calls (seconds)."""

    git: int = 30
    fetch: int = 120


@dataclass(frozen=True)
class FetchConfig:
    """Depths and ref namespace used when staging remote commits."""

    shallow_depth: int = 1
    # Deep enough to keep a merge commit's parents, or a commit's parent
    history_depth: int = 2
    merge_base_deepen_depth: int = MERGE_BASE_DEEPEN_DEPTH
    temp_ref_root: str = "refs/diffx/tmp"


@dataclass(frozen=True)
class OutputConfig:
    """Diff output settings."""

    mode: str = "diff"
    max_output_chars: int = 16_000


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file: str = ""


@dataclass(frozen=True)
class DiffxConfig:
    """Top-level diffx configuration."""

    timeouts: TimeoutConfig = TimeoutConfig()
    fetch: FetchConfig = FetchConfig()
    output: OutputConfig = OutputConfig()
    logging: LogConfig = LogConfig()

    @classmethod
    def load(cls, repo_path: str | Path) -> DiffxConfig:
        """Load config from .diffx/config.toml, env vars, and defaults.

        Priority: env vars > TOML file > defaults.
        """
        repo = Path(repo_path).resolve()
        config_file = repo / ".diffx" / "config.toml"

        toml_data: dict = {}
        if config_file.exists():
            with open(config_file, "rb") as f:
                toml_data = tomllib.load(f)

        return cls(
            timeouts=_build_section(TimeoutConfig, toml_data.get("timeouts", {}), "DIFFX_TIMEOUT"),
            fetch=_build_section(FetchConfig, toml_data.get("fetch", {}), "DIFFX_FETCH"),
            output=_build_section(OutputConfig, toml_data.get("output", {}), "DIFFX_OUTPUT"),
            logging=_build_section(LogConfig, toml_data.get("logging", {}), "DIFFX_LOG"),
        )


def _build_section(cls: type, toml_dict: dict, env_prefix: str):
    """Build a config section from TOML dict + env var overrides."""
    kwargs = {}
    for f in fields(cls):
        env_key = f"{env_prefix}_{f.name}".upper()
        env_val = os.environ.get(env_key)

        if env_val is not None:
            kwargs[f.name] = _coerce(env_val, f.type)
        elif f.name in toml_dict:
            kwargs[f.name] = toml_dict[f.name]

    return cls(**kwargs)


def _coerce(value: str, type_hint: str):
    """Coerce a string env var value to the appropriate type."""
    if type_hint == "bool":
        return value.lower() in ("true", "1", "yes")
    if type_hint == "int":
        return int(value)
    if type_hint == "float":
        return float(value)
    return value
