"""Logging configuration for diffx.

All diffx.* loggers inherit from the root "diffx" logger.
Console output goes to stderr so stdout carries only diff text (and MCP stdio).
Git subprocess argv is logged at DEBUG by ``diffx.core.git_client``.
"""

from __future__ import annotations

import logging
import sys

from diffx.config import LogConfig

LOGGER_NAME = "diffx"

# Marks handlers installed here so reconfiguration only replaces our own
_HANDLER_TAG = "_diffx_handler"


def setup_logging(log_config: LogConfig, *, verbose: bool = False) -> logging.Logger:
    """Configure the diffx logger hierarchy.

    Safe to call once per command: a later call (say, with ``-v``) replaces
    the handlers from the previous one instead of stacking duplicates, and
    handlers added by a host application are left alone.

    Args:
        log_config: Logging settings from DiffxConfig.
        verbose: If True, overrides level to DEBUG.

    Returns:
        The configured "diffx" logger.
    """
    root_logger = logging.getLogger(LOGGER_NAME)

    for handler in [h for h in root_logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        root_logger.removeHandler(handler)
        handler.close()

    level = logging.DEBUG if verbose else getattr(logging, log_config.level.upper(), logging.WARNING)
    root_logger.setLevel(level)
    # An MCP host may configure the root logger; don't print twice
    root_logger.propagate = False

    formatter = logging.Formatter(log_config.format)

    # Looked up at call time so a redirected stderr is honoured
    console = logging.StreamHandler(sys.stderr)
    _install(root_logger, console, level, formatter)

    if log_config.file:
        _install(root_logger, logging.FileHandler(log_config.file), level, formatter)

    return root_logger


def _install(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    logger.addHandler(handler)
