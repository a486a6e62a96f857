"""Logging configuration for coinstats.

The library only emits records through loguru's ``logger``; applications call
`setup_logging` once to choose where they go.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_LEVEL_ENV = "COINSTATS_LOG_LEVEL"


def setup_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Configure loguru sinks for console and an optional log file.

    Args:
        level: Log level (TRACE, DEBUG, INFO, WARNING, ERROR); falls back to
            $COINSTATS_LOG_LEVEL, then INFO
        log_dir: If provided, also writes coinstats.log in this directory
    """
    level = level or os.environ.get(LOG_LEVEL_ENV, "INFO")

    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan> | "
        "<level>{message}</level>"
    )
    logger.add(sys.stderr, format=log_format, level=level, colorize=True)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "coinstats.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}",
            level=level,
            colorize=False,
        )


def get_log_level(verbose: bool = False, quiet: bool = False) -> str:
    """Log level from verbosity flags; verbose wins over quiet."""
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return "INFO"
