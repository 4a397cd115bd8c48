"""Centralized logging facility for sizecompare.

Provides console logging plus optional file-based logging with rotation
and retention. Log files are stored in the user's log directory.

Usage:
    from sizecompare.core.logging import setup_logging
    setup_logging(config)

All modules log via `from loguru import logger`.
This module configures loguru's sinks (file output, rotation, format).
"""

import sys
from pathlib import Path

from loguru import logger
from platformdirs import user_log_dir

from sizecompare.config.manager import ConfigManager


_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_LOG_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} | "
    "{message}"
)

LOG_FILENAME = "sizecompare.log"

_log_dir: Path | None = None


def get_log_dir() -> Path:
    """Return the directory where log files are stored."""
    global _log_dir
    if _log_dir is None:
        _log_dir = Path(user_log_dir("SizeCompare", "SizeCompare"))
    return _log_dir


def set_log_dir(path: str | Path | None):
    """Override the log directory (None restores the per-user default)."""
    global _log_dir
    _log_dir = Path(path) if path is not None else None


def get_current_log_path() -> Path:
    """Return the path to the current (active) log file."""
    return get_log_dir() / LOG_FILENAME


def setup_logging(config: ConfigManager) -> list[int]:
    """Configure the logging system based on user settings.

    Call once during startup, after config is loaded.
    Sets up:
    - Console output (with color, respects log_console_output setting)
    - File output with rotation and retention

    Returns the loguru handler ids that were added.
    """
    level = config.get("logging", "log_level", "INFO")
    log_to_file = config.get("logging", "log_to_file", True)
    console_output = config.get("logging", "log_console_output", True)
    retention_days = config.get("logging", "log_retention_days", 30)
    max_size_mb = config.get("logging", "log_max_size_mb", 50)

    # Remove default loguru handler
    logger.remove()
    handler_ids: list[int] = []

    # Console sink
    if console_output:
        handler_ids.append(
            logger.add(
                sys.stderr,
                format=_LOG_FORMAT,
                level=level,
                colorize=True,
            )
        )

    # File sink with rotation and retention
    if log_to_file:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / LOG_FILENAME

        handler_ids.append(
            logger.add(
                str(log_path),
                format=_LOG_FILE_FORMAT,
                level="DEBUG",  # Always capture DEBUG to file for diagnostics
                rotation=f"{max_size_mb} MB",
                retention=f"{retention_days} days",
                compression="zip",
                encoding="utf-8",
                enqueue=True,  # Thread-safe async writes
            )
        )

        logger.info(f"Log file: {log_path}")

    logger.info(f"Logging initialized (console={level}, file={'DEBUG' if log_to_file else 'off'})")
    return handler_ids
