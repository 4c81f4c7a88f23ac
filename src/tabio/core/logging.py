"""Logging configuration for tabio.

This module provides centralized logging configuration using loguru.
The package disables its own log records on import; call
``configure_logging`` (the CLI does) to see them.
"""
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_configured = False
_handler_ids: list[int] = []


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format: Optional[str] = None,
    force: bool = False,
    serialize: bool = False,
) -> None:
    """Configure logging for tabio.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for logging
        format: Optional custom format string
        force: Reconfigure even if logging was already configured
        serialize: Write the log file as JSON lines
    """
    global _configured

    if _configured and not force:
        return

    for handler_id in _handler_ids:
        logger.remove(handler_id)
    _handler_ids.clear()

    if format is None:
        format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        )

    # Console only shows warnings and above unless asked for more
    console_level = level if level.upper() in ("DEBUG", "WARNING", "ERROR", "CRITICAL") else "WARNING"
    _handler_ids.append(
        logger.add(
            sys.stderr,
            format=format,
            level=console_level,
            colorize=True,
            filter="tabio",
        )
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        _handler_ids.append(
            logger.add(
                log_file,
                format=format,
                level=level,
                rotation="10 MB",
                retention="7 days",
                compression="zip",
                serialize=serialize,
                filter="tabio",
            )
        )

    logger.enable("tabio")
    _configured = True


def get_logger(name: str) -> "logger":
    """Get a logger instance for the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if not _configured and os.environ.get("TABIO_LOGGING__LEVEL"):
        configure_logging(
            level=os.environ["TABIO_LOGGING__LEVEL"],
            log_file=os.environ.get("TABIO_LOGGING__FILE"),
        )

    return logger.bind(name=name)


def reset_logging() -> None:
    """Remove tabio handlers and disable tabio records (mainly for testing)."""
    global _configured

    for handler_id in _handler_ids:
        logger.remove(handler_id)
    _handler_ids.clear()
    logger.disable("tabio")
    _configured = False


__all__ = ["logger", "get_logger", "configure_logging", "reset_logging"]
