"""
Logging configuration and setup.

Provides leveled logging with console and file output support. Log calls may
attach a string-keyed metadata map via ``extra={"metadata": {...}}``; the
formatters render it as ``key=value`` pairs after the message.
"""

import logging
import sys
from pathlib import Path

from demobot.config.settings import Settings

# Finer than DEBUG; used for step-by-step tracing of startup and dispatch
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class MetadataFormatter(logging.Formatter):
    """Formatter that appends a record's metadata map, if any."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        metadata = getattr(record, "metadata", None)
        if metadata:
            pairs = " ".join(f"{key}={value}" for key, value in metadata.items())
            message = f"{message} [{pairs}]"
        return message


class ColoredFormatter(MetadataFormatter):
    """Formatter that adds color to console output."""

    # ANSI color codes
    COLORS = {
        "TRACE": "\033[90m",  # Grey
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with color."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record; don't leak escape codes into them
            record.levelname = levelname


def resolve_level(name: str) -> int:
    """Map a configured level name (including TRACE) to its numeric value."""
    return _LEVELS[name.upper()]


def setup_logging(settings: Settings) -> None:
    """
    Configure logging based on settings.

    Args:
        settings: Application settings containing log configuration
    """
    level = resolve_level(settings.log_level)

    root_logger = logging.getLogger("demobot")
    root_logger.setLevel(level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Console handler with color
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    # File handler if configured
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(
            MetadataFormatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    # Don't propagate to root logger
    root_logger.propagate = False

    root_logger.info(f"Logging initialized - Level: {settings.log_level}")
    if settings.log_file:
        root_logger.info(f"Logging to file: {settings.log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name == "demobot" or name.startswith("demobot."):
        return logging.getLogger(name)
    return logging.getLogger(f"demobot.{name}")
