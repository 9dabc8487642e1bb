"""Standardized logging for aicgen.

Provides three output modes:
- Human mode: [LEVEL] message key=value
- Verbose mode: [LEVEL][HH:MM:SS] message key=value
- CI/JSON mode: {"level":"...","ts":"...","msg":"...", ...context}

Structured context is attached with bind_logger(). A bound ContextLogger never
changes after creation; bind() on it returns a new child carrying the merged
context, so components pass loggers down instead of sharing a mutable one.
"""

import json
import logging
import sys
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER_NAME = "aicgen"


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    GRAY = "\033[90m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.GRAY,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.RED,
}


def _is_tty(stream: TextIO | None = None) -> bool:
    """Check if the stream is a TTY (supports colors)."""
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def _context_suffix(record: logging.LogRecord) -> str:
    """Render structured context as trailing key=value pairs."""
    extra = getattr(record, "extra_data", None)
    if not extra:
        return ""
    return " " + " ".join(f"{key}={value}" for key, value in extra.items())


class HumanFormatter(logging.Formatter):
    """Formatter for human-readable output.

    Format: [LEVEL] message key=value
    """

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        message = record.getMessage() + _context_suffix(record)
        if self.use_colors:
            color = LEVEL_COLORS.get(record.levelno, Colors.RESET)
            return f"{color}[{record.levelname}]{Colors.RESET} {message}"
        return f"[{record.levelname}] {message}"


class VerboseFormatter(logging.Formatter):
    """Formatter for verbose output with timestamps.

    Format: [LEVEL][HH:MM:SS] message key=value
    """

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with timestamp."""
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = record.getMessage() + _context_suffix(record)
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if self.use_colors:
            color = LEVEL_COLORS.get(record.levelno, Colors.RESET)
            return f"{color}[{record.levelname}]{Colors.RESET}[{timestamp}] {message}"
        return f"[{record.levelname}][{timestamp}] {message}"


class JSONFormatter(logging.Formatter):
    """Formatter for JSON lines output (machine-readable).

    Format: {"level":"INFO","ts":"2026-01-31T19:45:23+00:00","msg":"...","logger":"..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "msg": record.getMessage(),
            "logger": record.name,
        }

        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)

        return json.dumps(log_entry, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that attaches a fixed structured context to every record.

    Per-call fields can be added with ``extra={"extra_data": {...}}``; they are
    merged over the bound context for that record only.
    """

    def __init__(self, logger: logging.Logger, context: Mapping[str, Any]) -> None:
        super().__init__(logger, dict(context))

    @property
    def context(self) -> dict[str, Any]:
        """Copy of the bound context."""
        return dict(self.extra or {})

    def bind(self, **context: Any) -> "ContextLogger":
        """Return a child logger whose context is this one's plus ``context``."""
        return ContextLogger(self.logger, {**(self.extra or {}), **context})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Merge the bound context into the record's extra_data."""
        extra = dict(kwargs.get("extra") or {})
        extra["extra_data"] = {**(self.extra or {}), **extra.get("extra_data", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger under the aicgen hierarchy.

    Args:
        name: Logger name, usually the calling module's __name__

    Returns:
        Standard library logger
    """
    return logging.getLogger(name)


def bind_logger(logger: logging.Logger | str, **context: Any) -> ContextLogger:
    """Create a context-bound logger.

    Args:
        logger: Logger or logger name to wrap
        **context: Structured fields attached to every record

    Returns:
        ContextLogger carrying ``context``
    """
    if isinstance(logger, str):
        logger = get_logger(logger)
    return ContextLogger(logger, context)


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Configure logging with the specified mode.

    Args:
        mode: Output mode (human, verbose, json)
        level: Minimum log level
        stream: Output stream (default: stderr, keeping stdout for results)
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    use_colors = _is_tty(stream)

    if mode == LogMode.JSON:
        formatter: logging.Formatter = JSONFormatter()
    elif mode == LogMode.VERBOSE:
        formatter = VerboseFormatter(use_colors=use_colors)
    else:
        formatter = HumanFormatter(use_colors=use_colors)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def configure_from_cli(
    verbose: bool = False,
    quiet: bool = False,
    ci: bool = False,
) -> None:
    """Configure logging based on CLI flags.

    Args:
        verbose: Enable verbose mode with timestamps
        quiet: Suppress info messages (warnings and errors only)
        ci: Enable JSON output for CI/CD
    """
    if ci:
        mode = LogMode.JSON
    elif verbose:
        mode = LogMode.VERBOSE
    else:
        mode = LogMode.HUMAN

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logging(mode=mode, level=level)
