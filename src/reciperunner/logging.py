"""Logging infrastructure for the recipe runner.

Provides the Logger interface used for diagnostics and a LoggerFn type alias
for plain output functions such as the command echo.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any, Callable

# Matches the Console.print() signature
LoggerFn = Callable[..., None]


class LogLevel(enum.Enum):
    """Log verbosity levels for runner diagnostic messages.

    Lower numeric values represent higher severity / less verbosity.
    """

    FATAL = 0  # Malformed recipe files, cycles, unknown recipes
    ERROR = 1  # Fatal errors plus command failures
    WARN = 2  # Errors plus warnings about recipe file conventions
    INFO = 3  # Warnings plus normal progress (default)
    DEBUG = 4  # Info plus resolved paths, config and execution order
    TRACE = 5  # Debug plus per-line execution tracing


def parse_log_level(value: str) -> LogLevel:
    """Convert a level name (case-insensitive) into a LogLevel.

    Raises:
        ValueError: If the name is not a known level
    """
    try:
        return LogLevel[value.strip().upper()]
    except KeyError:
        valid = ", ".join(level.name.lower() for level in LogLevel)
        raise ValueError(f"Invalid log level '{value}', expected one of: {valid}") from None


class Logger(ABC):
    """Abstract logger with a stack of active levels."""

    @abstractmethod
    def log(self, level: LogLevel = LogLevel.INFO, *args: Any, **kwargs: Any) -> None:
        ...

    @abstractmethod
    def push_level(self, level: LogLevel) -> None:
        ...

    @abstractmethod
    def pop_level(self) -> LogLevel:
        ...

    def fatal(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.FATAL, *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.ERROR, *args, **kwargs)

    def warn(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.WARN, *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.INFO, *args, **kwargs)

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.DEBUG, *args, **kwargs)

    def trace(self, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.TRACE, *args, **kwargs)
