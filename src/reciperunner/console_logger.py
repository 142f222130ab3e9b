from __future__ import annotations

from typing import Any, Optional

from rich.console import Console

from reciperunner.logging import Logger, LogLevel


class ConsoleLogger(Logger):
    """Console-based logger implementation using Rich for formatting.

    Filters log messages based on the current log level. Messages with severity
    lower than the current level are suppressed. Supports a stack-based level
    management system for temporary verbosity changes.

    When an error console is supplied, FATAL, ERROR and WARN messages are
    printed there instead of the main console.
    """

    def __init__(
        self,
        console: Console,
        level: LogLevel = LogLevel.INFO,
        err_console: Optional[Console] = None,
    ) -> None:
        """Initialize the console logger.

        Args:
            console: Rich Console instance to use for output
            level: Initial log level (default: INFO)
            err_console: Optional Rich Console for errors and warnings
        """
        self._console = console
        self._err_console = err_console
        self._levels = [level]

    @property
    def level(self) -> LogLevel:
        return self._levels[-1]

    def log(self, level: LogLevel = LogLevel.INFO, *args: Any, **kwargs: Any) -> None:
        """Log a message if it meets the current level threshold.

        Args:
            level: The severity level of this message (default: INFO)
            *args: Positional arguments passed to Rich Console.print()
            **kwargs: Keyword arguments passed to Rich Console.print()
        """
        if self._levels[-1].value < level.value:
            return

        if self._err_console is not None and level.value <= LogLevel.WARN.value:
            self._err_console.print(*args, **kwargs)
        else:
            self._console.print(*args, **kwargs)

    def push_level(self, level: LogLevel) -> None:
        self._levels.append(level)

    def pop_level(self) -> LogLevel:
        """Pop the current log level and return to the previous level.

        Raises:
            RuntimeError: If attempting to pop the base (initial) log level
        """
        if len(self._levels) <= 1:
            raise RuntimeError("Cannot pop the base log level")
        return self._levels.pop()
