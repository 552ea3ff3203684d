"""Logging interface and implementations."""

import logging
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, TextIO


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    NONE = "none"


class Logger(ABC):
    """Logger interface used by the REST and WebSocket clients."""

    @abstractmethod
    def debug(self, message: str, *args: Any) -> None:
        """Log debug message."""

    @abstractmethod
    def info(self, message: str, *args: Any) -> None:
        """Log info message."""

    @abstractmethod
    def warn(self, message: str, *args: Any) -> None:
        """Log warning message."""

    @abstractmethod
    def error(self, message: str, *args: Any) -> None:
        """Log error message."""


class ConsoleLogger(Logger):
    """Console logger with a minimum level."""

    _LEVELS = {
        LogLevel.DEBUG: 0,
        LogLevel.INFO: 1,
        LogLevel.WARN: 2,
        LogLevel.ERROR: 3,
        LogLevel.NONE: 4,
    }

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        prefix: str = "[exrs]",
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize console logger.

        Args:
            level: Minimum log level to display
            prefix: Prefix for log messages
            stream: Output stream, stdout when omitted
        """
        self.level = level
        self.prefix = prefix
        self.stream = stream

    def _should_log(self, level: LogLevel) -> bool:
        return self._LEVELS[level] >= self._LEVELS[self.level]

    def _write(self, level: LogLevel, message: str, *args: Any) -> None:
        if not self._should_log(level):
            return
        print(f"{self.prefix} {level.value.upper()}: {message}", *args, file=self.stream or sys.stdout)

    def debug(self, message: str, *args: Any) -> None:
        self._write(LogLevel.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self._write(LogLevel.INFO, message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self._write(LogLevel.WARN, message, *args)

    def error(self, message: str, *args: Any) -> None:
        self._write(LogLevel.ERROR, message, *args)

    def set_level(self, level: LogLevel) -> None:
        """Set log level."""
        self.level = level

    def get_level(self) -> LogLevel:
        """Get current log level."""
        return self.level


class StdlibLogger(Logger):
    """
    Forward messages to the standard ``logging`` module.

    Extra positional args are appended to the message, as ConsoleLogger does.
    """

    def __init__(self, name: str = "exrs", logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(name)

    @staticmethod
    def _join(message: str, args: tuple) -> str:
        if not args:
            return message
        return " ".join([message, *(str(arg) for arg in args)])

    def debug(self, message: str, *args: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._join(message, args))

    def info(self, message: str, *args: Any) -> None:
        self._logger.info(self._join(message, args))

    def warn(self, message: str, *args: Any) -> None:
        self._logger.warning(self._join(message, args))

    def error(self, message: str, *args: Any) -> None:
        self._logger.error(self._join(message, args))


class NoopLogger(Logger):
    """No-op logger that discards all log messages."""

    def debug(self, message: str, *args: Any) -> None:
        pass

    def info(self, message: str, *args: Any) -> None:
        pass

    def warn(self, message: str, *args: Any) -> None:
        pass

    def error(self, message: str, *args: Any) -> None:
        pass
