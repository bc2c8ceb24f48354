# src/errors.py

from typing import Optional

class AppError(Exception):
    """
    Base exception for tailwatch.
    All other exceptions should inherit from this.
    """
    def __init__(self, message: str, *, underlying: Optional[Exception] = None):
        super().__init__(message)
        self.underlying = underlying

    def __str__(self):
        if self.underlying:
            return f"{self.args[0]} (caused by {self.underlying})"
        return self.args[0]


class TailReadError(AppError):
    """
    Raised when the tailed file cannot be opened, sought or read.
    """

    @property
    def reason(self) -> str:
        """Short human-readable cause, suitable for a reporter line."""
        if self.underlying is not None:
            strerror = getattr(self.underlying, "strerror", None)
            if strerror:
                return strerror
            return str(self.underlying)
        return self.args[0]


class WatchError(AppError):
    """
    Raised when a file watcher backend cannot be created or started.
    """


class ConfigError(AppError):
    """
    Raised when the configuration file or CLI overrides fail validation.
    """
