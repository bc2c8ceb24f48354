from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Literal, ClassVar, Union

from errors import ConfigError


@dataclass(frozen=True)
class FileWrite:
    """The watched file changed; new text may be available."""

    file_name: str


@dataclass(frozen=True)
class FileError:
    """The watch layer could not access the file."""

    file_name: str
    reason: str


@dataclass(frozen=True)
class InitialRead:
    """Contents read by the monitor itself right after it started watching."""

    file_name: str
    text: str


Notification = Union[FileWrite, FileError, InitialRead]


@dataclass
class TailConfig:
    """Runtime settings for a tail session."""

    BACKENDS: ClassVar[tuple] = ("polling", "watchdog")
    TRUNCATE_POLICIES: ClassVar[tuple] = ("reset", "resync")
    READ_ERROR_POLICIES: ClassVar[tuple] = ("report", "raise")
    LOG_LEVELS: ClassVar[tuple] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    poll_interval: float = 0.5
    backend: Literal['polling', 'watchdog'] = 'polling'
    on_truncate: Literal['reset', 'resync'] = 'reset'
    on_read_error: Literal['report', 'raise'] = 'report'
    log_level: str = 'INFO'
    log_file: Optional[Path] = None

    def validate(self) -> None:
        """
        Check every field, raising ConfigError on the first invalid value.
        """
        if isinstance(self.poll_interval, bool) or not isinstance(self.poll_interval, (int, float)):
            raise ConfigError(f"poll_interval must be a number, got {self.poll_interval!r}")
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.backend not in self.BACKENDS:
            raise ConfigError(
                f"Unknown backend '{self.backend}'. Expected one of: {', '.join(self.BACKENDS)}"
            )
        if self.on_truncate not in self.TRUNCATE_POLICIES:
            raise ConfigError(
                f"Unknown on_truncate policy '{self.on_truncate}'. "
                f"Expected one of: {', '.join(self.TRUNCATE_POLICIES)}"
            )
        if self.on_read_error not in self.READ_ERROR_POLICIES:
            raise ConfigError(
                f"Unknown on_read_error policy '{self.on_read_error}'. "
                f"Expected one of: {', '.join(self.READ_ERROR_POLICIES)}"
            )
        if str(self.log_level).upper() not in self.LOG_LEVELS:
            raise ConfigError(f"Unknown log level '{self.log_level}'")
