"""Exceptions raised while loading and validating a configuration."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Category of a configuration failure."""

    UNREADABLE = "unreadable"
    MALFORMED = "malformed"
    NOT_FOUND = "not-found"
    INVALID_SOURCE = "invalid-source"
    MISSING_SOURCE_TYPE = "missing-source-type"
    INVALID_TARGET = "invalid-target"
    INVALID_CHECK = "invalid-check"
    DUPLICATE_CLEANUP = "duplicate-cleanup"


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(
        self, message: str, kind: ErrorKind, path: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path


class LoadError(ConfigError):
    """The configuration file could not be read or parsed.

    Attributes:
        details: Parser diagnostics, newline-joined in emission order
    """

    def __init__(
        self, message: str, kind: ErrorKind, path: str, details: str = ""
    ) -> None:
        super().__init__(message, kind, path)
        self.details = details
