"""Configuration system for pybu.

This module provides XML configuration loading, validation, and schema
definitions for backup plans and their result-reporting sinks.
"""

from .errors import ConfigError, ErrorKind, LoadError
from .loader import Configuration, find_config_file, load_config
from .schema import (
    AppSettings,
    BackupPlan,
    CheckConfig,
    CleanupConfig,
    Config,
    LogSinkConfig,
    RuntimeSettings,
    SourceConfig,
    SyncConfig,
    TargetConfig,
)
from .sections import CleanupPolicy

__all__ = [
    "AppSettings",
    "BackupPlan",
    "CheckConfig",
    "CleanupConfig",
    "CleanupPolicy",
    "Config",
    "Configuration",
    "ConfigError",
    "ErrorKind",
    "LoadError",
    "LogSinkConfig",
    "RuntimeSettings",
    "SourceConfig",
    "SyncConfig",
    "TargetConfig",
    "find_config_file",
    "load_config",
]
