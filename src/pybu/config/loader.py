"""XML configuration loading and validation.

Handles config file discovery, the ``Configuration`` facade over a loaded
document, and non-fatal validation warnings.
"""

import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from .coerce import to_bytes, to_duration
from .document import load_document
from .errors import ConfigError, ErrorKind
from .schema import (
    AppSettings,
    BackupPlan,
    Config,
    LogSinkConfig,
    RuntimeSettings,
)
from .sections import (
    CleanupPolicy,
    extract_app_settings,
    extract_backup_settings,
    extract_logging_settings,
    extract_runtime_settings,
)

CONFIG_FILENAME = "pybu.xml"

# Config file search paths in priority order
CONFIG_PATHS = [
    Path(CONFIG_FILENAME),
    Path(CONFIG_FILENAME + ".dist"),
    Path.home() / ".config" / "pybu" / CONFIG_FILENAME,
    Path("/etc/pybu") / CONFIG_FILENAME,
]

# Cleanup options checked by _validate_config, grouped by expected format
SIZE_OPTIONS = frozenset({"size"})
DURATION_OPTIONS = frozenset({"older"})
COUNT_OPTIONS = frozenset({"amount"})


class Configuration:
    """Wrapper around a loaded configuration file.

    The file is read and parsed once on construction. The ``get_*`` methods
    are read-only queries that build fresh records on every call, so they
    can be called repeatedly, in any order and from several threads.
    """

    def __init__(
        self,
        filename: str | os.PathLike,
        *,
        search_paths: Iterable[str] = (),
        strict_checks: bool = False,
        cleanup_policy: CleanupPolicy = CleanupPolicy.LAST_WINS,
    ) -> None:
        """Load the configuration.

        Args:
            filename: Path to the XML configuration file
            search_paths: Directories scanned for a bootstrap file not found
                next to the configuration
            strict_checks: Reject checks missing type or value instead of
                dropping them
            cleanup_policy: How backups with several cleanup blocks are treated

        Raises:
            LoadError: If the file cannot be read or parsed
        """
        self._document = load_document(filename)
        self._search_paths = tuple(search_paths)
        self._strict_checks = strict_checks
        self._cleanup_policy = cleanup_policy

    @property
    def filename(self) -> str:
        """Absolute path of the configuration file."""
        return self._document.path

    @property
    def base_dir(self) -> str:
        return self._document.base_dir

    def get_app_settings(self) -> AppSettings:
        return extract_app_settings(self._document, self._search_paths)

    def get_runtime_settings(self) -> RuntimeSettings:
        return extract_runtime_settings(self._document)

    def get_logging_settings(self) -> list[LogSinkConfig]:
        return extract_logging_settings(self._document)

    def get_backup_settings(self) -> list[BackupPlan]:
        """Get the backup plans.

        Raises:
            ConfigError: If any plan has an invalid source or target
        """
        return extract_backup_settings(
            self._document, self._strict_checks, self._cleanup_policy
        )

    def to_config(self) -> Config:
        """Extract every section into a single ``Config``."""
        return Config(
            app=self.get_app_settings(),
            runtime=self.get_runtime_settings(),
            logging=tuple(self.get_logging_settings()),
            backups=tuple(self.get_backup_settings()),
        )


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(
            f"Config file not found: {explicit_path}",
            ErrorKind.NOT_FOUND,
            explicit_path,
        )

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.backups:
        warnings.append("No backups configured")

    names = [plan.name for plan in config.backups if plan.name]
    for name in sorted({n for n in names if names.count(n) > 1}):
        warnings.append(f"Duplicate backup name '{name}'")

    for index, plan in enumerate(config.backups):
        label = plan.name or f"#{index + 1}"

        if not plan.target.dirname:
            warnings.append(f"Backup '{label}' has no target dirname")
        if not plan.target.filename:
            warnings.append(f"Backup '{label}' has no target filename")

        for check in plan.checks:
            if check.type.lower() == "sizemin" and to_bytes(check.value) is None:
                warnings.append(
                    f"Backup '{label}': check value '{check.value}' is not a size"
                )

        for sync in plan.syncs:
            if not sync.type:
                warnings.append(f"Backup '{label}' has a sync without type")

        if plan.cleanup is not None:
            warnings.extend(_validate_cleanup_options(label, plan.cleanup.options))

    for sink in config.logging:
        if not sink.type:
            warnings.append("Log sink without type")

    return warnings


def _validate_cleanup_options(label: str, options: Mapping[str, str]) -> list[str]:
    warnings = []
    for name, value in options.items():
        if name in SIZE_OPTIONS and to_bytes(value) is None:
            warnings.append(f"Backup '{label}': cleanup {name} '{value}' is not a size")
        elif name in DURATION_OPTIONS and to_duration(value) is None:
            warnings.append(
                f"Backup '{label}': cleanup {name} '{value}' is not a duration"
            )
        elif name in COUNT_OPTIONS and not value.strip().isdigit():
            warnings.append(
                f"Backup '{label}': cleanup {name} '{value}' is not a number"
            )
    return warnings


def load_config(
    path: Path | str,
    *,
    search_paths: Iterable[str] = (),
    strict_checks: bool = False,
    cleanup_policy: CleanupPolicy = CleanupPolicy.LAST_WINS,
) -> tuple[Config, list[str]]:
    """Load and validate configuration from an XML file.

    Args:
        path: Path to configuration file
        search_paths: Directories scanned for the bootstrap file
        strict_checks: Reject incomplete checks
        cleanup_policy: How backups with several cleanup blocks are treated

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    configuration = Configuration(
        path,
        search_paths=search_paths,
        strict_checks=strict_checks,
        cleanup_policy=cleanup_policy,
    )
    config = configuration.to_config()

    return config, _validate_config(config)


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<!-- pybu configuration, relative paths are relative to this file -->
<pybu verbose="false" colors="true">

  <runtime>
    <includePath>.</includePath>
    <ini name="max_execution_time" value="0"/>
  </runtime>

  <logging>
    <log type="json" target="logs/backup.json"/>
  </logging>

  <backups>
    <backup name="database" stopOnError="true">
      <source type="mysql">
        <option name="databases" value="dbname"/>
      </source>

      <!-- filename may use strftime placeholders -->
      <target dirname="backup/mysql" filename="mysqldump-%Y%m%d-%H%M.sql" compress="bzip2"/>

      <check type="sizemin" value="10M"/>

      <sync type="rsync" skipOnCheckFail="true">
        <option name="path" value="backup@example.com:/backups"/>
      </sync>

      <!-- keep at most one cleanup block per backup -->
      <cleanup type="outdated" skipOnCheckFail="true" skipOnSyncFail="true">
        <option name="older" value="2W"/>
      </cleanup>
    </backup>
  </backups>
</pybu>
"""
