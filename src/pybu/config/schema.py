"""Configuration schema definitions using dataclasses.

Every record is frozen and hashable, and option maps are read-only views over
a private copy, so callers can keep or hand them on without copying.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional


def _freeze(record: Any, name: str) -> None:
    """Replace a mapping field with a read-only copy."""
    object.__setattr__(record, name, MappingProxyType(dict(getattr(record, name))))


@dataclass(frozen=True)
class AppSettings:
    """Application settings read from the root element.

    ``None`` means the attribute was absent. Callers apply their own
    defaults; nothing is guessed here.

    Attributes:
        bootstrap: Absolute path of the bootstrap file
        verbose: Enable verbose output
        colors: Enable colored output
    """

    bootstrap: Optional[str] = None
    verbose: Optional[bool] = None
    colors: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        """Return only the settings that were present in the document."""
        data = {
            "bootstrap": self.bootstrap,
            "verbose": self.verbose,
            "colors": self.colors,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class RuntimeSettings:
    """Interpreter/environment settings.

    Attributes:
        include_paths: Absolute include paths in document order
        ini: Setting name to value, last occurrence wins
    """

    include_paths: tuple[str, ...] = ()
    ini: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "ini")

    def to_dict(self) -> dict[str, Any]:
        return {"include_paths": list(self.include_paths), "ini": dict(self.ini)}


@dataclass(frozen=True)
class LogSinkConfig:
    """Result-reporting sink definition.

    Attributes:
        type: Sink type, resolved by the sink factory
        options: Sink options; ``target`` is always an absolute path
    """

    type: str
    options: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "options")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "options": dict(self.options)}


@dataclass(frozen=True)
class SourceConfig:
    """Backup source (the dump/export tool to run)."""

    type: str
    options: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "options")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "options": dict(self.options)}


@dataclass(frozen=True)
class TargetConfig:
    """Where the backup artifact is written.

    Attributes:
        dirname: Absolute target directory, or empty
        filename: File name, may contain strftime-style placeholders
        compress: Compressor name, empty for no compression
    """

    dirname: str = ""
    filename: str = ""
    compress: str = ""

    @property
    def is_compressed(self) -> bool:
        return bool(self.compress)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dirname": self.dirname,
            "filename": self.filename,
            "compress": self.compress,
        }


@dataclass(frozen=True)
class CheckConfig:
    """Sanity check run against the produced artifact."""

    type: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class SyncConfig:
    """Transfer of the artifact to a remote location.

    Attributes:
        type: Sync transport type
        skip_on_check_fail: Skip this sync when a sanity check failed
        options: Transport options
    """

    type: str
    skip_on_check_fail: bool = True
    options: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "options")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "skip_on_check_fail": self.skip_on_check_fail,
            "options": dict(self.options),
        }


@dataclass(frozen=True)
class CleanupConfig:
    """Retention policy applied after a run.

    Attributes:
        type: Cleanup strategy type
        skip_on_check_fail: Skip cleanup when a sanity check failed
        skip_on_sync_fail: Skip cleanup when a sync failed
        options: Strategy options
    """

    type: str
    skip_on_check_fail: bool = True
    skip_on_sync_fail: bool = True
    options: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "options")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "skip_on_check_fail": self.skip_on_check_fail,
            "skip_on_sync_fail": self.skip_on_sync_fail,
            "options": dict(self.options),
        }


@dataclass(frozen=True)
class BackupPlan:
    """One backup unit: source, target, checks, syncs and cleanup.

    Attributes:
        name: Plan name, may be empty
        stop_on_error: Abort the whole run if this plan fails
        source: The single source of the plan
        target: The single target of the plan
        checks: Sanity checks in document order
        syncs: Syncs in document order
        cleanup: Cleanup policy, or None if the plan has none
    """

    source: SourceConfig
    target: TargetConfig
    name: str = ""
    stop_on_error: bool = False
    checks: tuple[CheckConfig, ...] = ()
    syncs: tuple[SyncConfig, ...] = ()
    cleanup: Optional[CleanupConfig] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stop_on_error": self.stop_on_error,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "checks": [check.to_dict() for check in self.checks],
            "syncs": [sync.to_dict() for sync in self.syncs],
            "cleanup": self.cleanup.to_dict() if self.cleanup else None,
        }


@dataclass(frozen=True)
class Config:
    """Root configuration object.

    Attributes:
        app: Application settings
        runtime: Interpreter/environment settings
        logging: Result-reporting sinks in document order
        backups: Backup plans in document order
    """

    app: AppSettings = field(default_factory=AppSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    logging: tuple[LogSinkConfig, ...] = ()
    backups: tuple[BackupPlan, ...] = ()

    def get_backup(self, name: str) -> Optional[BackupPlan]:
        """Get the first backup plan with the given name."""
        for plan in self.backups:
            if plan.name == name:
                return plan
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "app": self.app.to_dict(),
            "runtime": self.runtime.to_dict(),
            "logging": [sink.to_dict() for sink in self.logging],
            "backups": [plan.to_dict() for plan in self.backups],
        }
