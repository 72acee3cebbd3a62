"""Extraction of configuration records from the parsed document.

Example document::

    <pybu bootstrap="backup/bootstrap.py" verbose="true">
      <runtime>
        <includePath>.</includePath>
        <ini name="max_execution_time" value="0"/>
      </runtime>
      <logging>
        <log type="json" target="logs/backup.json"/>
      </logging>
      <backups>
        <backup name="db" stopOnError="true">
          <source type="mysql">
            <option name="databases" value="dbname"/>
          </source>
          <target dirname="backup" filename="dump-%Y%m%d.sql" compress="bzip2"/>
          <check type="sizemin" value="10M"/>
          <sync type="rsync" skipOnCheckFail="false">
            <option name="path" value="backup.example.com:/backups"/>
          </sync>
          <cleanup type="quantity">
            <option name="amount" value="50"/>
          </cleanup>
        </backup>
      </backups>
    </pybu>

Only direct children are matched, element and attribute names are case
sensitive.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from enum import Enum
from typing import Optional

from .coerce import to_boolean
from .document import RawDocument
from .errors import ConfigError, ErrorKind
from .paths import to_absolute_path
from .schema import (
    AppSettings,
    BackupPlan,
    CheckConfig,
    CleanupConfig,
    LogSinkConfig,
    RuntimeSettings,
    SourceConfig,
    SyncConfig,
    TargetConfig,
)

logger = logging.getLogger(__name__)


class CleanupPolicy(Enum):
    """How a backup with several cleanup blocks is treated."""

    # Keep the last block and warn, matches historic behavior
    LAST_WINS = "last-wins"
    # Reject the backup
    SINGLE = "single"


def _attr(node: ET.Element, name: str) -> str:
    return node.get(name, "")


def get_options(node: ET.Element) -> dict[str, str]:
    """Collect the ``option`` children of a node, last name wins."""
    options = {}
    for option_node in node.findall("option"):
        options[_attr(option_node, "name")] = _attr(option_node, "value")
    return options


def extract_app_settings(
    document: RawDocument, search_paths: Iterable[str] = ()
) -> AppSettings:
    """Get the application settings from the root element attributes."""
    root = document.root

    bootstrap = None
    if "bootstrap" in root.attrib:
        bootstrap = to_absolute_path(
            root.attrib["bootstrap"],
            document.base_dir,
            use_search_path=True,
            search_paths=search_paths,
        )

    verbose = None
    if "verbose" in root.attrib:
        verbose = to_boolean(root.attrib["verbose"], False)

    colors = None
    if "colors" in root.attrib:
        colors = to_boolean(root.attrib["colors"], False)

    return AppSettings(bootstrap=bootstrap, verbose=verbose, colors=colors)


def extract_runtime_settings(document: RawDocument) -> RuntimeSettings:
    """Get include paths and ini settings from the ``runtime`` section."""
    include_paths = []
    for include_node in document.root.findall("runtime/includePath"):
        path = (include_node.text or "").strip()
        if path:
            include_paths.append(to_absolute_path(path, document.base_dir))

    ini = {}
    for ini_node in document.root.findall("runtime/ini"):
        ini[_attr(ini_node, "name")] = _attr(ini_node, "value")

    return RuntimeSettings(include_paths=tuple(include_paths), ini=ini)


def extract_logging_settings(document: RawDocument) -> list[LogSinkConfig]:
    """Get the result-reporting sinks from the ``logging`` section.

    The sink type is passed through unchecked, the sink factory validates it.
    A ``target`` given as attribute or as option is made absolute.
    """
    sinks = []
    for log_node in document.root.findall("logging/log"):
        options = {}
        target = _attr(log_node, "target")
        if target:
            options["target"] = to_absolute_path(target, document.base_dir)

        for name, value in get_options(log_node).items():
            if name == "target":
                value = to_absolute_path(value, document.base_dir)
            options[name] = value

        sinks.append(LogSinkConfig(type=_attr(log_node, "type"), options=options))
    return sinks


def _parse_source(backup_node: ET.Element) -> SourceConfig:
    source_nodes = backup_node.findall("source")
    if len(source_nodes) != 1:
        raise ConfigError(
            f"backup requires exactly one source config, found {len(source_nodes)}",
            ErrorKind.INVALID_SOURCE,
        )

    source_node = source_nodes[0]
    source_type = _attr(source_node, "type")
    if not source_type:
        raise ConfigError(
            "source requires type attribute", ErrorKind.MISSING_SOURCE_TYPE
        )
    return SourceConfig(type=source_type, options=get_options(source_node))


def _parse_target(backup_node: ET.Element, base_dir: str) -> TargetConfig:
    target_nodes = backup_node.findall("target")
    if len(target_nodes) != 1:
        raise ConfigError(
            f"backup requires exactly one target config, found {len(target_nodes)}",
            ErrorKind.INVALID_TARGET,
        )

    target_node = target_nodes[0]
    dirname = _attr(target_node, "dirname")
    if dirname:
        dirname = to_absolute_path(dirname, base_dir)

    return TargetConfig(
        dirname=dirname,
        filename=_attr(target_node, "filename"),
        compress=_attr(target_node, "compress"),
    )


def _parse_checks(backup_node: ET.Element, strict: bool) -> tuple[CheckConfig, ...]:
    checks = []
    for check_node in backup_node.findall("check"):
        check_type = _attr(check_node, "type")
        value = _attr(check_node, "value")
        if not check_type or not value:
            if strict:
                raise ConfigError(
                    "check requires type and value attributes",
                    ErrorKind.INVALID_CHECK,
                )
            logger.debug(
                "Skipping invalid check (type=%r, value=%r)", check_type, value
            )
            continue
        checks.append(CheckConfig(type=check_type, value=value))
    return tuple(checks)


def _parse_syncs(backup_node: ET.Element) -> tuple[SyncConfig, ...]:
    return tuple(
        SyncConfig(
            type=_attr(sync_node, "type"),
            skip_on_check_fail=to_boolean(_attr(sync_node, "skipOnCheckFail"), True),
            options=get_options(sync_node),
        )
        for sync_node in backup_node.findall("sync")
    )


def _parse_cleanup(
    backup_node: ET.Element, name: str, policy: CleanupPolicy
) -> Optional[CleanupConfig]:
    cleanup_nodes = backup_node.findall("cleanup")
    if len(cleanup_nodes) > 1:
        if policy is CleanupPolicy.SINGLE:
            raise ConfigError(
                f"backup '{name}' has {len(cleanup_nodes)} cleanup configs, "
                "at most one is allowed",
                ErrorKind.DUPLICATE_CLEANUP,
            )
        logger.warning(
            "Backup '%s' has %d cleanup configs, only the last one is used",
            name,
            len(cleanup_nodes),
        )

    cleanup = None
    for cleanup_node in cleanup_nodes:
        cleanup = CleanupConfig(
            type=_attr(cleanup_node, "type"),
            skip_on_check_fail=to_boolean(
                _attr(cleanup_node, "skipOnCheckFail"), True
            ),
            skip_on_sync_fail=to_boolean(_attr(cleanup_node, "skipOnSyncFail"), True),
            options=get_options(cleanup_node),
        )
    return cleanup


def parse_backup(
    backup_node: ET.Element,
    base_dir: str,
    strict_checks: bool = False,
    cleanup_policy: CleanupPolicy = CleanupPolicy.LAST_WINS,
) -> BackupPlan:
    """Build the plan for a single ``backup`` element.

    Raises:
        ConfigError: If the source or target is missing or ambiguous, or a
            strict-mode rule is violated
    """
    stop_on_error = to_boolean(_attr(backup_node, "stopOnError"), False)
    name = _attr(backup_node, "name")

    return BackupPlan(
        name=name,
        stop_on_error=stop_on_error,
        source=_parse_source(backup_node),
        target=_parse_target(backup_node, base_dir),
        checks=_parse_checks(backup_node, strict_checks),
        syncs=_parse_syncs(backup_node),
        cleanup=_parse_cleanup(backup_node, name, cleanup_policy),
    )


def extract_backup_settings(
    document: RawDocument,
    strict_checks: bool = False,
    cleanup_policy: CleanupPolicy = CleanupPolicy.LAST_WINS,
) -> list[BackupPlan]:
    """Get all backup plans in document order.

    The first invalid plan aborts the whole extraction, no partial list is
    returned.
    """
    plans = []
    for backup_node in document.root.findall("backups/backup"):
        try:
            plans.append(
                parse_backup(
                    backup_node, document.base_dir, strict_checks, cleanup_policy
                )
            )
        except ConfigError as e:
            if e.path is None:
                e.path = document.path
            raise
    return plans
