"""Config command: Configuration management."""

import argparse
import json
import logging

from rich.console import Console
from rich.table import Table

from ..__logger__ import create_logger
from ..config import (
    AppSettings,
    Config,
    ConfigError,
    TargetConfig,
    find_config_file,
    load_config,
)
from ..config.loader import generate_example_config
from .common import get_loader_options, get_log_level

logger = logging.getLogger(__name__)


def execute_config(args: argparse.Namespace) -> int:
    """Execute the config command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    log_level = get_log_level(args)
    create_logger(level=log_level)

    action = getattr(args, "config_action", None)

    if action == "validate":
        return _validate_config(args)
    elif action == "show":
        return _show_config(args)
    elif action == "init":
        return _init_config(args)
    else:
        print("Usage: pybu config <validate|show|init>")
        return 1


def _load(args: argparse.Namespace):
    """Find and load the configuration, or return None after reporting why."""
    config_path = find_config_file(getattr(args, "config", None))
    if config_path is None:
        print("No configuration file found.")
        print("Searched locations:")
        print("  ./pybu.xml")
        print("  ./pybu.xml.dist")
        print("  ~/.config/pybu/pybu.xml")
        print("  /etc/pybu/pybu.xml")
        return None

    logger.debug("Loading configuration from: %s", config_path)
    config, warnings = load_config(config_path, **get_loader_options(args))
    _apply_app_settings(args, config.app)
    return config_path, config, warnings


def _apply_app_settings(args: argparse.Namespace, app: AppSettings) -> None:
    """Reconfigure logging from the verbose and colors settings of the file.

    Command line flags win: the file can only raise the default INFO level.
    """
    level = get_log_level(args)
    if app.verbose and level == "INFO":
        level = "DEBUG"
    colors = app.colors if app.colors is not None else True
    create_logger(level=level, colors=colors)


def _validate_config(args: argparse.Namespace) -> int:
    """Validate configuration file."""
    try:
        loaded = _load(args)
        if loaded is None:
            return 1
        config_path, config, warnings = loaded

        print(f"Validating: {config_path}")

        if warnings:
            print("")
            print("Warnings:")
            for warning in warnings:
                print(f"  - {warning}")

        print("")
        print("Configuration is valid.")
        print(f"  Backups: {len(config.backups)}")
        print(f"  Syncs: {sum(len(plan.syncs) for plan in config.backups)}")
        print(f"  Log sinks: {len(config.logging)}")

        return 0

    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1


def _show_config(args: argparse.Namespace) -> int:
    """Show the resolved configuration."""
    try:
        loaded = _load(args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    if loaded is None:
        return 1
    _, config, _ = loaded

    if getattr(args, "json", False):
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    colors = config.app.colors if config.app.colors is not None else True
    Console(no_color=not colors).print(_backups_table(config))
    return 0


def _backups_table(config: Config) -> Table:
    table = Table(title="Backups")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Target")
    table.add_column("Checks", justify="right")
    table.add_column("Syncs")
    table.add_column("Cleanup")

    for plan in config.backups:
        table.add_row(
            plan.name or "-",
            plan.source.type,
            _format_target(plan.target),
            str(len(plan.checks)),
            ", ".join(sync.type for sync in plan.syncs) or "-",
            plan.cleanup.type if plan.cleanup else "-",
        )
    return table


def _format_target(target: TargetConfig) -> str:
    if target.dirname:
        text = target.dirname.rstrip("/") + "/" + target.filename
    else:
        text = target.filename or "-"
    if target.is_compressed:
        text += f" ({target.compress})"
    return text


def _init_config(args: argparse.Namespace) -> int:
    """Generate example configuration."""
    content = generate_example_config()

    output = getattr(args, "output", None)
    if output:
        try:
            with open(output, "w") as f:
                f.write(content)
            print(f"Example configuration written to: {output}")
        except OSError as e:
            print(f"Error writing file: {e}")
            return 1
    else:
        print(content)

    return 0
