"""Shared CLI utilities and argument parsers."""

import argparse

from ..config import CleanupPolicy


def create_global_parser() -> argparse.ArgumentParser:
    """Create a parser with global options that can be used as a parent.

    Options missing from the command line are left unset, so a subcommand
    using this parser as parent keeps the values given before it.
    """
    parser = argparse.ArgumentParser(
        add_help=False, argument_default=argparse.SUPPRESS
    )
    add_verbosity_args(parser)
    add_config_args(parser)
    add_loader_args(parser)
    return parser


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def add_config_args(parser: argparse.ArgumentParser) -> None:
    """Add the configuration file argument to a parser."""
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )


def add_loader_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments controlling how the configuration is loaded."""
    group = parser.add_argument_group("Loader options")
    group.add_argument(
        "-I",
        "--include-path",
        metavar="DIR",
        action="append",
        help="Directory searched for the bootstrap file (repeatable)",
    )
    group.add_argument(
        "--strict-checks",
        action="store_true",
        help="Reject checks without type or value instead of skipping them",
    )
    group.add_argument(
        "--single-cleanup",
        action="store_true",
        help="Reject backups with more than one cleanup block",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"


def get_loader_options(args: argparse.Namespace) -> dict:
    """Build ``load_config`` keyword arguments from parsed arguments."""
    if getattr(args, "single_cleanup", False):
        policy = CleanupPolicy.SINGLE
    else:
        policy = CleanupPolicy.LAST_WINS
    return {
        "search_paths": tuple(getattr(args, "include_path", None) or ()),
        "strict_checks": getattr(args, "strict_checks", False),
        "cleanup_policy": policy,
    }
