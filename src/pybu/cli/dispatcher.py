"""CLI dispatcher.

Builds the argument parser and routes to the subcommand handlers.
"""

import argparse
import sys
from typing import Callable

from .common import (
    add_config_args,
    add_loader_args,
    add_verbosity_args,
    create_global_parser,
)


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="pybu",
        description="Load and validate backup plan configurations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)
    add_loader_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    add_config_args(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # config command with subcommands
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Validate, show, or initialize configuration",
    )
    config_subs = config_parser.add_subparsers(dest="config_action")
    # Global options are accepted after the action too
    global_parser = create_global_parser()

    config_subs.add_parser(
        "validate",
        help="Validate configuration file",
        parents=[global_parser],
    )

    show_parser = config_subs.add_parser(
        "show",
        help="Show the resolved configuration",
        parents=[global_parser],
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    init_parser = config_subs.add_parser(
        "init",
        help="Generate example configuration",
        parents=[global_parser],
    )
    init_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )

    return parser


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"pybu {__version__}")
        return 0

    if not args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    handlers: dict[str, Callable] = {
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for pybu CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    return run_subcommand(args)
