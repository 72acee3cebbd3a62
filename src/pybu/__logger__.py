# pyright: standard

"""pybu: pybu/__logger__.py
A common logger for displaying through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console(stderr=True)
rich_handler = RichHandler(console=cons, show_path=False)


def create_logger(level: str = "INFO", colors: bool = True) -> None:
    """Helper function to route all pybu loggers through rich."""
    # pylint: disable=global-statement
    global cons, rich_handler

    cons = Console(stderr=True, no_color=not colors)
    rich_handler = RichHandler(console=cons, show_path=False)

    logging.basicConfig(
        format="%(message)s",
        datefmt="%H:%M:%S",
        level=level,
        handlers=[rich_handler],
        force=True,
    )
