"""
motivate console utilities

This module provides application-wide access to a Rich Console object for
handling writing to stdout and stderr, plus the logging setup used by the CLI
and the widget loop. Library modules never print; they log through the
standard logging module and the CLI decides where that goes.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

motivate_theme = Theme(
    {
        "warning": "orange_red1",
        "fail": "bold red",
        "confirm": "green",
        "describe": "",
        "remote": "cyan",
        "cache": "yellow",
    }
)

console = Console(theme=motivate_theme)
error_console = Console(theme=motivate_theme, stderr=True)


"""
Formatting helpers
"""


def warn(msg: str):
    """
    Format msg and print to stderr.
    """

    error_console.print(
        f":exclamation_mark-emoji: [bold]warning: [/] {msg}", style="warning"
    )


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f"{msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {msg}", style="fail")


def setup_logging(level="WARNING") -> logging.Handler:
    """
    Route log records from the motivate package to stderr through a RichHandler. Safe to call
    more than once; the previous handler is replaced so repeated CLI invocations in the same
    process (tests) don't stack handlers.
    """

    logger = logging.getLogger("motivate")

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=error_console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return handler
