"""
Shared rich consoles and logging setup.

- console: stderr console used for diagnostics and log output.
- stdout: console used by senders that print to the terminal.
- install_logging(level): route the package loggers through rich.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)
stdout = Console()


def install_logging(level=logging.INFO, /, *, console=console, tracebacks=True):
    """
    Attach a RichHandler to the package logger and return it.

    Calling it again replaces the handler installed previously, so hosts can
    change the level or target console at runtime.
    """
    logger = logging.getLogger("commandeer")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=console, rich_tracebacks=tracebacks, show_path=False)
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = (
    "console",
    "stdout",
    "install_logging",
)
