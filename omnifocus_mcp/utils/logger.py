"""Shared logger initialization for the bridge, the server and the CLI.

Usage:
    from omnifocus_mcp.utils.logger import get_logger
    log = get_logger(__name__)
    log.info("message")

Everything goes to stderr: stdout belongs to the MCP stdio transport.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(message)s"  # rich handler already adds time & level

_DEFAULT_HANDLER = RichHandler(
    console=Console(stderr=True),
    rich_tracebacks=True,
    markup=False,
    show_path=False,
)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Idempotently configure root logger with a nicer handler."""
    root = logging.getLogger()
    if _DEFAULT_HANDLER in root.handlers:
        root.setLevel(level)
        _DEFAULT_HANDLER.setLevel(level)
        return
    root.setLevel(level)
    _DEFAULT_HANDLER.setLevel(level)
    _DEFAULT_HANDLER.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(_DEFAULT_HANDLER)


def get_logger(name: str = __name__, level: Optional[int] = None) -> logging.Logger:
    """Return a module-level logger."""
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
