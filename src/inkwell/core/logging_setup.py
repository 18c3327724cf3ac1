"""Logging configuration for the inkwell CLI."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging"]

_LOG_LEVEL_ENV = "INKWELL_LOG_LEVEL"
_DEFAULT_LEVEL_NAME = "WARNING"

# Log records go to stderr so --json output stays parseable
err_console = Console(stderr=True)


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    level_name = os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME).upper()
    return getattr(logging, level_name, logging.WARNING)


def configure_logging(verbose: bool = False) -> None:
    """Install a single Rich handler on the root logger."""
    root_logger = logging.getLogger()

    handler = next(
        (h for h in root_logger.handlers if getattr(h, "_inkwell_managed", False)),
        None,
    )
    if handler is None:
        handler = RichHandler(
            console=err_console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._inkwell_managed = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(verbose))
