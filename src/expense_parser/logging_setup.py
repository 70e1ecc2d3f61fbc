"""Centralized logging configuration for the ``expense_parser`` package.

- ``configure_logging(...)``: attach a single ``RichHandler`` to the package
  root logger (``"expense_parser"``). Called once by entrypoints (the CLI).
- ``get_logger(name)``: acquire a logger by name, ensuring that the package
  root logger has at least a ``NullHandler`` attached when not configured.

Library modules never attach their own handlers. They only call
``get_logger("expense_parser.<module>")``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

from rich.console import Console
from rich.logging import RichHandler

_PKG_LOGGER_NAME = "expense_parser"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    # Env override when explicit ``level`` is None
    env_val = os.getenv("EXPENSE_PARSER_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level-name string (e.g., ``"INFO"``). If
        ``None``, defaults to the ``EXPENSE_PARSER_LOG_LEVEL`` environment
        variable when set, otherwise ``logging.INFO``.
    fmt:
        Optional message format. Time and level are rendered by rich.
    stream:
        Output stream for the handler (defaults to ``sys.stderr``).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = RichHandler(
        console=Console(file=stream),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or "%(name)s: %(message)s"))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, ensuring safe defaults for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
