"""Logging setup shared by the ``bap`` entry point and its tests."""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from readbin.constants import DEFAULT_LOG_LEVEL

PLAIN_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def resolve_log_level(log_level: int | str, verbose: bool = False) -> int:
    """Turn a level name into a numeric level, honouring ``--verbose``.

    ``--verbose`` only lowers the level to DEBUG when the level was left at
    its default; an explicit ``--log-level`` wins.
    """
    if isinstance(log_level, int):
        resolved = log_level
    else:
        resolved = getattr(logging, str(log_level).upper(), logging.WARNING)

    if verbose and resolved == getattr(logging, DEFAULT_LOG_LEVEL):
        return logging.DEBUG
    return resolved


def configure_logging(
    log_level: int | str = DEFAULT_LOG_LEVEL,
    verbose: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the root logger with a single console handler.

    Parameters
    ----------
    log_level : int | str, default "WARNING"
        Numeric logging level or level name.
    verbose : bool, default False
        Value of ``--verbose``; lowers a default level to DEBUG.
    stream : TextIO, optional
        Destination of log records, ``sys.stderr`` when omitted.

    Returns
    -------
    logging.Logger
        The configured root logger.

    """
    level = resolve_log_level(log_level, verbose)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # debug output gets timestamps and logger names
    trace_mode = level <= logging.DEBUG
    formatter = logging.Formatter(
        TRACE_FORMAT if trace_mode else PLAIN_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S" if trace_mode else None,
    )

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return root_logger
