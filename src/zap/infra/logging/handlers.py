from __future__ import annotations

"""
Logging Sinks.

Builds the stderr and rotating-file handlers drained by the queue listener.
Every handler made here is marked as owned, so a reset only removes what
zap installed and leaves a host application's handlers alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from zap.infra.logging.config import LoggingConfig

_OWNED_MARK = "_zap_owned"


def mark_owned(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED_MARK, True)
    return handler


def is_owned_handler(handler: logging.Handler) -> bool:
    """True for handlers created by zap's logging setup."""
    return bool(getattr(handler, _OWNED_MARK, False))


def build_handlers(cfg: LoggingConfig, level: int) -> List[logging.Handler]:
    """
    Create the sinks requested by ``cfg``.

    An unwritable log file is reported on stderr and skipped; the console
    sink is still returned.

    Args:
        cfg: Logging settings.
        level: Numeric level applied to every sink.

    Returns:
        List[logging.Handler]: Owned sinks, possibly empty.
    """
    sinks: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        sinks.append(console)

    if cfg.log_file:
        log_file = _open_log_file(cfg)
        if log_file is not None:
            sinks.append(log_file)

    for sink in sinks:
        sink.setLevel(level)
        mark_owned(sink)
    return sinks


def _open_log_file(cfg: LoggingConfig) -> Optional[RotatingFileHandler]:
    try:
        os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
        handler = RotatingFileHandler(
            cfg.log_file,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot write log file '{cfg.log_file}': {e}\n")
        return None

    handler.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
    return handler
