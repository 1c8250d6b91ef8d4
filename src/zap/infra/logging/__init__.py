from __future__ import annotations

from .config import LoggingConfig
from .core import active_listener, configure_logging, get_logger, shutdown_logging
from .handlers import is_owned_handler

__all__ = [
    "LoggingConfig",
    "active_listener",
    "configure_logging",
    "get_logger",
    "is_owned_handler",
    "shutdown_logging",
]
