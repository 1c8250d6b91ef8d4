from __future__ import annotations

"""
Logging Lifecycle.

The root logger gets a single QueueHandler; a QueueListener thread drains
the queue into the stderr and file sinks, so scanner threads never block
on terminal or disk I/O. configure_logging() runs once per process and
shutdown_logging() undoes it after flushing queued records.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from zap.infra.logging.config import LoggingConfig
from zap.infra.logging.handlers import build_handlers, is_owned_handler, mark_owned

_listener: Optional[QueueListener] = None
_configured: bool = False
_shutdown_registered: bool = False


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Route the root logger through a queue.

    Later calls return at once unless ``force`` is set, in which case the
    current setup is shut down and rebuilt from ``cfg``. If no sink can be
    built the root logger is left as it was. If setup itself fails, a plain
    stderr handler is installed instead.

    Args:
        cfg: Logging settings.
        force: Rebuild even if logging is already configured.

    Returns:
        logging.Logger: The root logger.
    """
    global _configured
    root = logging.getLogger()
    if _configured and not force:
        return root

    shutdown_logging()
    try:
        level = cfg.level_number()
        root.setLevel(level)
        sinks = build_handlers(cfg, level)
        if not sinks:
            return root
        _start_listener(root, sinks)
    except Exception:
        _install_emergency_handler(root)
        return root

    _configured = True
    return root


def shutdown_logging() -> None:
    """Flush and stop the listener, then detach every owned handler."""
    global _listener, _configured
    listener, _listener = _listener, None
    _configured = False

    if listener is not None:
        # stop() fails on a listener whose thread was already joined
        if getattr(listener, "_thread", None) is not None:
            listener.stop()
        for sink in listener.handlers:
            sink.close()

    root = logging.getLogger()
    for handler in [h for h in root.handlers if is_owned_handler(h)]:
        root.removeHandler(handler)
        handler.close()


def active_listener() -> Optional[QueueListener]:
    """Listener started by the last successful configure_logging(), if any."""
    return _listener


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _start_listener(root: logging.Logger, sinks: List[logging.Handler]) -> None:
    global _listener, _shutdown_registered
    records: queue.Queue[logging.LogRecord] = queue.Queue()
    listener = QueueListener(records, *sinks, respect_handler_level=True)
    listener.start()
    _listener = listener
    root.addHandler(mark_owned(QueueHandler(records)))

    if not _shutdown_registered:
        atexit.register(shutdown_logging)
        _shutdown_registered = True


def _install_emergency_handler(root: logging.Logger) -> None:
    root.setLevel(logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
    root.addHandler(mark_owned(handler))
    root.warning("Logging setup failed. Writing directly to stderr.")
