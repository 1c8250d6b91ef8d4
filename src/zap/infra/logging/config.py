from __future__ import annotations

"""
Logging Settings.

A frozen description of where log records go and how they look. The CLI
builds one per run from its --debug and --log-file options.
"""

import logging
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings read by configure_logging().

    Attributes:
        level: Level name such as "INFO"; unknown names mean INFO.
        console: Write records to stderr.
        log_file: Also write records to this rotated file.
        max_bytes: Size at which the log file rolls over.
        backup_count: Rolled-over files kept next to the log file.
        console_fmt: Record format on stderr.
        file_fmt: Record format in the log file.
        datefmt: Timestamp format in the log file.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def for_cli(cls, debug: bool = False, log_file: Optional[str] = None) -> LoggingConfig:
        """Settings for one zap invocation: stderr always, DEBUG on request."""
        return cls(level="DEBUG" if debug else "INFO", console=True, log_file=log_file)

    def level_number(self) -> int:
        """Numeric level for ``level``."""
        value = logging.getLevelName(str(self.level or "").strip().upper())
        return value if isinstance(value, int) else logging.INFO
