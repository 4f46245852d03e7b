"""
Logging Management Module

One turnstile run logs through a single named logger. Importing this
module gives it a console handler on stderr so errors raised before
orchestration (bad flags, bad YAML) are still reported; RootOrchestrator
then reconfigures it once with the run's level and optional log directory,
and detaches the file handler on teardown.

stdout is never written to: it belongs to the launched command.
"""

# Standard Imports
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional

# Internal Imports
from ..paths import LOGGER_NAME

LOG_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


# LOGGER CLASS
class Logger:
    """
    Static helpers configuring the run logger.

    Every call to ``setup`` replaces the handlers it finds, so configuring
    the same name twice never duplicates output.

    Example:
        >>> log = Logger.setup(name=LOGGER_NAME, log_dir=Path("/var/log/turnstile"))
        >>> log.info("Waiting for devices")
    """

    @staticmethod
    def resolve_level(level: str) -> int:
        """
        Maps a level name to its numeric value.

        ``DEBUG=1`` in the environment wins over the requested level;
        unknown names fall back to INFO.
        """
        if os.getenv("DEBUG") == "1":
            return logging.DEBUG
        return getattr(logging, level.upper(), logging.INFO)

    @staticmethod
    def session_log_name(name: str, pid: Optional[int] = None) -> str:
        """
        File name of one run's log.

        Several instances usually wait side by side and share one log
        directory, so the pid is part of the name next to the UTC start time.
        """
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        return f"{name}_{timestamp}_{os.getpid() if pid is None else pid}.log"

    @staticmethod
    def close_file_handlers(log: logging.Logger) -> None:
        """Flushes, closes and detaches file handlers; the console stays."""
        for handler in log.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                log.removeHandler(handler)

    @classmethod
    def setup(
        cls,
        name: str,
        log_dir: Optional[Path] = None,
        level: str = "INFO",
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Configures ``name`` with a stderr console handler and, when
        ``log_dir`` is given, a rotating file handler.

        Args:
            name: Logger identifier (typically LOGGER_NAME)
            log_dir: Directory for the run log (None = console only)
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL
            max_bytes: Log file size before rotation
            backup_count: Rotated files kept

        Returns:
            The configured logging.Logger
        """
        log = logging.getLogger(name)
        log.setLevel(cls.resolve_level(level))
        log.propagate = False

        for handler in log.handlers[:]:
            handler.close()
            log.removeHandler(handler)

        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        log.addHandler(console)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / cls.session_log_name(name),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)

        return log


# Console-only until RootOrchestrator applies the run configuration.
logger: Final[logging.Logger] = Logger.setup(LOGGER_NAME)
