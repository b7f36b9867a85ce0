"""
Logging Management Module

Handles centralized logging configuration with dynamic reconfiguration support.
A run starts with console-only logging and switches to console+file logging
once the output directory is known.

Key Features:
    - Singleton-like Behavior: Prevents duplicate handler registration
    - Dynamic Reconfiguration: Adds a rotating file handler when a log dir is given
    - Color Console: ANSI coloring on TTYs only, plain text everywhere else
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final

from ..paths import LOGGER_NAME
from .styles import LogStyle

# Separator characters used to detect decorative lines
_SEPARATOR_CHARS = {"━", "═", "─"}


class ColorFormatter(logging.Formatter):
    """Formatter that applies ANSI colors to console output.

    Colors are applied based on log level and message content:
        - WARNING/ERROR/CRITICAL: yellow/red level prefix
        - Lines with ✓: green
        - Separator lines (━, ═, ─): dim
        - Centered UPPER CASE headers: bold magenta
    """

    _LEVEL_COLORS = {
        logging.WARNING: LogStyle.YELLOW,
        logging.ERROR: LogStyle.RED,
        logging.CRITICAL: LogStyle.RED + LogStyle.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record, coloring only the message text and level name."""
        formatted = super().format(record)
        msg = record.getMessage()

        level_color = self._LEVEL_COLORS.get(record.levelno)
        if level_color:
            formatted = formatted.replace(
                record.levelname,
                f"{level_color}{record.levelname}{LogStyle.RESET}",
                1,
            )
            return self._color_message_only(formatted, msg, level_color)

        if record.levelno == logging.INFO:
            stripped = msg.strip()

            if stripped and all(c in _SEPARATOR_CHARS for c in stripped):
                return self._color_message_only(formatted, msg, LogStyle.DIM)

            if (
                stripped == stripped.upper()
                and len(stripped) > 5
                and any(c.isalpha() for c in stripped)
            ):
                return self._color_message_only(formatted, msg, LogStyle.BOLD + LogStyle.MAGENTA)

            if LogStyle.SUCCESS in msg:
                return self._color_message_only(formatted, msg, LogStyle.GREEN)

        return formatted

    def _color_message_only(self, formatted: str, msg: str, color: str) -> str:
        """Apply *color* only to the message portion of *formatted*."""
        idx = formatted.find(msg)
        if idx == -1 or not msg:
            return formatted
        return f"{formatted[:idx]}{color}{formatted[idx:]}{LogStyle.RESET}"


# LOGGER CLASS
class Logger:
    """
    Manages centralized logging configuration with singleton-like behavior.

    Class-level tracking (``_configured_names``) prevents duplicate handler
    registration, while passing a ``log_dir`` always reconfigures so the file
    handler can be attached once the run directory exists.

    Attributes:
        name (str): Logger identifier (typically LOGGER_NAME)
        log_dir (Path | None): Directory for log file storage
        log_to_file (bool): Enable file logging (requires log_dir)
        level (int): Logging level
        max_bytes (int): Maximum log file size before rotation
        backup_count (int): Number of rotated log files to retain

    Example:
        >>> logger = Logger().get_logger()
        >>> logger = Logger.setup(name=LOGGER_NAME, log_dir=Path("outputs/logs"))
    """

    _configured_names: Final[dict[str, bool]] = {}
    _active_log_file: Path | None = None

    def __init__(
        self,
        name: str = LOGGER_NAME,
        log_dir: Path | None = None,
        log_to_file: bool = True,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        self.name = name
        self.log_dir = log_dir
        self.log_to_file = log_to_file and (log_dir is not None)
        self.level = level
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self._log = logging.getLogger(name)

        if name not in Logger._configured_names or log_dir is not None:
            self._setup_logger()
            Logger._configured_names[name] = True

    def _setup_logger(self) -> None:
        """
        Configures log handlers: console always, rotating file only with a log_dir.

        Existing handlers are closed and removed first so reconfiguration never
        duplicates output.
        """
        fmt_str = "%(asctime)s - %(levelname)s - %(message)s"
        datefmt = "%Y-%m-%d %H:%M:%S"
        plain_formatter = logging.Formatter(fmt_str, datefmt)

        self._log.setLevel(self.level)
        self._log.propagate = False

        if self._log.hasHandlers():
            for handler in self._log.handlers[:]:
                handler.close()
                self._log.removeHandler(handler)

        console_h = logging.StreamHandler(sys.stdout)
        if sys.stdout.isatty():
            console_h.setFormatter(ColorFormatter(fmt_str, datefmt))
        else:
            console_h.setFormatter(plain_formatter)
        self._log.addHandler(console_h)

        if self.log_to_file and self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            filename = self.log_dir / f"{self.name.lower()}_{timestamp}.log"

            file_h = RotatingFileHandler(
                filename, maxBytes=self.max_bytes, backupCount=self.backup_count, encoding="utf-8"
            )
            file_h.setFormatter(plain_formatter)
            self._log.addHandler(file_h)

            Logger._active_log_file = filename

    def get_logger(self) -> logging.Logger:
        """Returns the configured logging.Logger instance."""
        return self._log

    @classmethod
    def get_log_file(cls) -> Path | None:
        """Returns the active log file path, or None when logging to console only."""
        return cls._active_log_file

    @classmethod
    def setup(
        cls, name: str, log_dir: Path | None = None, level: str = "INFO", **kwargs
    ) -> logging.Logger:
        """
        Main entry point for configuring the logger.

        Maps a level name (INFO, DEBUG, ...) to the logging constant. Setting the
        ``DEBUG=1`` environment variable forces DEBUG regardless of ``level``.

        Args:
            name: Logger identifier (typically LOGGER_NAME)
            log_dir: Directory for log file storage (None = console-only mode)
            level: Logging level as string
            **kwargs: Additional arguments passed to the Logger constructor

        Returns:
            Configured logging.Logger instance
        """
        if os.getenv("DEBUG") == "1":
            numeric_level = logging.DEBUG
        else:
            numeric_level = getattr(logging, level.upper(), logging.INFO)

        return cls(name=name, log_dir=log_dir, level=numeric_level, **kwargs).get_logger()


# GLOBAL INSTANCE
# Bootstrap instance (console-only), reconfigured by Logger.setup() once a run starts.
logger: Final[logging.Logger] = Logger().get_logger()
