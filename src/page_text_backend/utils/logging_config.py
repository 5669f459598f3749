"""
Logging configuration for the page text backend.

This module provides log level and format selection, a JSON formatter for
machine-readable output, and an audit logger that records every page write
together with the edits that were applied or dropped.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Look up a level by name, falling back to INFO for unknown names."""
        try:
            return cls[name.upper()]
        except KeyError:
            return cls.INFO


class LogFormat(Enum):
    """Log format types."""
    STANDARD = "standard"
    JSON = "json"
    DETAILED = "detailed"


class JSONFormatter(logging.Formatter):
    """
    JSON formatter emitting one object per record.

    Structured values attached to a record as ``extra_data`` are merged into
    the emitted object.
    """

    @lru_cache(maxsize=256)
    def _get_base_log_data(self, name: str, levelname: str, module: str, funcName: str, lineno: int) -> Dict[str, Any]:
        return {
            "logger": name,
            "level": levelname,
            "module": module,
            "function": funcName,
            "line": lineno
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        base_data = self._get_base_log_data(
            record.name, record.levelname, record.module,
            record.funcName, record.lineno
        )

        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "message": record.getMessage(),
            **base_data
        }

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_data, default=str, ensure_ascii=False, separators=(',', ':'))
        except (TypeError, ValueError):
            return json.dumps({
                "timestamp": log_data["timestamp"],
                "level": log_data["level"],
                "logger": log_data["logger"],
                "message": str(record.getMessage()),
                "serialization_error": "Failed to serialize additional data"
            }, separators=(',', ':'))


class LoggingManager:
    """
    Configures the root logger for CLI and library use.

    The standard format renders through rich on stderr. The JSON and detailed
    formats use plain stream handlers so their output stays line-oriented.
    """

    def __init__(
        self,
        log_level: LogLevel = LogLevel.INFO,
        log_format: LogFormat = LogFormat.STANDARD,
        log_file: Optional[Path] = None,
        enable_console: bool = True,
    ):
        self.log_level = log_level
        self.log_format = log_format
        self.log_file = log_file
        self.enable_console = enable_console
        self._setup_root_logger()

    @classmethod
    def from_config(cls, logging_config: Dict[str, Any], verbose: bool = False) -> "LoggingManager":
        """
        Build a manager from the ``logging`` section of the configuration.

        Args:
            logging_config: Mapping with optional ``level`` and ``format`` keys
            verbose: Force DEBUG level regardless of the configured level
        """
        level = LogLevel.DEBUG if verbose else LogLevel.from_name(logging_config.get("level", "INFO"))
        try:
            log_format = LogFormat(logging_config.get("format", "standard"))
        except ValueError:
            log_format = LogFormat.STANDARD
        return cls(log_level=level, log_format=log_format)

    def _setup_root_logger(self) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level.value)
        root_logger.handlers.clear()

        if self.enable_console:
            console_handler = self._create_console_handler()
            console_handler.setLevel(self.log_level.value)
            root_logger.addHandler(console_handler)

        if self.log_file:
            file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            file_handler.setLevel(self.log_level.value)
            file_handler.setFormatter(self._create_formatters()[self.log_format])
            root_logger.addHandler(file_handler)

    def _create_console_handler(self) -> logging.Handler:
        if self.log_format == LogFormat.STANDARD:
            return RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=self.log_level == LogLevel.DEBUG,
            )
        handler = logging.StreamHandler()
        handler.setFormatter(self._create_formatters()[self.log_format])
        return handler

    def _create_formatters(self) -> Dict[LogFormat, logging.Formatter]:
        return {
            LogFormat.STANDARD: logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ),
            LogFormat.JSON: JSONFormatter(),
            LogFormat.DETAILED: logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'
            )
        }


class AuditLogger:
    """
    Logger for page writes.

    Each write is recorded once with the page path, the ids that were applied
    and the ids that were dropped together with the reason.
    """

    def __init__(self, name: str = "page_text_backend.audit"):
        self.logger = logging.getLogger(name)

    def log_page_write(
        self,
        page_path: str,
        applied: List[str],
        dropped: List[Dict[str, str]],
        dry_run: bool = False,
    ) -> None:
        """Record the outcome of an edit batch against one page."""
        if not self.logger.isEnabledFor(logging.INFO):
            return
        action = "Previewed" if dry_run else "Wrote"
        record = self.logger.makeRecord(
            name=self.logger.name,
            level=logging.INFO,
            fn="",
            lno=0,
            msg=f"{action} {page_path}: {len(applied)} applied, {len(dropped)} dropped",
            args=(),
            exc_info=None
        )
        record.extra_data = {
            "page_path": page_path,
            "applied": list(applied),
            "dropped": list(dropped),
            "dry_run": dry_run,
        }
        self.logger.handle(record)
