"""
Tests for logging configuration and the page write audit log.
"""

import json
import logging

import pytest
from rich.logging import RichHandler

from page_text_backend.utils.logging_config import (
    AuditLogger,
    JSONFormatter,
    LogFormat,
    LoggingManager,
    LogLevel,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingManager:
    """Tests for root logger setup."""

    def test_standard_format_uses_rich(self, restore_root_logger):
        LoggingManager(log_level=LogLevel.WARNING)
        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0], RichHandler)

    def test_json_format_from_config(self, restore_root_logger):
        manager = LoggingManager.from_config({"level": "debug", "format": "json"})
        assert manager.log_level is LogLevel.DEBUG
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_verbose_overrides_level(self, restore_root_logger):
        manager = LoggingManager.from_config({"level": "ERROR"}, verbose=True)
        assert manager.log_level is LogLevel.DEBUG

    def test_unknown_values_fall_back(self, restore_root_logger):
        manager = LoggingManager.from_config({"level": "LOUD", "format": "xml"})
        assert manager.log_level is LogLevel.INFO
        assert manager.log_format is LogFormat.STANDARD

    def test_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "page-text.log"
        LoggingManager(log_format=LogFormat.DETAILED, log_file=log_file, enable_console=False)
        logging.getLogger("page_text_backend.test").info("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")


class TestJSONFormatter:
    """Tests for JSON log records."""

    def test_extra_data_is_merged(self):
        record = logging.LogRecord("page_text_backend", logging.INFO, __file__, 1, "hello %s", ("you",), None)
        record.extra_data = {"page_path": "about.astro"}
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "hello you"
        assert data["level"] == "INFO"
        assert data["page_path"] == "about.astro"


class TestAuditLogger:
    """Tests for the page write audit log."""

    def test_page_write_record(self, caplog):
        with caplog.at_level(logging.INFO, logger="page_text_backend.audit"):
            AuditLogger().log_page_write(
                "about.astro",
                ["text:10"],
                [{"id": "text:99", "reason": "not_found"}],
            )

        record = caplog.records[-1]
        assert record.getMessage() == "Wrote about.astro: 1 applied, 1 dropped"
        assert record.extra_data["dropped"] == [{"id": "text:99", "reason": "not_found"}]

    def test_dry_run_record(self, caplog):
        with caplog.at_level(logging.INFO, logger="page_text_backend.audit"):
            AuditLogger().log_page_write("about.astro", [], [], dry_run=True)
        assert caplog.records[-1].getMessage().startswith("Previewed about.astro")
