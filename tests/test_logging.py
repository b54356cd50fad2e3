"""
Tests for structured logging.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from shardstore.config import clear_settings_cache
from shardstore.logging import (
    PACKAGE_LOGGER,
    ContextRichHandler,
    get_logger,
    get_operation,
    get_storage_root,
    log_context,
    setup_logging,
)
from shardstore.storage import FileStorage


class _Collector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def collector() -> Generator[_Collector, None, None]:
    """Attach a collecting handler to the package logger."""
    handler = _Collector()
    root = logging.getLogger("shardstore")
    old_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    yield handler
    root.removeHandler(handler)
    root.setLevel(old_level)


class TestLogContext:
    """Tests for scoped context variables."""

    def test_scoped(self) -> None:
        assert get_operation() is None
        with log_context(storage_root="/tmp/x", operation="create"):
            assert get_storage_root() == "/tmp/x"
            assert get_operation() == "create"
            with log_context(operation="delete"):
                assert get_operation() == "delete"
                assert get_storage_root() == "/tmp/x"
            assert get_operation() == "create"
        assert get_operation() is None
        assert get_storage_root() is None


class TestContextLogger:
    """Tests for the logger wrapper."""

    def test_namespaced(self) -> None:
        assert get_logger("custom").name == "shardstore.custom"
        assert get_logger("shardstore.storage").name == "shardstore.storage"

    def test_kwargs_become_extra(self, collector: _Collector) -> None:
        logger = get_logger("shardstore.test")
        with log_context(operation="create"):
            logger.info("hello", reference="abc")

        record = collector.records[-1]
        assert record.getMessage() == "hello"
        assert record.extra == {"operation": "create", "reference": "abc"}  # type: ignore[attr-defined]

    def test_engine_logs_dropped_metadata(self, collector: _Collector, temp_dir: Path) -> None:
        with FileStorage(temp_dir / "logged") as store:
            store.create("n", {"bad": object()})

        messages = [r.getMessage() for r in collector.records]
        assert "Storage opened" in messages
        assert "Dropping unserializable metadata" in messages
        assert "Storage closed" in messages


class TestJSONFile:
    """Tests for the JSON-lines file handler."""

    def test_writes_json_lines(self, temp_dir: Path) -> None:
        log_file = temp_dir / "logs" / "shardstore.jsonl"
        setup_logging(log_level="DEBUG", log_file=log_file, console_output=False)
        logger = get_logger("shardstore.test")
        with log_context(storage_root="/data", operation="delete"):
            logger.warning("removed", reference="abc")

        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        payload = json.loads(lines[-1])
        assert payload["level"] == "WARNING"
        assert payload["message"] == "removed"
        assert payload["storage_root"] == "/data"
        assert payload["operation"] == "delete"
        assert payload["extra"]["reference"] == "abc"


class TestLibraryDefaults:
    """Tests that importing the package leaves logging to the application."""

    def test_import_installs_only_null_handler(self) -> None:
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert package_logger.propagate is True
        assert package_logger.handlers
        assert all(isinstance(h, logging.NullHandler) for h in package_logger.handlers)

    def test_get_logger_does_not_configure(self) -> None:
        before = list(logging.getLogger(PACKAGE_LOGGER).handlers)
        get_logger("shardstore.fresh")
        assert logging.getLogger(PACKAGE_LOGGER).handlers == before

    def test_records_reach_application_handlers(
        self, caplog: pytest.LogCaptureFixture, temp_dir: Path
    ) -> None:
        caplog.set_level(logging.INFO, logger=PACKAGE_LOGGER)
        with FileStorage(temp_dir / "embedded"):
            pass
        assert "Storage opened" in caplog.messages
        assert "Storage closed" in caplog.messages

    def test_setup_logging_is_opt_in(self) -> None:
        setup_logging(log_level="WARNING")
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert package_logger.propagate is False
        assert any(isinstance(h, ContextRichHandler) for h in package_logger.handlers)


class TestLoggingFromSettings:
    """Tests for the LOG_* settings."""

    def test_log_file_setting_writes_json_lines(
        self, mock_env_vars: dict[str, str], temp_dir: Path
    ) -> None:
        log_file = temp_dir / "settings-logs" / "store.jsonl"
        with patch.dict(os.environ, {"SHARDSTORE_LOG_FILE": str(log_file)}):
            clear_settings_cache()
            with FileStorage.from_settings() as store:
                store.create("cats")

        payloads = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        messages = [p["message"] for p in payloads]
        assert "Storage opened" in messages
        assert "Created entry" in messages
        opened = payloads[messages.index("Storage opened")]
        assert opened["operation"] == "open"
        assert opened["storage_root"] == str(store.root)

    def test_level_only_keeps_handlers(self, mock_env_vars: dict[str, str]) -> None:
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        before = list(package_logger.handlers)

        FileStorage.from_settings()

        assert package_logger.level == logging.DEBUG
        assert package_logger.handlers == before
        assert package_logger.propagate is True
