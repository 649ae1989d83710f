"""
Unit Tests for Centralized Logging.

Tests the logging configuration, handler wiring and source handling.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from evocli.core.config_schema import LoggingSchema
from evocli.core.logging import (
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    log_with_source,
    setup_logging,
)


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_contains_expected_values(self):
        """Should contain all recognized log source values."""
        assert VALID_SOURCES == frozenset({"cli", "shell", "api", "internal", "unknown"})

    def test_valid_sources_is_frozenset(self):
        """Should be a frozenset (immutable)."""
        assert isinstance(VALID_SOURCES, frozenset)


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture
    def logging_config(self) -> LoggingSchema:
        """Create a logging configuration."""
        return LoggingSchema.model_validate({
            "level": "INFO",
            "format": "json",
            "handlers": {
                "console": {"enabled": True},
                "file": {"enabled": False, "path": "logs/evocli.jsonl"},
            },
        })

    def test_configures_root_level(self, logging_config):
        """Should configure the root logger with the requested level."""
        with patch("evocli.core.logging._get_logging_config", return_value=logging_config):
            setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_uses_config_defaults(self, logging_config):
        """Should use values from logging.yaml when not overridden."""
        with patch("evocli.core.logging._get_logging_config", return_value=logging_config):
            setup_logging()

        assert logging.getLogger().level == logging.INFO

    def test_console_handler_writes_to_stderr(self, logging_config):
        """Should log to stderr so results on stdout stay clean."""
        with patch("evocli.core.logging._get_logging_config", return_value=logging_config):
            setup_logging(format_type="console")

        streams = [
            h.stream for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler
        ]
        assert streams == [sys.stderr]

    def test_console_can_be_disabled(self, logging_config):
        """Should install no handlers when every output is off."""
        with patch("evocli.core.logging._get_logging_config", return_value=logging_config):
            setup_logging(enable_console=False, enable_file_logging=False)

        assert logging.getLogger().handlers == []

    def test_file_logging_enabled(self, tmp_path, logging_config):
        """Should create a single RotatingFileHandler for the JSONL file."""
        log_file = tmp_path / "logs" / "evocli.jsonl"

        with patch("evocli.core.logging._get_logging_config", return_value=logging_config), \
             patch("evocli.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_console=False, enable_file_logging=True)

        handlers = logging.getLogger().handlers
        assert [type(h) for h in handlers] == [RotatingFileHandler]
        assert log_file.parent.is_dir()

    def test_quiets_httpx(self, logging_config):
        """Should keep httpx request lines out of INFO output."""
        with patch("evocli.core.logging._get_logging_config", return_value=logging_config):
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_structlog_logger(self):
        """Should return a structlog logger."""
        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self, mock_logger: MagicMock):
        """Should add source field to log call."""
        log_with_source(mock_logger, "api", "info", "API request", path="/Evo/Plan")

        mock_logger.info.assert_called_once_with("API request", source="api", path="/Evo/Plan")

    def test_supports_different_levels(self, mock_logger: MagicMock):
        """Should dispatch to the named level."""
        for level in ["debug", "info", "warning", "error"]:
            log_with_source(mock_logger, "shell", level, f"Test {level}")
            getattr(mock_logger, level).assert_called_once()

    def test_raises_on_invalid_level(self):
        """Should raise AttributeError for invalid log levels (no fallback)."""
        logger = get_logger("test")

        with pytest.raises(AttributeError):
            log_with_source(logger, "cli", "nonexistent_level", "Test")


class TestResolveLogPath:
    """Tests for _resolve_log_path function."""

    def test_relative_to_project_root(self, tmp_path):
        """Should resolve path relative to project root."""
        with patch("evocli.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/evocli.jsonl") == tmp_path / "logs" / "evocli.jsonl"

    def test_relative_to_cwd_outside_project(self, tmp_path, monkeypatch):
        """Should fall back to the working directory."""
        monkeypatch.chdir(tmp_path)
        with patch("evocli.core.logging.find_project_root", return_value=None):
            assert _resolve_log_path("logs/evocli.jsonl") == tmp_path / "logs" / "evocli.jsonl"

    def test_absolute_path_unchanged(self, tmp_path):
        """Should keep absolute paths as they are."""
        assert _resolve_log_path(str(tmp_path / "x.jsonl")) == tmp_path / "x.jsonl"
