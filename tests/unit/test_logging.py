"""Unit tests for logging configuration."""

from unittest.mock import MagicMock

from antifraud.core.logging import LoggerMixin, get_logger, setup_logging


class TestLoggingSetup:
    """Test logging setup functions."""

    def test_get_logger_returns_structlog_logger(self):
        assert get_logger("antifraud.test") is not None

    def test_setup_logging_with_json_format(self):
        mock_settings = MagicMock()
        mock_settings.app.log_level = "INFO"
        mock_settings.observability.log_record_format = "json"

        setup_logging(mock_settings)

    def test_setup_logging_with_console_format(self):
        for level in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            mock_settings = MagicMock()
            mock_settings.app.log_level = level
            mock_settings.observability.log_record_format = "console"

            setup_logging(mock_settings)


class TestLoggerMixin:
    def test_logger_property(self):
        class Component(LoggerMixin):
            pass

        assert Component().logger is not None
