#!/usr/bin/env python3
"""
Tests for Error Handling Utility Module
"""

import logging
from unittest.mock import MagicMock

import pytest

from metric_standards.utils.error_handling import log_and_continue


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing log calls."""
    return MagicMock(spec=logging.Logger)


class TestLogAndContinue:
    """Test suite for log_and_continue() function."""

    def test_logs_at_warning_level(self, mock_logger):
        """Test that log_and_continue logs at WARNING level."""
        error = ValueError("bad displayType")

        log_and_continue(mock_logger, error, {"metric_id": "cost_token_totalCost"}, "Metric import")

        mock_logger.warning.assert_called_once()
        message = mock_logger.warning.call_args[0][0]
        assert message == "Metric import failed: bad displayType"

    def test_includes_structured_context(self, mock_logger):
        """Test that structured context is included in log extra."""
        context = {"file": "src/a.ts"}

        log_and_continue(mock_logger, UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid"), context, "File read")

        extra = mock_logger.warning.call_args[1]["extra"]
        assert extra["error_type"] == "File read"
        assert extra["exception_class"] == "UnicodeDecodeError"
        assert extra["context"] == context

    def test_default_error_type(self, mock_logger):
        """Test the generic operation label."""
        log_and_continue(mock_logger, KeyError("unit"), {})

        assert mock_logger.warning.call_args[0][0].startswith("Operation failed:")

    def test_returns_none(self, mock_logger):
        """Test that nothing is raised or returned."""
        assert log_and_continue(mock_logger, OSError("gone"), {}) is None
        mock_logger.error.assert_not_called()

    def test_real_logger(self, caplog):
        """Test the record reaches a real logger with its extra attributes."""
        logger = logging.getLogger("metric_standards.tests.error_handling")

        with caplog.at_level(logging.WARNING):
            log_and_continue(logger, TypeError("expected an object"), {"index": 3}, "Metric import")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.exception_class == "TypeError"
        assert record.context == {"index": 3}
