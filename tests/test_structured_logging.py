"""
TEST_STRUCTURED_LOGGING.PY - Tests for Structured Logging
==========================================================

Tests verify:
1. Correlation ID generation and context
2. correlation_scope restores the previous ID
3. JSON log format structure
4. Text log format

Run with: python -m pytest tests/test_structured_logging.py -v
"""

import json
import logging
import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.structured_logging import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    generate_correlation_id,
    correlation_scope,
    JSONFormatter,
    TextFormatter,
    configure_structured_logging,
)


def make_record(msg="Test message", lineno=42):
    return logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_generate_correlation_id_format(self):
        """Correlation IDs should have the prefix and 12 hex chars."""
        correlation_id = generate_correlation_id()
        assert correlation_id.startswith("req-")
        assert len(correlation_id) == 16  # "req-" + 12 chars

    def test_custom_prefix(self):
        assert generate_correlation_id("batch").startswith("batch-")

    def test_set_and_get_correlation_id(self):
        """Should be able to set and retrieve correlation ID."""
        set_correlation_id("req-test123456")
        assert get_correlation_id() == "req-test123456"
        clear_correlation_id()

    def test_clear_correlation_id(self):
        """Clearing should set correlation ID to None."""
        set_correlation_id("req-test123456")
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_scope_restores_previous(self):
        set_correlation_id("req-outer")
        with correlation_scope("batch") as batch_id:
            assert get_correlation_id() == batch_id
            assert batch_id.startswith("batch-")
        assert get_correlation_id() == "req-outer"

    def test_scope_with_explicit_id(self):
        with correlation_scope(correlation_id="batch-fixed") as batch_id:
            assert batch_id == "batch-fixed"
        assert get_correlation_id() is None


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_json_format_structure(self):
        """JSON log entries should have required fields."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert "timestamp" in parsed
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert parsed["line"] == 42

    def test_json_includes_correlation_id_when_set(self):
        set_correlation_id("batch-abc123def456")
        parsed = json.loads(JSONFormatter().format(make_record()))
        assert parsed["correlation_id"] == "batch-abc123def456"
        clear_correlation_id()

    def test_json_excludes_correlation_id_when_not_set(self):
        clear_correlation_id()
        parsed = json.loads(JSONFormatter().format(make_record()))
        assert "correlation_id" not in parsed

    def test_json_includes_extra_fields(self):
        """JSON should include extra fields from record."""
        record = make_record("Prop graded")
        record.prop_id = "abc123"
        record.sport = "NBA"
        record.tier = "A"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["prop_id"] == "abc123"
        assert parsed["sport"] == "NBA"
        assert parsed["tier"] == "A"

    def test_json_serializes_unknown_types(self):
        record = make_record()
        record.tiers = {"S"}
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["tiers"] == "{'S'}"


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_text_format_structure(self):
        """Text formatter should produce readable output."""
        set_correlation_id("batch-test123456")
        record = make_record()
        record.funcName = "test_func"

        output = TextFormatter().format(record)

        assert "[INFO]" in output
        assert "[batch-test123456]" in output
        assert "test_logger" in output
        assert "Test message" in output
        clear_correlation_id()

    def test_text_without_correlation(self):
        assert "[-]" in TextFormatter().format(make_record())


class TestConfigure:
    """configure_structured_logging installs one handler."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_json_handler(self):
        configure_structured_logging(level="DEBUG", format_type="json")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[-1].formatter, JSONFormatter)

    def test_text_handler(self):
        configure_structured_logging(level="warning", format_type="text")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[-1].formatter, TextFormatter)
        assert logging.getLogger("apscheduler").level == logging.WARNING
