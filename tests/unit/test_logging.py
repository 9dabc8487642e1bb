"""Unit tests for logging setup and context-bound loggers."""

import io
import json
import logging

import pytest

from aicgen.utils.logging import (
    ROOT_LOGGER_NAME,
    ContextLogger,
    HumanFormatter,
    JSONFormatter,
    LogMode,
    VerboseFormatter,
    bind_logger,
    configure_from_cli,
    setup_logging,
)


def make_record(message: str = "hello", **extra_data: object) -> logging.LogRecord:
    record = logging.LogRecord("aicgen.test", logging.INFO, __file__, 1, message, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


class TestFormatters:
    """Tests for the three output formats."""

    def test_human_format(self) -> None:
        """Test level prefix and trailing context."""
        formatter = HumanFormatter(use_colors=False)

        assert formatter.format(make_record(provider="claude")) == "[INFO] hello provider=claude"
        assert formatter.format(make_record()) == "[INFO] hello"

    def test_human_format_colors(self) -> None:
        """Test that colored output wraps the level."""
        assert HumanFormatter(use_colors=True).format(make_record()).startswith("\033[32m[INFO]")

    def test_verbose_format(self) -> None:
        """Test the timestamped format."""
        line = VerboseFormatter(use_colors=False).format(make_record(duration_ms=12))

        assert line.startswith("[INFO][")
        assert line.endswith("] hello duration_ms=12")

    def test_json_format(self) -> None:
        """Test that context fields become top-level JSON keys."""
        data = json.loads(JSONFormatter().format(make_record(correlation_id="ai-1-abc")))

        assert data["level"] == "INFO"
        assert data["msg"] == "hello"
        assert data["logger"] == "aicgen.test"
        assert data["correlation_id"] == "ai-1-abc"
        assert "ts" in data


class TestContextLogger:
    """Tests for bound loggers."""

    def test_bind_creates_child(self) -> None:
        """Test that bind() leaves the parent unchanged."""
        parent = bind_logger("aicgen.test", correlation_id="ai-1")

        child = parent.bind(provider="openai")

        assert isinstance(child, ContextLogger)
        assert parent.context == {"correlation_id": "ai-1"}
        assert child.context == {"correlation_id": "ai-1", "provider": "openai"}

    def test_records_carry_context(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that bound and per-call fields reach the record."""
        log = bind_logger("aicgen.test", correlation_id="ai-2")

        with caplog.at_level(logging.INFO, logger="aicgen.test"):
            log.info("done", extra={"extra_data": {"duration_ms": 5}})

        record = caplog.records[-1]
        assert record.extra_data == {"correlation_id": "ai-2", "duration_ms": 5}

    def test_per_call_fields_override(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that per-call fields win over bound ones for that record only."""
        log = bind_logger(logging.getLogger("aicgen.test"), provider="none")

        with caplog.at_level(logging.INFO, logger="aicgen.test"):
            log.info("cached", extra={"extra_data": {"provider": "cache"}})
            log.info("plain")

        assert caplog.records[-2].extra_data["provider"] == "cache"
        assert caplog.records[-1].extra_data["provider"] == "none"


class TestSetup:
    """Tests for logger configuration."""

    def test_json_mode_writes_lines(self) -> None:
        """Test JSON output to a stream."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.JSON, stream=stream)

        bind_logger("aicgen.pipeline", correlation_id="ai-3").info("Starting")

        data = json.loads(stream.getvalue().strip())
        assert data["msg"] == "Starting"
        assert data["correlation_id"] == "ai-3"

    def test_level_filters(self) -> None:
        """Test that debug records are dropped at INFO."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.HUMAN, level=logging.INFO, stream=stream)

        logging.getLogger("aicgen.test").debug("hidden")

        assert stream.getvalue() == ""

    def test_configure_from_cli(self) -> None:
        """Test flag to mode and level mapping."""
        logger = logging.getLogger(ROOT_LOGGER_NAME)

        configure_from_cli(quiet=True)
        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, HumanFormatter)

        configure_from_cli(verbose=True)
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, VerboseFormatter)

        configure_from_cli(ci=True)
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
