# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from jsontimeline.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON mode emits one JSON object per line on stderr."""
        from jsontimeline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logs_stay_off_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdout is reserved for sink output."""
        from jsontimeline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").warning("careful")

        assert capsys.readouterr().out == ""

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Console mode is human-readable."""
        from jsontimeline.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_stdlib_loggers_emit_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdlib loggers go through the same processor chain."""
        from jsontimeline.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("test.stdlib").info("from stdlib")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"

    def test_level_applies(self) -> None:
        from jsontimeline.core.logging import configure_logging

        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING
