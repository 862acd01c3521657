# tests/unit/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest
import structlog

from dagdemo.core.logging import configure_logging


class TestLoggingConfig:
    def test_json_output_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)

        structlog.get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert data["logger"] == "test"
        assert "_record" not in data

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=False)

        structlog.get_logger("test").info("test message", key="value")

        err = capsys.readouterr().err
        assert "test message" in err
        assert not err.strip().startswith("{")

    def test_stdlib_records_share_the_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)

        logging.getLogger("dagdemo.stdlib").warning("plain %s", "record")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "plain record"
        assert data["level"] == "warning"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="WARNING")

        structlog.get_logger("test").info("hidden")
        structlog.get_logger("test").warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_context_vars_merged(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)

        with structlog.contextvars.bound_contextvars(run_id="abc123"):
            structlog.get_logger("test").info("inside run")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["run_id"] == "abc123"

    def test_noisy_third_party_loggers_silenced(self) -> None:
        """graphviz and dynaconf stay at WARNING even when dagdemo runs at DEBUG."""
        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("graphviz").level == logging.WARNING
        assert logging.getLogger("dynaconf").level == logging.WARNING

    def test_noisy_loggers_not_loosened_above_root(self) -> None:
        configure_logging(level="ERROR")

        assert logging.getLogger("graphviz").level == logging.ERROR
