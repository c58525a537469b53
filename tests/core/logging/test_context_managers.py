"""Tests for logging context managers."""

import logging
from unittest.mock import MagicMock

import pytest

from core.logging.context import get_log_context, set_log_context
from core.logging.context_managers import LogContext, StageLogContext, log_phase


@pytest.fixture
def logger():
    """Create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


class TestLogContext:
    """Tests for LogContext manager."""

    def test_sets_context_on_enter(self):
        with LogContext(cycle_id="c-1", subscription_id="sub", resource_group="rg"):
            ctx = get_log_context()
            assert ctx["cycle_id"] == "c-1"
            assert ctx["subscription_id"] == "sub"
            assert ctx["resource_group"] == "rg"

    def test_restores_context_on_exit(self):
        set_log_context(cycle_id="initial", stage="initial-stage")

        with LogContext(cycle_id="c-1", stage="events"):
            pass

        ctx = get_log_context()
        assert ctx["cycle_id"] == "initial"
        assert ctx["stage"] == "initial-stage"

    def test_handles_none_values(self):
        """None values don't override context."""
        set_log_context(cycle_id="existing")

        with LogContext(stage="events"):
            ctx = get_log_context()
            assert ctx["cycle_id"] == "existing"
            assert ctx["stage"] == "events"

    def test_restores_on_exception(self):
        with pytest.raises(ValueError):
            with LogContext(stage="events"):
                raise ValueError("boom")

        assert get_log_context()["stage"] == ""


class TestStageLogContext:
    """Tests for StageLogContext manager."""

    def test_sets_stage(self):
        with StageLogContext("resources", cycle_id="c-2"):
            ctx = get_log_context()
            assert ctx["stage"] == "resources"
            assert ctx["cycle_id"] == "c-2"

        assert get_log_context()["stage"] == ""

    def test_records_duration(self):
        with StageLogContext("events") as ctx:
            pass

        assert "duration_ms" in ctx.result_context
        assert ctx.result_context["duration_ms"] >= 0

    def test_logs_result_on_success(self, logger):
        with StageLogContext("events", logger=logger) as ctx:
            ctx.set_result(event_count=4)

        logger.log.assert_called_once()
        args, kwargs = logger.log.call_args
        assert args[0] == logging.DEBUG
        assert args[1] == "Stage complete: events"
        assert kwargs["extra"]["event_count"] == 4
        assert "duration_ms" in kwargs["extra"]

    def test_no_completion_log_on_exception(self, logger):
        with pytest.raises(RuntimeError):
            with StageLogContext("events", logger=logger):
                raise RuntimeError("query failed")

        logger.log.assert_not_called()


class TestLogPhase:
    """Tests for log_phase context manager."""

    def test_logs_phase_completion(self, logger):
        with log_phase(logger, "correlate", event_count=2):
            pass

        args, kwargs = logger.log.call_args
        assert args[0] == logging.DEBUG
        assert args[1] == "Phase complete: correlate"
        assert kwargs["extra"]["event_count"] == 2
        assert "duration_ms" in kwargs["extra"]

    def test_accepts_string_level(self, logger):
        with log_phase(logger, "correlate", level="INFO"):
            pass

        assert logger.log.call_args[0][0] == logging.INFO

    def test_logs_even_on_exception(self, logger):
        with pytest.raises(KeyError):
            with log_phase(logger, "correlate"):
                raise KeyError("x")

        logger.log.assert_called_once()
