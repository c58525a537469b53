"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from core.logging.context import get_log_context, set_log_context
from core.logging.utilities import log_with_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(stage="events", cycle_id=cycle_id):
            # All logs in this block will have stage and cycle_id
            do_work()
    """

    def __init__(
        self,
        cycle_id: Optional[str] = None,
        stage: Optional[str] = None,
        subscription_id: Optional[str] = None,
        resource_group: Optional[str] = None,
    ):
        self.new_context = {
            "cycle_id": cycle_id,
            "stage": stage,
            "subscription_id": subscription_id,
            "resource_group": resource_group,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Restore old context
        set_log_context(
            cycle_id=self.old_context.get("cycle_id", ""),
            stage=self.old_context.get("stage", ""),
            subscription_id=self.old_context.get("subscription_id", ""),
            resource_group=self.old_context.get("resource_group", ""),
        )
        return False


class StageLogContext(LogContext):
    """
    Context manager for stage execution with automatic timing.

    Usage:
        with StageLogContext("resources", cycle_id=cycle_id) as ctx:
            resources = await fetcher.fetch(scope)
            ctx.set_result(resource_count=len(resources))
    """

    def __init__(
        self,
        stage: str,
        cycle_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(stage=stage, cycle_id=cycle_id)
        self.stage = stage
        self.logger = logger
        self.start_time: Optional[float] = None
        self.result_context: Dict[str, Any] = {}

    def __enter__(self) -> "StageLogContext":
        super().__enter__()
        self.start_time = time.perf_counter()
        return self

    def set_result(self, **kwargs: Any) -> None:
        """Set result context to be logged on exit."""
        self.result_context.update(kwargs)

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self.start_time) * 1000
        self.result_context["duration_ms"] = round(duration_ms, 2)
        if self.logger is not None and exc_val is None:
            log_with_context(
                self.logger,
                logging.DEBUG,
                f"Stage complete: {self.stage}",
                **self.result_context,
            )
        super().__exit__(exc_type, exc_val, exc_tb)
        return False


@contextmanager
def log_phase(
    logger: logging.Logger,
    phase: str,
    level: int = logging.DEBUG,
    **context: Any,
):
    """
    Context manager for timing a phase within a stage.

    Example:
        with log_phase(logger, "correlate"):
            correlated = correlate(events, resources)
    """
    # Convert string level names to integers
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        log_with_context(
            logger,
            level,
            f"Phase complete: {phase}",
            duration_ms=round(duration_ms, 2),
            **context,
        )
