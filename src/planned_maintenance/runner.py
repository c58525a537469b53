"""
Pipeline runner: events -> resources -> correlation -> issues.

Stages run strictly in sequence. The outcome of each run is a pair of JSON
artifacts plus an exit code:

- events query fails: both artifacts are ``[]``, exit 1
- no events: both artifacts are ``[]``, exit 0, resources never queried
- resources query fails: raw events written, issues ``[]``, exit 1 (degraded)
- otherwise: correlated events and their issues, exit 0
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.errors.exceptions import (
    MalformedRecordError,
    PermanentError,
    PipelineError,
    QueryError,
    ScopeError,
)
from core.logging.context_managers import LogContext, StageLogContext, log_phase
from core.logging.setup import generate_cycle_id
from core.logging.utilities import log_exception, log_with_context
from planned_maintenance.config import MaintenanceConfig
from planned_maintenance.correlator import correlate
from planned_maintenance.fetchers import (
    EVENTS_STAGE,
    RESOURCES_STAGE,
    EventFetcher,
    QueryScope,
    ResourceFetcher,
)
from planned_maintenance.projector import project_issues
from planned_maintenance.resourcegraph.client import QueryService
from planned_maintenance.schemas.events import (
    RawEvent,
    load_maintenance_events,
)
from planned_maintenance.schemas.issues import Issue
from planned_maintenance.sinks import JsonArraySink, JsonArraySinkConfig, RecordSink

logger = logging.getLogger(__name__)

ISSUES_STAGE = "issues"


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""

    # What was written to the events artifact: correlated events, or the raw
    # events when the resources stage failed
    events: list[RawEvent] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    exit_code: int = 0
    degraded: bool = False
    failed_stage: str | None = None
    error: PipelineError | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class MaintenancePipeline:
    """
    Retrieves planned maintenance for one subscription scope.

    Example:
        async with ResourceGraphQueryClient(config.resource_graph) as client:
            pipeline = MaintenancePipeline(config, client)
            result = await pipeline.run()
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        config: MaintenanceConfig,
        query_service: QueryService,
        events_sink: RecordSink | None = None,
        issues_sink: RecordSink | None = None,
        cycle_id: str | None = None,
    ):
        self.config = config
        self.query_service = query_service
        self.events_sink = events_sink or JsonArraySink(
            JsonArraySinkConfig(output_path=config.events_path)
        )
        self.issues_sink = issues_sink or JsonArraySink(
            JsonArraySinkConfig(output_path=config.issues_path)
        )
        self.cycle_id = cycle_id or generate_cycle_id()

        timeout = config.query_timeout_seconds
        self.event_fetcher = EventFetcher(query_service, timeout_seconds=timeout)
        self.resource_fetcher = ResourceFetcher(query_service, timeout_seconds=timeout)

    @property
    def scope(self) -> QueryScope:
        if not self.config.subscription_id:
            raise ScopeError("No subscription id resolved for this run")
        return QueryScope(
            subscription_id=self.config.subscription_id,
            resource_group=self.config.resource_group,
        )

    def _log_context(self) -> LogContext:
        return LogContext(
            cycle_id=self.cycle_id,
            subscription_id=self.config.subscription_id,
            resource_group=self.config.resource_group,
        )

    async def fetch(self) -> PipelineResult:
        """Fetch and correlate, writing only the events artifact."""
        scope = self.scope
        with self._log_context():
            return await self._fetch(scope)

    async def run(self) -> PipelineResult:
        """Fetch, correlate and project, writing both artifacts."""
        scope = self.scope
        with self._log_context():
            result = await self._fetch(scope)

            issues: list[Issue] = []
            if result.succeeded:
                with StageLogContext(ISSUES_STAGE, logger=logger) as ctx:
                    issues = project_issues(result.events)
                    ctx.set_result(issue_count=len(issues))

            await self.issues_sink.write(issues)
            result.issues = issues

            log_with_context(
                logger,
                logging.WARNING if result.degraded else logging.INFO,
                "Planned maintenance run complete",
                event_count=len(result.events),
                correlated_count=0 if result.degraded else len(result.events),
                issue_count=len(issues),
                degraded=result.degraded,
                exit_code=result.exit_code,
            )
            return result

    async def _fetch(self, scope: QueryScope) -> PipelineResult:
        try:
            with StageLogContext(EVENTS_STAGE, logger=logger) as ctx:
                events = await self.event_fetcher.fetch(scope)
                ctx.set_result(event_count=len(events))
        except QueryError as e:
            log_exception(
                logger, e, "Failed to retrieve planned maintenance events", stage=e.stage
            )
            await self.events_sink.write([])
            return PipelineResult(exit_code=1, failed_stage=e.stage, error=e)

        if not events:
            logger.info("No planned maintenance events found for the specified scope")
            await self.events_sink.write([])
            return PipelineResult()

        try:
            with StageLogContext(RESOURCES_STAGE, logger=logger) as ctx:
                resources = await self.resource_fetcher.fetch(scope)
                ctx.set_result(
                    resource_count=len(resources),
                    skipped_count=self.resource_fetcher.skipped,
                )
        except QueryError as e:
            log_exception(
                logger,
                e,
                "Failed to retrieve impacted resources, writing events without resources",
                stage=e.stage,
                event_count=len(events),
            )
            await self.events_sink.write(events)
            return PipelineResult(
                events=events,
                exit_code=1,
                degraded=True,
                failed_stage=e.stage,
                error=e,
            )

        with log_phase(logger, "correlate"):
            correlated = correlate(events, resources)
        if not correlated:
            logger.info(
                "No maintenance events with impacted resources found for the specified scope"
            )

        await self.events_sink.write(correlated)
        return PipelineResult(events=correlated)


async def create_issues_from_file(
    input_path: Path,
    output_path: Path,
) -> list[Issue]:
    """
    Project issues from a previously written maintenance events artifact.

    Raises:
        PermanentError: If the input file does not exist
        MalformedRecordError: If the file is not an array of event objects
    """
    input_path = Path(input_path)
    if not input_path.is_file():
        raise PermanentError(
            f"Input file {input_path} not found",
            context={"input_path": str(input_path)},
        )

    source = JsonArraySink(JsonArraySinkConfig(output_path=input_path))
    try:
        rows: list[Any] = source.read()
        events: list[RawEvent] = load_maintenance_events(rows)
    except (ValueError, ValidationError) as e:
        raise MalformedRecordError(
            f"Cannot read maintenance events from {input_path}: {e}",
            cause=e,
            context={"input_path": str(input_path)},
        ) from e

    with StageLogContext(ISSUES_STAGE, logger=logger) as ctx:
        issues = project_issues(events)
        ctx.set_result(issue_count=len(issues))

    await JsonArraySink(JsonArraySinkConfig(output_path=output_path)).write(issues)

    if issues:
        logger.info(
            "Created %d issues from maintenance events",
            len(issues),
            extra={
                "issue_count": len(issues),
                "input_path": str(input_path),
                "output_path": str(output_path),
            },
        )
    else:
        logger.info(
            "No issues were created. There were no maintenance events with impacted resources",
            extra={"issue_count": 0, "input_path": str(input_path)},
        )
    return issues
