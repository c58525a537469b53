"""
Stage fetchers: maintenance events and impacted resources.

Each fetcher issues one Resource Graph query through a QueryService and
turns the raw rows into typed records. Query failures surface as
QueryError tagged with the stage; individual bad rows are skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from core.errors.classifiers import ResourceGraphErrorClassifier
from core.errors.exceptions import MalformedRecordError, QueryError
from planned_maintenance.resourcegraph.client import QueryService
from planned_maintenance.resourcegraph.queries import (
    build_events_query,
    build_impacted_resources_query,
)
from planned_maintenance.schemas.events import RawEvent, RawImpactedResource

logger = logging.getLogger(__name__)

EVENTS_STAGE = "events"
RESOURCES_STAGE = "resources"


@dataclass(frozen=True)
class QueryScope:
    """Subscription and optional resource group a run is scoped to."""

    subscription_id: str
    resource_group: str | None = None


class _StageFetcher:
    stage: str = ""

    def __init__(
        self,
        query_service: QueryService,
        timeout_seconds: float | None = None,
    ):
        self.query_service = query_service
        self.timeout_seconds = timeout_seconds
        self.skipped = 0

    def build_query(self, scope: QueryScope) -> str:
        raise NotImplementedError

    async def _run_query(self, scope: QueryScope) -> list[dict[str, Any]]:
        query = self.build_query(scope)
        try:
            return await self.query_service.query(
                query,
                scope.subscription_id,
                timeout_seconds=self.timeout_seconds,
            )
        except Exception as e:
            classified = ResourceGraphErrorClassifier.classify(
                e, {"stage": self.stage, "subscription_id": scope.subscription_id}
            )
            raise QueryError(
                self.stage,
                f"{self.stage.capitalize()} query failed: {classified.message}",
                cause=classified,
                context={"subscription_id": scope.subscription_id},
            ) from e

    def _skip(self, row: Any, error: Exception) -> None:
        self.skipped += 1
        record_id = row.get("id") if isinstance(row, dict) else None
        logger.warning(
            "Skipping malformed %s record: %s",
            self.stage,
            str(error)[:200],
            extra={
                "stage": self.stage,
                "resource_id": record_id,
                "error_type": type(error).__name__,
            },
        )


class EventFetcher(_StageFetcher):
    """Fetches PlannedMaintenance Service Health events."""

    stage = EVENTS_STAGE

    def build_query(self, scope: QueryScope) -> str:
        return build_events_query(scope.resource_group)

    async def fetch(self, scope: QueryScope) -> list[RawEvent]:
        """
        Raises:
            QueryError: stage="events", if the query service fails
        """
        self.skipped = 0
        rows = await self._run_query(scope)

        events: list[RawEvent] = []
        for row in rows:
            try:
                events.append(RawEvent.model_validate(row))
            except ValidationError as e:
                self._skip(row, e)

        logger.info(
            "Fetched %d planned maintenance events",
            len(events),
            extra={
                "event_count": len(events),
                "skipped_count": self.skipped,
                "resource_group": scope.resource_group,
            },
        )
        return events


class ResourceFetcher(_StageFetcher):
    """Fetches impacted resources, each tagged with its event's tracking id."""

    stage = RESOURCES_STAGE

    def build_query(self, scope: QueryScope) -> str:
        return build_impacted_resources_query(scope.resource_group)

    async def fetch(self, scope: QueryScope) -> list[RawImpactedResource]:
        """
        Rows whose id carries no tracking id are skipped and counted in
        ``skipped``; they could never join an event.

        Raises:
            QueryError: stage="resources", if the query service fails
        """
        self.skipped = 0
        rows = await self._run_query(scope)

        resources: list[RawImpactedResource] = []
        for row in rows:
            if not isinstance(row, dict):
                self._skip(row, MalformedRecordError("Row is not a JSON object"))
                continue
            try:
                resources.append(RawImpactedResource.from_row(row))
            except (MalformedRecordError, ValidationError) as e:
                self._skip(row, e)

        logger.info(
            "Fetched %d impacted resources",
            len(resources),
            extra={
                "resource_count": len(resources),
                "skipped_count": self.skipped,
                "resource_group": scope.resource_group,
            },
        )
        return resources
