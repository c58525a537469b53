"""
Maintenance event and impacted-resource record schemas.

Records arrive from Azure Resource Graph as untyped JSON objects. The models
keep snake_case attribute names with the wire (camelCase) names as aliases,
carry unknown columns through untouched, and always serialize back with the
wire names so the written artifacts match what the query returned.
"""

import re
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.errors.exceptions import MalformedRecordError

PLANNED_MAINTENANCE_EVENT_TYPE = "PlannedMaintenance"

# /subscriptions/<sub>/providers/Microsoft.ResourceHealth/events/<tracking_id>/impactedResources/<name>
_TRACKING_ID_PATTERN = re.compile(
    r"/events/(?P<tracking_id>[^/]+)/impactedResources(?:/|$)",
    re.IGNORECASE,
)


def parse_tracking_id(resource_id: Any) -> str:
    """
    Extract the parent event's tracking id from an impacted-resource id.

    The segment between ``/events/`` and ``/impactedResources`` is returned
    verbatim (delimiters match case-insensitively, the captured value is not
    case-folded).

    Raises:
        MalformedRecordError: If the id is missing or lacks either delimiter
    """
    if not isinstance(resource_id, str) or not resource_id:
        raise MalformedRecordError(
            "Impacted resource has no id",
            context={"resource_id": resource_id},
        )

    match = _TRACKING_ID_PATTERN.search(resource_id)
    if match is None:
        raise MalformedRecordError(
            f"Impacted resource id does not contain an event segment: {resource_id}",
            context={"resource_id": resource_id},
        )
    return match.group("tracking_id")


class _WireRecord(BaseModel):
    """Base for records exchanged with Resource Graph and written to disk."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_record(self) -> dict[str, Any]:
        """Serialize with wire field names, extras included."""
        return self.model_dump(mode="json", by_alias=True)


class RawImpactedResource(_WireRecord):
    """A resource affected by a maintenance event.

    ``tracking_id`` is derived from the record's own ``id``; it is what joins
    the resource to exactly one RawEvent.
    """

    subscription_id: str | None = Field(default=None, alias="subscriptionId")
    tracking_id: str = Field(..., alias="TrackingId", min_length=1)
    resource_name: str | None = Field(default=None, alias="resourceName")
    resource_type: str | None = Field(default=None, alias="resourceType")
    resource_group: str | None = Field(default=None, alias="resourceGroup")
    region: str | None = None
    resource_id: str | None = Field(default=None, alias="resourceId")
    id: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RawImpactedResource":
        """
        Create from a Resource Graph row, deriving TrackingId from ``id``.

        Raises:
            MalformedRecordError: If the tracking id cannot be derived
        """
        tracking_id = parse_tracking_id(row.get("id"))
        return cls.model_validate({**row, "TrackingId": tracking_id})


class RawEvent(_WireRecord):
    """A planned-maintenance Service Health event.

    Every field is optional. Apart from ``trackingId``, which is the join key,
    fields carry whatever value the service returned and are never coerced;
    an unexpected ``level`` falls back to severity 1 at projection time.
    """

    subscription_id: Any = Field(default=None, alias="subscriptionId")
    tracking_id: str | None = Field(default=None, alias="trackingId")
    event_type: Any = Field(default=None, alias="eventType")
    status: Any = None
    summary: Any = None
    description: Any = None
    level: Any = None
    impact_start_time: Any = Field(default=None, alias="impactStartTime")
    impact_mitigation_time: Any = Field(default=None, alias="impactMitigationTime")
    id: Any = None
    impact: Any = None


class CorrelatedEvent(RawEvent):
    """A RawEvent with its non-empty, ordered list of impacted resources."""

    impacted_resources: list[RawImpactedResource] = Field(
        ..., alias="impactedResources", min_length=1
    )

    @classmethod
    def from_event(
        cls, event: RawEvent, resources: Iterable[RawImpactedResource]
    ) -> "CorrelatedEvent":
        data = event.model_dump(by_alias=True)
        return cls.model_validate({**data, "impactedResources": list(resources)})


def dump_records(models: Iterable[BaseModel]) -> list[dict[str, Any]]:
    """Serialize models to plain dicts with wire field names."""
    return [model.model_dump(mode="json", by_alias=True) for model in models]


def load_maintenance_events(rows: Iterable[Any]) -> list[RawEvent]:
    """
    Parse rows read back from a maintenance events artifact.

    A degraded artifact holds raw events without ``impactedResources``; those
    rows load as RawEvent, the rest as CorrelatedEvent.
    """
    events: list[RawEvent] = []
    for row in rows:
        if isinstance(row, dict) and row.get("impactedResources") is not None:
            events.append(CorrelatedEvent.model_validate(row))
        else:
            events.append(RawEvent.model_validate(row))
    return events
