"""Record schemas for maintenance events, impacted resources and issues."""

from planned_maintenance.schemas.events import (
    PLANNED_MAINTENANCE_EVENT_TYPE,
    CorrelatedEvent,
    RawEvent,
    RawImpactedResource,
    dump_records,
    load_maintenance_events,
    parse_tracking_id,
)
from planned_maintenance.schemas.issues import Issue, IssueDetails

__all__ = [
    "PLANNED_MAINTENANCE_EVENT_TYPE",
    "RawEvent",
    "RawImpactedResource",
    "CorrelatedEvent",
    "Issue",
    "IssueDetails",
    "dump_records",
    "load_maintenance_events",
    "parse_tracking_id",
]
