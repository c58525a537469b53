"""
Projection of correlated maintenance events into issue records.

Pure and deterministic: the same events always produce the same issues.
Missing optional fields fall back to documented values, never to errors.
"""

import json
from collections.abc import Iterable
from typing import Any

from planned_maintenance.schemas.events import RawEvent
from planned_maintenance.schemas.issues import Issue, IssueDetails

# 1 is the most severe bucket and the fallback
SEVERITY_BY_LEVEL = {
    "Informational": 3,
    "Warning": 2,
}
DEFAULT_SEVERITY = 1

UNKNOWN_TIME = "Unknown"

NEXT_STEPS_TEMPLATE = (
    "1. Review maintenance details for resources\n"
    "2. Check impact duration: {start} to {end}\n"
    "3. Plan for potential downtime or degraded performance\n"
    "4. Create mitigation plan if needed"
)


def severity_for_level(level: Any) -> int:
    """Informational -> 3, Warning -> 2, anything else (or missing) -> 1."""
    if not isinstance(level, str):
        return DEFAULT_SEVERITY
    return SEVERITY_BY_LEVEL.get(level, DEFAULT_SEVERITY)


def format_impact_time(value: Any) -> str:
    """Render a timestamp for the next-steps text.

    Strings are used verbatim. Other scalars are rendered the way they appear
    in JSON, with integral floats printed without a fractional part.
    """
    if value is None or value == "":
        return UNKNOWN_TIME
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value, separators=(",", ":"), default=str)


def build_next_steps(start_time: Any, end_time: Any) -> str:
    return NEXT_STEPS_TEMPLATE.format(
        start=format_impact_time(start_time),
        end=format_impact_time(end_time),
    )


def project_issue(event: RawEvent) -> Issue:
    """Map one event to its issue.

    Correlated events carry their impacted resources into the details; events
    read back from a degraded artifact have none and project with ``None``.
    """
    resources = getattr(event, "impacted_resources", None)
    return Issue(
        title=event.description,
        severity=severity_for_level(event.level),
        next_steps=build_next_steps(
            event.impact_start_time, event.impact_mitigation_time
        ),
        details=IssueDetails(
            event_id=event.id,
            tracking_id=event.tracking_id,
            summary=event.summary,
            impact=event.impact,
            impacted_resources=tuple(resources) if resources is not None else None,
            start_time=event.impact_start_time,
            end_time=event.impact_mitigation_time,
            status=event.status,
        ),
    )


def project_issues(events: Iterable[RawEvent]) -> list[Issue]:
    """Project every event, preserving order."""
    return [project_issue(event) for event in events]
