"""
Issue record schemas.

An Issue is the immutable projection of one CorrelatedEvent for downstream
tracking. Field names here are the artifact's field names (snake_case).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from planned_maintenance.schemas.events import RawImpactedResource


class IssueDetails(BaseModel):
    """Field-for-field carry-through of the source event."""

    model_config = ConfigDict(frozen=True)

    event_id: Any = None
    tracking_id: str | None = None
    summary: Any = None
    impact: Any = None
    impacted_resources: tuple[RawImpactedResource, ...] | None = None
    start_time: Any = None
    end_time: Any = None
    status: Any = None


class Issue(BaseModel):
    """A maintenance issue with derived severity and remediation checklist.

    Severity 1 is the most severe bucket and the fallback for unknown levels.
    """

    model_config = ConfigDict(frozen=True)

    title: Any = None
    severity: int = Field(..., ge=1, le=3)
    next_steps: str
    details: IssueDetails
