"""
Azure planned maintenance retrieval.

Fetches PlannedMaintenance Service Health events for a subscription,
correlates them with their impacted resources and projects the result into
issue records.
"""

from planned_maintenance.correlator import correlate
from planned_maintenance.projector import project_issue, project_issues
from planned_maintenance.runner import (
    MaintenancePipeline,
    PipelineResult,
    create_issues_from_file,
)

__all__ = [
    "MaintenancePipeline",
    "PipelineResult",
    "correlate",
    "create_issues_from_file",
    "project_issue",
    "project_issues",
]
