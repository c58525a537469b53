"""
Azure Resource Graph access: query builders, client and subscription scope.
"""

from planned_maintenance.resourcegraph.client import (
    QueryResult,
    QueryService,
    ResourceGraphConfig,
    ResourceGraphQueryClient,
)
from planned_maintenance.resourcegraph.queries import (
    build_events_query,
    build_impacted_resources_query,
)
from planned_maintenance.resourcegraph.subscription import resolve_subscription_id

__all__ = [
    "QueryResult",
    "QueryService",
    "ResourceGraphConfig",
    "ResourceGraphQueryClient",
    "build_events_query",
    "build_impacted_resources_query",
    "resolve_subscription_id",
]
