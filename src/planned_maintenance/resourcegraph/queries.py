"""
Resource Graph (KQL) query builders for Service Health maintenance data.

Both queries project the columns of the event / impacted-resource records
in their artifact order. Resource group filtering differs on purpose: the
events query keeps ``location == 'global'`` events because they can affect
every resource group, the impacted-resources query does not.
"""

SERVICE_HEALTH_TABLE = "ServiceHealthResources"
EVENT_RECORD_TYPE = "Microsoft.ResourceHealth/events"
IMPACTED_RESOURCE_RECORD_TYPE = "microsoft.resourcehealth/events/impactedresources"
GLOBAL_LOCATION = "global"

EVENT_COLUMNS = (
    "subscriptionId",
    "trackingId",
    "eventType",
    "status",
    "summary",
    "description",
    "level",
    "impactStartTime",
    "impactMitigationTime",
    "id",
    "impact",
)


def kql_string_literal(value: str) -> str:
    """Quote a value as a single-quoted KQL string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_events_query(resource_group: str | None = None) -> str:
    """Build the planned-maintenance events query.

    The resource group filter is applied before the projection, while
    ``resourceGroup`` and ``location`` are still columns of the row.
    """
    lines = [
        SERVICE_HEALTH_TABLE,
        f"| where type =~ {kql_string_literal(EVENT_RECORD_TYPE)}",
        "| extend eventType = properties.EventType, status = properties.Status",
        "| extend description = properties.Title, trackingId = properties.TrackingId",
        "| extend summary = properties.Summary, level = properties.Level",
        "| extend impact = properties.Impact",
        "| extend impactStartTime = todatetime(tolong(properties.ImpactStartTime)),"
        " impactMitigationTime = todatetime(tolong(properties.ImpactMitigationTime))",
        "| where eventType == 'PlannedMaintenance'",
    ]
    if resource_group:
        lines.append(
            f"| where resourceGroup == {kql_string_literal(resource_group)}"
            f" or location == {kql_string_literal(GLOBAL_LOCATION)}"
        )
    lines.append(f"| project {', '.join(EVENT_COLUMNS)}")
    return "\n".join(lines)


def build_impacted_resources_query(resource_group: str | None = None) -> str:
    """Build the impacted-resources query.

    ``TrackingId`` is not computed here; it is parsed from ``id`` client-side
    (see ``parse_tracking_id``).
    """
    lines = [
        SERVICE_HEALTH_TABLE,
        f"| where type == {kql_string_literal(IMPACTED_RESOURCE_RECORD_TYPE)}",
        "| extend p = parse_json(properties)",
        "| project subscriptionId, resourceName = p.resourceName,"
        " resourceType = p.resourceType, resourceGroup = p.resourceGroup,"
        " region = p.targetRegion, resourceId = p.targetResourceId, id",
    ]
    if resource_group:
        lines.append(f"| where resourceGroup == {kql_string_literal(resource_group)}")
    return "\n".join(lines)
