"""Shared fixtures for planned maintenance tests."""

import pytest

from planned_maintenance.config import MaintenanceConfig
from planned_maintenance.resourcegraph.queries import IMPACTED_RESOURCE_RECORD_TYPE

SUBSCRIPTION_ID = "00000000-1111-2222-3333-444444444444"


def _copy(row):
    return dict(row) if isinstance(row, dict) else row


class FakeQueryService:
    """
    In-memory QueryService.

    Routes each expression to the events or resources rows by record type and
    records every call so tests can assert which stages queried.
    """

    def __init__(
        self,
        events=None,
        resources=None,
        events_error=None,
        resources_error=None,
    ):
        self.events = list(events or [])
        self.resources = list(resources or [])
        self.events_error = events_error
        self.resources_error = resources_error
        self.calls = []

    @staticmethod
    def _is_resources_query(expression):
        return IMPACTED_RESOURCE_RECORD_TYPE in expression

    async def query(self, expression, subscription_id, timeout_seconds=None):
        self.calls.append(
            {
                "expression": expression,
                "subscription_id": subscription_id,
                "timeout_seconds": timeout_seconds,
            }
        )
        if self._is_resources_query(expression):
            if self.resources_error is not None:
                raise self.resources_error
            return [_copy(row) for row in self.resources]
        if self.events_error is not None:
            raise self.events_error
        return [_copy(row) for row in self.events]

    @property
    def event_calls(self):
        return [c for c in self.calls if not self._is_resources_query(c["expression"])]

    @property
    def resource_calls(self):
        return [c for c in self.calls if self._is_resources_query(c["expression"])]


@pytest.fixture
def subscription_id():
    return SUBSCRIPTION_ID


@pytest.fixture
def make_event():
    """Factory for raw event rows as Resource Graph returns them."""

    def _make(tracking_id="T1", **overrides):
        row = {
            "subscriptionId": SUBSCRIPTION_ID,
            "trackingId": tracking_id,
            "eventType": "PlannedMaintenance",
            "status": "Active",
            "summary": f"Summary {tracking_id}",
            "description": f"Maintenance {tracking_id}",
            "level": "Warning",
            "impactStartTime": "2026-11-01T02:00:00Z",
            "impactMitigationTime": "2026-11-01T06:00:00Z",
            "id": f"/subscriptions/{SUBSCRIPTION_ID}/providers/Microsoft.ResourceHealth/events/{tracking_id}",
            "impact": [{"ImpactedService": "Virtual Machines"}],
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def make_resource():
    """Factory for impacted-resource rows (TrackingId not yet derived)."""

    def _make(tracking_id="T1", name="vm1", **overrides):
        row = {
            "subscriptionId": SUBSCRIPTION_ID,
            "resourceName": name,
            "resourceType": "Microsoft.Compute/virtualMachines",
            "resourceGroup": "rg-prod",
            "region": "eastus",
            "resourceId": (
                f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg-prod"
                f"/providers/Microsoft.Compute/virtualMachines/{name}"
            ),
            "id": (
                f"/subscriptions/{SUBSCRIPTION_ID}/providers/Microsoft.ResourceHealth"
                f"/events/{tracking_id}/impactedResources/{name}-id"
            ),
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def fake_query_service():
    return FakeQueryService


@pytest.fixture
def maintenance_config(tmp_path, subscription_id):
    return MaintenanceConfig(subscription_id=subscription_id, output_dir=tmp_path)
