"""Join maintenance events to their impacted resources."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from planned_maintenance.schemas.events import (
    CorrelatedEvent,
    RawEvent,
    RawImpactedResource,
)

logger = logging.getLogger(__name__)


def index_by_tracking_id(
    resources: Iterable[RawImpactedResource],
) -> dict[str, list[RawImpactedResource]]:
    """Group resources by tracking id, keeping input order within each group."""
    index: dict[str, list[RawImpactedResource]] = defaultdict(list)
    for resource in resources:
        index[resource.tracking_id].append(resource)
    return dict(index)


def correlate(
    events: Sequence[RawEvent],
    resources: Sequence[RawImpactedResource],
) -> list[CorrelatedEvent]:
    """
    Attach each event's impacted resources; drop events with none.

    Tracking ids compare by exact string equality. Event order is preserved
    and resources keep the order the fetcher returned them in. An event
    without a trackingId never matches.
    """
    index = index_by_tracking_id(resources)

    correlated: list[CorrelatedEvent] = []
    for event in events:
        matches = index.get(event.tracking_id) if event.tracking_id else None
        if not matches:
            continue
        correlated.append(CorrelatedEvent.from_event(event, matches))

    logger.info(
        "Correlated %d of %d events with impacted resources",
        len(correlated),
        len(events),
        extra={
            "event_count": len(events),
            "resource_count": len(resources),
            "correlated_count": len(correlated),
            "dropped_count": len(events) - len(correlated),
        },
    )
    return correlated
