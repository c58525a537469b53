"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_cycle_id: ContextVar[str] = ContextVar("cycle_id", default="")
_stage_name: ContextVar[str] = ContextVar("stage_name", default="")
_subscription_id: ContextVar[str] = ContextVar("subscription_id", default="")
_resource_group: ContextVar[str] = ContextVar("resource_group", default="")


def set_log_context(
    cycle_id: Optional[str] = None,
    stage: Optional[str] = None,
    subscription_id: Optional[str] = None,
    resource_group: Optional[str] = None,
) -> None:
    if cycle_id is not None:
        _cycle_id.set(cycle_id)
    if stage is not None:
        _stage_name.set(stage)
    if subscription_id is not None:
        _subscription_id.set(subscription_id)
    if resource_group is not None:
        _resource_group.set(resource_group)


def get_log_context() -> Dict[str, str]:
    return {
        "cycle_id": _cycle_id.get(),
        "stage": _stage_name.get(),
        "subscription_id": _subscription_id.get(),
        "resource_group": _resource_group.get(),
    }


def clear_log_context() -> None:
    _cycle_id.set("")
    _stage_name.set("")
    _subscription_id.set("")
    _resource_group.set("")
