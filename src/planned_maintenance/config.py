"""
Run configuration for the planned maintenance pipeline.

Load with MaintenanceConfig.load_config(), which reads config.yaml with
environment variable overrides. CLI flags are applied on top by __main__.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from planned_maintenance.resourcegraph.client import (
    DEFAULT_ENDPOINT,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    MAX_PAGE_SIZE,
    ResourceGraphConfig,
)

# Default config path: config.yaml in the working directory
DEFAULT_CONFIG_PATH = Path("config.yaml")

EVENTS_FILENAME = "maintenance_events.json"
ISSUES_FILENAME = "issues.json"


def _as_float(name: str, value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"maintenance.{name} must be a number, got {value!r}") from None
    if result <= 0:
        raise ValueError(f"maintenance.{name} must be positive, got {value!r}")
    return result


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"maintenance.{name} must be an integer, got {value!r}") from None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class MaintenanceConfig:
    """Configuration for one maintenance retrieval run."""

    # Scope
    subscription_id: str | None = None  # None -> ambient default (az account show)
    resource_group: str | None = None  # None -> all resource groups

    # Artifacts
    output_dir: Path = field(default_factory=lambda: Path("."))
    events_file: Path | None = None  # default <output_dir>/maintenance_events.json
    issues_file: Path | None = None  # default <output_dir>/issues.json

    # Resource Graph
    query_timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS
    page_size: int = MAX_PAGE_SIZE
    management_endpoint: str = DEFAULT_ENDPOINT

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        if self.events_file is not None:
            self.events_file = Path(self.events_file)
        if self.issues_file is not None:
            self.issues_file = Path(self.issues_file)
        self.page_size = max(1, min(int(self.page_size), MAX_PAGE_SIZE))

    @property
    def events_path(self) -> Path:
        return self.events_file or self.output_dir / EVENTS_FILENAME

    @property
    def issues_path(self) -> Path:
        return self.issues_file or self.output_dir / ISSUES_FILENAME

    @property
    def resource_graph(self) -> ResourceGraphConfig:
        return ResourceGraphConfig(
            endpoint=self.management_endpoint,
            query_timeout_seconds=self.query_timeout_seconds,
            page_size=self.page_size,
        )

    @classmethod
    def load_config(
        cls,
        config_path: Path | None = None,
    ) -> "MaintenanceConfig":
        """Load configuration from YAML file with environment variable overrides.

        Configuration priority (highest to lowest):
        1. Environment variables
        2. config.yaml file (under 'maintenance:' key)
        3. Dataclass defaults

        Raises:
            ValueError: If a numeric setting cannot be parsed
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        data: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_data = yaml.safe_load(f) or {}
            data = dict(yaml_data.get("maintenance") or {})

        # Apply environment variable overrides
        env_overrides = {
            "subscription_id": os.getenv("AZURE_RESOURCE_SUBSCRIPTION_ID"),
            "resource_group": os.getenv("AZURE_RESOURCE_GROUP"),
            "output_dir": os.getenv("OUTPUT_DIR"),
            "events_file": os.getenv("INPUT_FILE"),
            "issues_file": os.getenv("OUTPUT_FILE"),
            "query_timeout_seconds": os.getenv("RESOURCE_GRAPH_QUERY_TIMEOUT"),
            "page_size": os.getenv("RESOURCE_GRAPH_PAGE_SIZE"),
            "management_endpoint": os.getenv("RESOURCE_GRAPH_ENDPOINT"),
        }
        for key, value in env_overrides.items():
            if value is not None and value != "":
                data[key] = value

        events_file = _optional_str(data.get("events_file"))
        issues_file = _optional_str(data.get("issues_file"))

        return cls(
            subscription_id=_optional_str(data.get("subscription_id")),
            resource_group=_optional_str(data.get("resource_group")),
            output_dir=Path(_optional_str(data.get("output_dir")) or "."),
            events_file=Path(events_file) if events_file else None,
            issues_file=Path(issues_file) if issues_file else None,
            query_timeout_seconds=_as_float(
                "query_timeout_seconds",
                data.get("query_timeout_seconds", DEFAULT_QUERY_TIMEOUT_SECONDS),
            ),
            page_size=_as_int("page_size", data.get("page_size", MAX_PAGE_SIZE)),
            management_endpoint=_optional_str(data.get("management_endpoint"))
            or DEFAULT_ENDPOINT,
        )
