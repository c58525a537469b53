"""Tests for the command-line entry point."""

import json
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from core.errors.exceptions import AuthError, ScopeError
from planned_maintenance.__main__ import apply_cli_overrides, main, parse_args
from planned_maintenance.config import MaintenanceConfig

MODULE = "planned_maintenance.__main__"
SUB = "00000000-1111-2222-3333-444444444444"

ENV_NAMES = (
    "AZURE_RESOURCE_SUBSCRIPTION_ID",
    "AZURE_RESOURCE_GROUP",
    "OUTPUT_DIR",
    "INPUT_FILE",
    "OUTPUT_FILE",
    "RESOURCE_GRAPH_QUERY_TIMEOUT",
    "RESOURCE_GRAPH_PAGE_SIZE",
    "RESOURCE_GRAPH_ENDPOINT",
)


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _fake_client_class(service, connect_error=None):
    class FakeClient:
        def __init__(self, config):
            self.config = config

        async def __aenter__(self):
            if connect_error is not None:
                raise connect_error
            return service

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            return False

    return FakeClient


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.command == "run"
        assert args.subscription is None
        assert args.log_level == "INFO"
        assert args.json_logs is False

    def test_subcommand_and_options(self):
        args = parse_args(
            ["issues", "--input-file", "a.json", "--output-file", "b.json", "--timeout", "30"]
        )
        assert args.command == "issues"
        assert args.input_file == Path("a.json")
        assert args.output_file == Path("b.json")
        assert args.timeout == 30.0

    def test_invalid_command(self):
        with pytest.raises(SystemExit):
            parse_args(["deploy"])


class TestApplyCliOverrides:

    def test_flags_override_config(self, tmp_path):
        config = MaintenanceConfig(resource_group="rg-env", query_timeout_seconds=120)
        args = parse_args(
            ["--resource-group", "rg-cli", "--output-dir", str(tmp_path), "--timeout", "15"]
        )

        result = apply_cli_overrides(config, args)

        assert result.resource_group == "rg-cli"
        assert result.query_timeout_seconds == 15
        assert result.events_path == tmp_path / "maintenance_events.json"

    def test_no_flags_keeps_config(self):
        config = MaintenanceConfig(resource_group="rg-env")
        assert apply_cli_overrides(config, parse_args([])) is config


class TestMain:

    def test_run_writes_both_artifacts(
        self, tmp_path, fake_query_service, make_event, make_resource
    ):
        service = fake_query_service(events=[make_event("T1")], resources=[make_resource("T1")])

        with patch(f"{MODULE}.resolve_subscription_id", return_value=SUB) as mock_resolve, \
                patch(f"{MODULE}.ResourceGraphQueryClient", _fake_client_class(service)):
            exit_code = main(["run", "--output-dir", str(tmp_path / "out")])

        assert exit_code == 0
        mock_resolve.assert_called_once_with(None)
        events = json.loads((tmp_path / "out" / "maintenance_events.json").read_text())
        issues = json.loads((tmp_path / "out" / "issues.json").read_text())
        assert events[0]["trackingId"] == "T1"
        assert issues[0]["details"]["tracking_id"] == "T1"
        assert all(c["subscription_id"] == SUB for c in service.calls)

    def test_fetch_writes_events_only(self, tmp_path, fake_query_service):
        service = fake_query_service(events=[])

        with patch(f"{MODULE}.resolve_subscription_id", return_value=SUB), \
                patch(f"{MODULE}.ResourceGraphQueryClient", _fake_client_class(service)):
            exit_code = main(["fetch", "--subscription", SUB])

        assert exit_code == 0
        assert json.loads((tmp_path / "maintenance_events.json").read_text()) == []
        assert not (tmp_path / "issues.json").exists()

    def test_events_failure_exit_code(self, tmp_path, fake_query_service):
        service = fake_query_service(events_error=RuntimeError("503 Service Unavailable"))

        with patch(f"{MODULE}.resolve_subscription_id", return_value=SUB), \
                patch(f"{MODULE}.ResourceGraphQueryClient", _fake_client_class(service)):
            exit_code = main([])

        assert exit_code == 1
        assert json.loads((tmp_path / "maintenance_events.json").read_text()) == []
        assert json.loads((tmp_path / "issues.json").read_text()) == []

    def test_scope_failure_aborts_without_artifacts(self, tmp_path, fake_query_service):
        with patch(f"{MODULE}.resolve_subscription_id", side_effect=ScopeError("no sub")), \
                patch(f"{MODULE}.ResourceGraphQueryClient") as mock_client:
            exit_code = main([])

        assert exit_code == 1
        mock_client.assert_not_called()
        assert not (tmp_path / "maintenance_events.json").exists()

    def test_auth_failure_aborts_without_artifacts(self, tmp_path, fake_query_service):
        client_class = _fake_client_class(fake_query_service(), AuthError("no identity"))

        with patch(f"{MODULE}.resolve_subscription_id", return_value=SUB), \
                patch(f"{MODULE}.ResourceGraphQueryClient", client_class):
            exit_code = main([])

        assert exit_code == 1
        assert not (tmp_path / "maintenance_events.json").exists()
        assert not (tmp_path / "issues.json").exists()

    def test_issues_command(self, tmp_path):
        source = tmp_path / "events.json"
        source.write_text(
            json.dumps(
                [
                    {
                        "trackingId": "T1",
                        "level": "Informational",
                        "description": "Maint",
                        "impactedResources": [{"TrackingId": "T1", "resourceName": "vm1"}],
                    }
                ]
            )
        )

        exit_code = main(
            ["issues", "--input-file", str(source), "--output-file", str(tmp_path / "i.json")]
        )

        assert exit_code == 0
        issues = json.loads((tmp_path / "i.json").read_text())
        assert issues[0]["severity"] == 3
        assert "Check impact duration: Unknown to Unknown" in issues[0]["next_steps"]

    def test_issues_missing_input(self, tmp_path):
        assert main(["issues", "--input-file", str(tmp_path / "missing.json")]) == 1

    def test_config_error(self, monkeypatch):
        monkeypatch.setenv("RESOURCE_GRAPH_PAGE_SIZE", "lots")
        assert main([]) == 1

    def test_dotenv_loaded_from_working_directory(self, tmp_path, fake_query_service):
        (tmp_path / ".env").write_text("AZURE_RESOURCE_GROUP=rg-dotenv\n")
        service = fake_query_service(events=[])

        try:
            with patch(f"{MODULE}.resolve_subscription_id", return_value=SUB), \
                    patch(f"{MODULE}.ResourceGraphQueryClient", _fake_client_class(service)):
                main(["fetch"])
        finally:
            os.environ.pop("AZURE_RESOURCE_GROUP", None)

        assert "rg-dotenv" in service.event_calls[0]["expression"]
