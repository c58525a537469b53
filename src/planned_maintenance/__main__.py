"""Azure planned maintenance retrieval. Use --help for usage."""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.errors.exceptions import PipelineError
from core.logging.setup import generate_cycle_id, setup_logging
from core.logging.utilities import log_exception, log_startup_banner
from planned_maintenance.config import MaintenanceConfig
from planned_maintenance.resourcegraph.client import ResourceGraphQueryClient
from planned_maintenance.resourcegraph.subscription import resolve_subscription_id
from planned_maintenance.runner import MaintenancePipeline, create_issues_from_file

COMMANDS = ("run", "fetch", "issues")

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="planned-maintenance",
        description="Fetch Azure planned maintenance events and create issues",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
    run     fetch events and impacted resources, write maintenance_events.json
            and issues.json (default)
    fetch   write maintenance_events.json only
    issues  create issues.json from an existing maintenance_events.json

Examples:
    # Current az CLI subscription, all resource groups
    python -m planned_maintenance

    # One resource group (global events are always included)
    python -m planned_maintenance run --resource-group rg-prod --output-dir out

    # Issues from a previously fetched file
    python -m planned_maintenance issues --input-file out/maintenance_events.json
        """,
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        default="run",
        help="What to do (default: run)",
    )

    parser.add_argument(
        "--subscription",
        default=None,
        help="Subscription id (default: AZURE_RESOURCE_SUBSCRIPTION_ID or az CLI default)",
    )

    parser.add_argument(
        "--resource-group",
        default=None,
        help="Restrict to one resource group (default: AZURE_RESOURCE_GROUP or all)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for output files (default: OUTPUT_DIR or .)",
    )

    parser.add_argument(
        "--input-file",
        type=Path,
        default=None,
        help="Maintenance events file (default: <output-dir>/maintenance_events.json)",
    )

    parser.add_argument(
        "--output-file",
        type=Path,
        default=None,
        help="Issues file (default: <output-dir>/issues.json)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: ./config.yaml)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-query timeout in seconds (default: 120)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write JSON log files under this directory",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit console logs as JSON lines",
    )

    return parser.parse_args(argv)


def apply_cli_overrides(
    config: MaintenanceConfig, args: argparse.Namespace
) -> MaintenanceConfig:
    """CLI flags take priority over environment and config.yaml."""
    overrides = {
        "subscription_id": args.subscription,
        "resource_group": args.resource_group,
        "output_dir": args.output_dir,
        "events_file": args.input_file,
        "issues_file": args.output_file,
        "query_timeout_seconds": args.timeout,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return config
    return dataclasses.replace(config, **overrides)


async def run_pipeline(
    config: MaintenanceConfig, command: str, cycle_id: str
) -> int:
    """Resolve scope, connect, and run the fetch (and projection) stages."""
    subscription_id = await asyncio.to_thread(
        resolve_subscription_id, config.subscription_id
    )
    config = dataclasses.replace(config, subscription_id=subscription_id)

    log_startup_banner(
        logger,
        "Azure Planned Maintenance",
        command=command,
        cycle_id=cycle_id,
        subscription=config.subscription_id,
        resource_group=config.resource_group,
        events_file=config.events_path,
        issues_file=config.issues_path if command == "run" else None,
    )

    async with ResourceGraphQueryClient(config.resource_graph) as client:
        pipeline = MaintenancePipeline(config, client, cycle_id=cycle_id)
        if command == "fetch":
            result = await pipeline.fetch()
        else:
            result = await pipeline.run()
    return result.exit_code


async def run_issues(config: MaintenanceConfig) -> int:
    log_startup_banner(
        logger,
        "Creating issues from maintenance events",
        input_file=config.events_path,
        output_file=config.issues_path,
    )
    await create_issues_from_file(config.events_path, config.issues_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    global logger

    args = parse_args(argv)
    load_dotenv(Path.cwd() / ".env")

    cycle_id = generate_cycle_id()
    setup_logging(
        name="maintenance",
        log_dir=args.log_dir,
        console_level=getattr(logging, args.log_level),
        cycle_id=cycle_id,
        console_json=args.json_logs,
    )
    logger = logging.getLogger(__name__)

    try:
        config = apply_cli_overrides(MaintenanceConfig.load_config(args.config), args)
    except (ValueError, OSError) as e:
        logger.error("Configuration error: %s", e, extra={"error": str(e)})
        return 1

    try:
        if args.command == "issues":
            return asyncio.run(run_issues(config))
        return asyncio.run(run_pipeline(config, args.command, cycle_id))
    except PipelineError as e:
        log_exception(logger, e, "Planned maintenance run failed")
        return 1
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
        return 130


if __name__ == "__main__":
    sys.exit(main())
