"""
Subscription scope resolution.

An explicitly configured subscription id is validated and used as-is. When
none is configured, the ambient default is read from the Azure CLI
(``az account show``), the same subscription an operator's shell points at.
"""

import logging
import re
import shutil
import subprocess

from core.errors.exceptions import ScopeError

logger = logging.getLogger(__name__)

DEFAULT_CLI_TIMEOUT_SECONDS = 30

_SUBSCRIPTION_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_subscription_id(value: str) -> bool:
    return bool(_SUBSCRIPTION_ID_PATTERN.match(value or ""))


def _default_subscription_from_cli(timeout_seconds: float) -> str:
    az_path = shutil.which("az")
    if not az_path:
        raise ScopeError(
            "No subscription configured and Azure CLI not found in PATH\n"
            "Hint: set AZURE_RESOURCE_SUBSCRIPTION_ID or pass --subscription"
        )

    cmd = [az_path, "account", "show", "--query", "id", "-o", "tsv"]
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as e:
        raise ScopeError(
            f"Azure CLI did not return the default subscription within {timeout_seconds}s",
            cause=e,
        ) from e
    except OSError as e:
        raise ScopeError(f"Failed to run Azure CLI: {e}", cause=e) from e

    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        if "az login" in stderr.lower() or "please run" in stderr.lower():
            raise ScopeError(
                "Azure CLI session expired or not logged in\n"
                f"Run: az login\n"
                f"Details: {stderr}"
            )
        raise ScopeError(f"Azure CLI could not select a subscription\nError: {stderr}")

    subscription_id = proc.stdout.strip()
    if not subscription_id:
        raise ScopeError("Azure CLI returned an empty default subscription")
    return subscription_id


def resolve_subscription_id(
    configured: str | None,
    timeout_seconds: float = DEFAULT_CLI_TIMEOUT_SECONDS,
) -> str:
    """Return the subscription every query in this run is scoped to.

    Raises:
        ScopeError: If the configured id is malformed or no default exists
    """
    if configured and configured.strip():
        subscription_id = configured.strip()
        source = "configured"
    else:
        subscription_id = _default_subscription_from_cli(timeout_seconds)
        source = "azure_cli"

    if not is_subscription_id(subscription_id):
        raise ScopeError(
            f"Invalid subscription id: {subscription_id!r}",
            context={"subscription_id": subscription_id},
        )

    logger.info(
        "Using subscription %s (%s)",
        subscription_id,
        source,
        extra={"subscription_id": subscription_id},
    )
    return subscription_id
