"""
Resource Graph client for querying Azure Service Health records.

Provides an async interface for executing Resource Graph (KQL) queries with
paging, a caller-imposed timeout and error classification. The Azure SDK
client is synchronous; calls run in the default executor.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.resourcegraph import ResourceGraphClient
from azure.mgmt.resourcegraph.models import (
    QueryRequest,
    QueryRequestOptions,
    ResultFormat,
)

from core.errors.classifiers import ResourceGraphErrorClassifier
from core.errors.exceptions import AuthError, PipelineError, QueryTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://management.azure.com"
DEFAULT_QUERY_TIMEOUT_SECONDS = 120.0

# Resource Graph returns at most 1000 rows per request
MAX_PAGE_SIZE = 1000


@runtime_checkable
class QueryService(Protocol):
    """Anything that can run a Resource Graph expression against one subscription."""

    async def query(
        self,
        expression: str,
        subscription_id: str,
        timeout_seconds: float | None = None,
    ) -> list[dict[str, Any]]:
        """Return the rows produced by ``expression`` as JSON objects."""
        ...


@dataclass
class ResourceGraphConfig:
    """Connection settings for Azure Resource Graph."""

    endpoint: str = DEFAULT_ENDPOINT
    query_timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS
    page_size: int = MAX_PAGE_SIZE

    @property
    def token_scope(self) -> str:
        return self.endpoint.rstrip("/") + "/.default"


@dataclass
class QueryResult:
    """Result of a Resource Graph query execution."""

    # Result data as list of dicts (each dict is a row)
    rows: list[dict[str, Any]] = field(default_factory=list)
    query_duration_ms: float = 0.0
    row_count: int = 0
    page_count: int = 0
    is_partial: bool = False

    # For debugging/logging
    query_text: str = ""

    @property
    def is_empty(self):
        """Check if query returned no results."""
        return self.row_count == 0


def _spn_from_env() -> tuple[str, str, str] | None:
    """Service principal (client_id, client_secret, tenant_id) from the environment.

    AZURE_* names win; the AZ_USERNAME / AZ_SECRET_VALUE / AZ_TENANT names
    used by older runbook deployments are accepted as a fallback.
    """
    client_id = os.getenv("AZURE_CLIENT_ID") or os.getenv("AZ_USERNAME")
    client_secret = os.getenv("AZURE_CLIENT_SECRET") or os.getenv("AZ_SECRET_VALUE")
    tenant_id = os.getenv("AZURE_TENANT_ID") or os.getenv("AZ_TENANT")
    if client_id and client_secret and tenant_id:
        return client_id, client_secret, tenant_id
    return None


def _is_truncated(response: Any) -> bool:
    value = getattr(response, "result_truncated", None)
    value = getattr(value, "value", value)
    return str(value).lower() == "true"


class ResourceGraphQueryClient:
    """
    Async client for Azure Resource Graph.

    Authentication priority:
    1. Explicit credential passed to the constructor
    2. Service principal from environment (ClientSecretCredential)
    3. DefaultAzureCredential (managed identity, Azure CLI, ...)

    Example:
        config = ResourceGraphConfig()
        async with ResourceGraphQueryClient(config) as client:
            rows = await client.query(
                "ServiceHealthResources | take 10",
                subscription_id,
            )
    """

    def __init__(self, config: ResourceGraphConfig, credential: Any = None):
        """Initialize client with configuration."""
        self.config = config
        self._credential = credential
        self._owns_credential = credential is None
        self._client: ResourceGraphClient | None = None
        self.auth_mode = "explicit" if credential is not None else None

    async def __aenter__(self) -> "ResourceGraphQueryClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_credential(self) -> Any:
        spn = _spn_from_env()
        if spn is not None:
            client_id, client_secret, tenant_id = spn
            self.auth_mode = "spn"
            logger.info(
                "Using service principal credentials for Resource Graph",
                extra={"auth_mode": self.auth_mode},
            )
            return ClientSecretCredential(tenant_id, client_id, client_secret)

        self.auth_mode = "default"
        logger.info(
            "Using DefaultAzureCredential for Resource Graph",
            extra={"auth_mode": self.auth_mode},
        )
        return DefaultAzureCredential()

    async def connect(self) -> None:
        """Establish an identity with Azure and create the SDK client.

        A management-plane token is acquired up front so that credential
        problems surface as AuthError before any query runs.

        Raises:
            AuthError: If no token can be obtained
        """
        if self._client is not None:
            return  # Already connected

        loop = asyncio.get_running_loop()
        try:
            if self._credential is None:
                self._credential = self._build_credential()

            await loop.run_in_executor(
                None, self._credential.get_token, self.config.token_scope
            )
            self._client = ResourceGraphClient(
                self._credential, base_url=self.config.endpoint
            )
        except Exception as e:
            logger.error(
                "Failed to authenticate with Azure: %s",
                str(e)[:200],
                extra={
                    "endpoint": self.config.endpoint,
                    "auth_mode": self.auth_mode,
                    "error": str(e)[:200],
                },
            )
            classified = ResourceGraphErrorClassifier.classify(
                e, {"operation": "connect"}
            )
            if isinstance(classified, AuthError):
                raise classified from e
            raise AuthError(
                f"Unable to establish Azure identity: {e}",
                cause=e,
                context=classified.context,
            ) from e

        logger.info(
            "Connected to Resource Graph",
            extra={"endpoint": self.config.endpoint, "auth_mode": self.auth_mode},
        )

    async def close(self) -> None:
        """Close the SDK client and any credential this client created."""
        if self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                logger.warning("Error closing Resource Graph client: %s", str(e)[:100])
            finally:
                self._client = None

        if self._owns_credential and self._credential is not None:
            close = getattr(self._credential, "close", None)
            try:
                if callable(close):
                    close()
            except Exception as e:
                logger.warning("Error closing Azure credential: %s", str(e)[:100])
            finally:
                self._credential = None

        logger.debug("Resource Graph connection closed")

    async def query(
        self,
        expression: str,
        subscription_id: str,
        timeout_seconds: float | None = None,
    ) -> list[dict[str, Any]]:
        """QueryService implementation: rows only."""
        result = await self.execute_query(expression, subscription_id, timeout_seconds)
        return result.rows

    async def execute_query(
        self,
        query: str,
        subscription_id: str,
        timeout_seconds: float | None = None,
    ) -> QueryResult:
        """Execute a query, following skip tokens until every page is read.

        Raises:
            QueryTimeoutError: If the query exceeds the timeout
            PipelineError: Classified service error
        """
        if self._client is None:
            await self.connect()

        timeout = timeout_seconds or self.config.query_timeout_seconds
        loop = asyncio.get_running_loop()
        start_time = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                loop.run_in_executor(
                    None, self._execute_pages, query, subscription_id
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "Resource Graph query timed out",
                extra={
                    "subscription_id": subscription_id,
                    "query_length": len(query),
                    "timeout_seconds": timeout,
                },
            )
            raise QueryTimeoutError(
                f"Resource Graph query exceeded {timeout}s",
                cause=e,
                context={"timeout_seconds": timeout},
            ) from e
        except PipelineError:
            raise
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Resource Graph query failed",
                extra={
                    "subscription_id": subscription_id,
                    "query_length": len(query),
                    "query": query[:500],
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e)[:1000],
                    "error_type": type(e).__name__,
                },
            )
            raise ResourceGraphErrorClassifier.classify(
                e,
                {"operation": "execute_query", "subscription_id": subscription_id},
            ) from e

        result.query_duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Query executed successfully",
            extra={
                "subscription_id": subscription_id,
                "query_length": len(query),
                "row_count": result.row_count,
                "page_count": result.page_count,
                "is_partial": result.is_partial,
                "duration_ms": round(result.query_duration_ms, 2),
            },
        )
        return result

    def _execute_pages(self, query: str, subscription_id: str) -> QueryResult:
        """Run the query page by page (blocking; executor thread)."""
        page_size = max(1, min(self.config.page_size, MAX_PAGE_SIZE))
        rows: list[dict[str, Any]] = []
        skip_token: str | None = None
        page_count = 0
        is_partial = False

        while True:
            request = QueryRequest(
                subscriptions=[subscription_id],
                query=query,
                options=QueryRequestOptions(
                    top=page_size,
                    skip_token=skip_token,
                    result_format=ResultFormat.OBJECT_ARRAY,
                ),
            )
            response = self._client.resources(request)
            page_count += 1
            rows.extend(response.data or [])
            is_partial = is_partial or _is_truncated(response)

            skip_token = getattr(response, "skip_token", None)
            if not skip_token:
                break

        return QueryResult(
            rows=rows,
            row_count=len(rows),
            page_count=page_count,
            is_partial=is_partial,
            query_text=query,
        )
