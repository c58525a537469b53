"""
Centralized error classification for Azure Resource Graph operations.

Wraps Azure SDK exceptions (azure.core.exceptions.*) into the typed
PipelineError hierarchy. Classification is attribute and string based so
this module has no import-time dependency on the Azure SDK.
"""

from typing import Any, Optional

from core.errors.exceptions import (
    AuthError,
    ErrorCategory,
    PermanentError,
    PipelineError,
    QueryTimeoutError,
    ResourceGraphError,
    ResourceGraphQueryError,
    ThrottlingError,
    classify_http_status,
)


# Azure Resource Manager / AAD error code classifications
AZURE_ERROR_CODES = {
    # Authentication errors (AADSTS codes)
    "auth_errors": [
        "AADSTS50058",  # Silent sign-in request failed
        "AADSTS70008",  # Expired authorization code
        "AADSTS700016",  # Invalid application identifier
        "AADSTS700082",  # Expired refresh token
        "AADSTS7000215",  # Invalid client secret provided
        "AADSTS7000222",  # Expired client secret
        "AADSTS90002",  # Tenant not found
        "InvalidAuthenticationToken",
        "ExpiredAuthenticationToken",
        "AuthenticationFailed",
    ],
    # Throttling errors
    "throttling_errors": [
        "429",
        "RateLimiting",
        "TooManyRequests",
    ],
    # Transient errors
    "transient_errors": [
        "503",
        "502",
        "504",
        "InternalServerError",
        "ServiceUnavailable",
        "GatewayTimeout",
    ],
    # Resource Graph query errors (bad query text)
    "query_errors": [
        "BadRequest",
        "InvalidQuery",
        "ParserFailure",
        "UnsupportedQuery",
        "DisallowedMaxNumberOfRemoteTables",
    ],
    # Scope / permission errors
    "permanent_errors": [
        "403",
        "404",
        "AuthorizationFailed",
        "SubscriptionNotFound",
        "InvalidSubscriptionId",
        "ResourceGroupNotFound",
    ],
}


def classify_azure_error_code(error_code: str) -> Optional[str]:
    """
    Classify an Azure error code into an error category.

    Args:
        error_code: Azure error code (AADSTS*, HTTP status, or ARM code)

    Returns:
        "auth", "throttling", "transient", "query", "permanent", or None
    """
    error_code = str(error_code).strip()

    if error_code in AZURE_ERROR_CODES["auth_errors"] or error_code == "401":
        return "auth"
    if error_code in AZURE_ERROR_CODES["throttling_errors"]:
        return "throttling"
    if error_code in AZURE_ERROR_CODES["transient_errors"]:
        return "transient"
    if error_code in AZURE_ERROR_CODES["query_errors"]:
        return "query"
    if error_code in AZURE_ERROR_CODES["permanent_errors"]:
        return "permanent"

    return None


def _status_code(error: Exception) -> Optional[int]:
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _error_code(error: Exception) -> Optional[str]:
    """Extract the ARM error code from an HttpResponseError, if present."""
    odata_error = getattr(error, "error", None)
    code = getattr(odata_error, "code", None)
    if code:
        return str(code)
    return None


def _retry_after_seconds(error: Exception) -> Optional[float]:
    response = getattr(error, "response", None)
    if response is None:
        return None
    headers: Any = getattr(response, "headers", None) or {}

    # ARM throttling uses Retry-After (seconds); some services add the ms form
    for header, scale in (("x-ms-retry-after-ms", 1000.0), ("retry-after", 1.0)):
        value = headers.get(header) if hasattr(headers, "get") else None
        if value is None:
            continue
        try:
            return float(value) / scale
        except (TypeError, ValueError):
            continue
    return None


class ResourceGraphErrorClassifier:
    """Centralized error classification for Resource Graph queries."""

    @staticmethod
    def classify(error: Exception, context: Optional[dict] = None) -> PipelineError:
        """
        Classify a Resource Graph error into appropriate exception type.

        Args:
            error: Original exception
            context: Additional context (merged with default {"service": "resource_graph"})

        Returns:
            Classified PipelineError subclass
        """
        if isinstance(error, PipelineError):
            if context:
                error.context.update(context)
            return error

        error_str = str(error).lower()
        error_type = type(error).__name__
        ctx: dict = {"service": "resource_graph"}
        if context:
            ctx.update(context)

        status = _status_code(error)
        code = _error_code(error)
        if status is not None:
            ctx["http_status"] = status
        if code:
            ctx["error_code"] = code
        code_category = classify_azure_error_code(code) if code else None

        # Auth errors
        if (
            error_type == "ClientAuthenticationError"
            or status == 401
            or code_category == "auth"
            or "unauthorized" in error_str
        ):
            return AuthError(
                f"Resource Graph authentication failed: {error}",
                cause=error,
                context=ctx,
            )

        # Throttling with Retry-After header extraction
        if (
            status == 429
            or code_category == "throttling"
            or "throttl" in error_str
            or "too many requests" in error_str
        ):
            retry_after = _retry_after_seconds(error)
            if retry_after is not None:
                ctx["retry_after_seconds"] = retry_after
            return ThrottlingError(
                f"Resource Graph throttled: {error}",
                cause=error,
                context=ctx,
                retry_after=retry_after,
            )

        # Timeout
        if (
            isinstance(error, TimeoutError)
            or "timeout" in error_type.lower()
            or "timed out" in error_str
            or "timeout" in error_str
        ):
            return QueryTimeoutError(
                f"Resource Graph query timeout: {error}",
                cause=error,
                context=ctx,
            )

        # Query errors (bad query text)
        if code_category == "query" or (
            status == 400 and ("query" in error_str or "parser" in error_str)
        ):
            return ResourceGraphQueryError(
                f"Resource Graph query error: {error}",
                cause=error,
                context=ctx,
            )

        # Permission / scope errors
        if code_category == "permanent" or (
            status is not None
            and classify_http_status(status) == ErrorCategory.PERMANENT
        ):
            return PermanentError(
                f"Resource Graph request rejected: {error}",
                cause=error,
                context=ctx,
            )

        # Service / connection errors and anything unrecognised
        return ResourceGraphError(
            f"Resource Graph error: {error}",
            cause=error,
            context=ctx,
        )
