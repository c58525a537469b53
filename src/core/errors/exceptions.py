"""
Unified exception hierarchy for the maintenance pipeline.

Provides typed exceptions with a category so the runner can tell a fatal
stage failure from a degradable one, and so logs carry a stable
error_category field.
"""


# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether a later run could succeed without operator action."""
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication / Scope Errors
# =============================================================================


class AuthError(PipelineError):
    """Unable to establish an identity with the backing service."""

    category = ErrorCategory.AUTH


class ScopeError(PipelineError):
    """Requested subscription/scope cannot be selected."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Transient Errors
# =============================================================================


class TransientError(PipelineError):
    """Base class for transient errors."""

    category = ErrorCategory.TRANSIENT


class ThrottlingError(TransientError):
    """Rate limited (429)."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.retry_after = retry_after  # Seconds the service asked us to wait


# =============================================================================
# Permanent Errors
# =============================================================================


class PermanentError(PipelineError):
    """Base class for permanent errors."""

    category = ErrorCategory.PERMANENT


class MalformedRecordError(PermanentError):
    """A record is missing or carries an unparsable expected field."""

    pass


# =============================================================================
# Domain-Specific Errors
# =============================================================================


class ResourceGraphError(TransientError):
    """Error from Azure Resource Graph operations."""

    pass


class ResourceGraphQueryError(PermanentError):
    """Resource Graph query syntax or semantic error."""

    pass


class QueryTimeoutError(TransientError):
    """Query did not complete within the caller-imposed timeout."""

    pass


class QueryError(PipelineError):
    """
    The backing query for a pipeline stage failed.

    The category is taken from the classified cause so a throttled events
    query still reports as transient.
    """

    def __init__(
        self,
        stage: str,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        context = dict(context or {})
        context.setdefault("stage", stage)
        super().__init__(message, cause, context)
        self.stage = stage
        if isinstance(cause, PipelineError):
            self.category = cause.category


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Client errors, won't fix on re-run

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN
