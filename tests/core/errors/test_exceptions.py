"""
Tests for exception hierarchy and error classification.
"""

from core.errors.exceptions import (
    AuthError,
    ErrorCategory,
    MalformedRecordError,
    PermanentError,
    PipelineError,
    QueryError,
    QueryTimeoutError,
    ResourceGraphError,
    ResourceGraphQueryError,
    ScopeError,
    ThrottlingError,
    TransientError,
    classify_http_status,
)


class TestErrorCategory:
    """Test ErrorCategory enum."""

    def test_all_categories_exist(self):
        assert ErrorCategory.TRANSIENT.value == "transient"
        assert ErrorCategory.AUTH.value == "auth"
        assert ErrorCategory.PERMANENT.value == "permanent"
        assert ErrorCategory.UNKNOWN.value == "unknown"


class TestPipelineError:
    """Test base PipelineError class."""

    def test_basic_error(self):
        err = PipelineError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.cause is None
        assert err.context == {}
        assert err.category == ErrorCategory.UNKNOWN

    def test_error_with_cause(self):
        cause = ValueError("Invalid value")
        err = PipelineError("Wrapper message", cause=cause)
        assert err.cause == cause
        assert "Caused by" in str(err)
        assert "Invalid value" in str(err)

    def test_error_with_context(self):
        err = PipelineError("Error", context={"subscription_id": "sub-1"})
        assert err.context["subscription_id"] == "sub-1"

    def test_is_retryable_default(self):
        """Unknown category is retryable."""
        assert PipelineError("Error").is_retryable is True


class TestHierarchy:
    """Categories of the concrete error types."""

    def test_auth_error(self):
        err = AuthError("no identity")
        assert err.category == ErrorCategory.AUTH
        assert err.is_retryable is False

    def test_scope_error_is_permanent(self):
        err = ScopeError("bad subscription")
        assert err.category == ErrorCategory.PERMANENT
        assert err.is_retryable is False

    def test_throttling_error_keeps_retry_after(self):
        err = ThrottlingError("slow down", retry_after=12.5)
        assert isinstance(err, TransientError)
        assert err.retry_after == 12.5
        assert err.is_retryable is True

    def test_malformed_record_is_permanent(self):
        assert isinstance(MalformedRecordError("bad id"), PermanentError)

    def test_resource_graph_errors(self):
        assert isinstance(ResourceGraphError("503"), TransientError)
        assert isinstance(ResourceGraphQueryError("parse"), PermanentError)
        assert isinstance(QueryTimeoutError("slow"), TransientError)


class TestQueryError:
    """QueryError carries the failed stage."""

    def test_stage_in_attribute_and_context(self):
        err = QueryError("events", "Events query failed")
        assert err.stage == "events"
        assert err.context["stage"] == "events"
        assert err.category == ErrorCategory.UNKNOWN

    def test_category_from_classified_cause(self):
        cause = ThrottlingError("throttled")
        err = QueryError("resources", "Resources query failed", cause=cause)
        assert err.category == ErrorCategory.TRANSIENT

        err = QueryError("events", "failed", cause=ResourceGraphQueryError("bad"))
        assert err.category == ErrorCategory.PERMANENT

    def test_category_not_taken_from_plain_exception(self):
        err = QueryError("events", "failed", cause=RuntimeError("boom"))
        assert err.category == ErrorCategory.UNKNOWN

    def test_explicit_context_keeps_stage(self):
        err = QueryError("events", "failed", context={"subscription_id": "s"})
        assert err.context == {"subscription_id": "s", "stage": "events"}


class TestClassifyHttpStatus:
    """Test HTTP status classification."""

    def test_classify_http_status(self):
        assert classify_http_status(200) == ErrorCategory.UNKNOWN
        assert classify_http_status(401) == ErrorCategory.AUTH
        assert classify_http_status(403) == ErrorCategory.PERMANENT
        assert classify_http_status(404) == ErrorCategory.PERMANENT
        assert classify_http_status(408) == ErrorCategory.TRANSIENT
        assert classify_http_status(429) == ErrorCategory.TRANSIENT
        assert classify_http_status(500) == ErrorCategory.TRANSIENT
        assert classify_http_status(503) == ErrorCategory.TRANSIENT
