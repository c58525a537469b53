"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PipelineError hierarchy for typed exceptions
- Classification utilities for error handling
- Resource Graph error classifier for Azure SDK exceptions
"""

from core.errors.classifiers import (
    # Constants
    AZURE_ERROR_CODES,
    # Classes
    ResourceGraphErrorClassifier,
    # Functions
    classify_azure_error_code,
)
from core.errors.exceptions import (
    AuthError,
    # Enums
    ErrorCategory,
    MalformedRecordError,
    PermanentError,
    # Base classes
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

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PipelineError",
    "AuthError",
    "ScopeError",
    "TransientError",
    "PermanentError",
    # Domain errors
    "QueryError",
    "MalformedRecordError",
    "ResourceGraphError",
    "ResourceGraphQueryError",
    "QueryTimeoutError",
    "ThrottlingError",
    "classify_http_status",
    # Resource Graph classifier
    "AZURE_ERROR_CODES",
    "classify_azure_error_code",
    "ResourceGraphErrorClassifier",
]
