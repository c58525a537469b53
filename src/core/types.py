"""
Core types used across modules.

This module provides the base enum shared by the error hierarchy and the
log formatters so that categories compare equal everywhere.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if the run is repeated
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Authentication failures (e.g., 401 errors, expired secrets)
        PERMANENT: Failures that won't succeed on a repeated run
                   (e.g., invalid query, unknown subscription, malformed record)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = [
    "ErrorCategory",
]
