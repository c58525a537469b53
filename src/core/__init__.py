"""
Core library: shared infrastructure for the maintenance pipeline.

Modules:
    logging     - Structured JSON/console logging with run context
    errors      - Error classification and exception hierarchy
    utils       - JSON serialization helpers

Design Principles:
    - No dependency on the Resource Graph client or pipeline stages
    - All modules are independently testable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]
