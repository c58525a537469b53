"""
Structured logging module.

Provides JSON/console logging with run context propagation.
"""

from core.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from core.logging.context_managers import (
    LogContext,
    StageLogContext,
    log_phase,
)
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.setup import (
    generate_cycle_id,
    get_log_file_path,
    setup_logging,
)
from core.logging.utilities import (
    log_exception,
    log_startup_banner,
    log_with_context,
)

__all__ = [
    # Setup
    "setup_logging",
    "generate_cycle_id",
    "get_log_file_path",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    # Context Managers
    "LogContext",
    "StageLogContext",
    "log_phase",
    # Utilities
    "log_with_context",
    "log_exception",
    "log_startup_banner",
]
