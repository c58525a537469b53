"""Logging setup and configuration."""

import io
import logging
import secrets
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_LOG_DIR = Path("logs")
DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_BACKUP_COUNT = 7
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.mgmt.resourcegraph",
    "msal",
    "urllib3",
]


def get_log_file_path(log_dir: Path, name: str = "maintenance") -> Path:
    """
    Build log file path with a date subfolder.

    Structure: {log_dir}/{YYYY-MM-DD}/{name}_{MMDD}_{HHMM}.log

    Example:
        logs/2026-10-18/maintenance_1018_0930.log
    """
    now = datetime.now()
    date_folder = now.strftime("%Y-%m-%d")
    filename = f"{name}_{now.strftime('%m%d')}_{now.strftime('%H%M')}.log"
    return log_dir / date_folder / filename


def setup_logging(
    name: str = "maintenance",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    suppress_noisy: bool = True,
    cycle_id: str | None = None,
    log_to_stdout: bool = True,
    console_json: bool = False,
) -> logging.Logger:
    """
    Configure logging with a console handler and an optional rotating file handler.

    The file handler is only installed when log_dir is given; one-shot runs
    inside a container normally log to stdout only.

    Args:
        name: Logger name and log file prefix
        log_dir: Directory for log files (no file handler when None)
        json_format: Use JSON format for file logs (default: True)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        suppress_noisy: Quiet down Azure SDK and HTTP client loggers
        cycle_id: Run identifier injected into every record
        log_to_stdout: Emit console output on stdout rather than stderr
        console_json: One JSON object per line on the console (log collectors)

    Returns:
        Configured logger instance
    """
    if cycle_id:
        set_log_context(cycle_id=cycle_id)

    stream = sys.stdout if log_to_stdout else sys.stderr
    if sys.platform == "win32":
        stream = io.TextIOWrapper(stream.buffer, encoding="utf-8", errors="replace")
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(JSONFormatter() if console_json else ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_file = get_log_file_path(Path(log_dir), name=name)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if json_format:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )

        file_handler = TimedRotatingFileHandler(
            log_file,
            when=DEFAULT_ROTATION_WHEN,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(
        "Logging initialized",
        extra={"output_path": str(log_file) if log_dir is not None else None},
    )
    return logger


def generate_cycle_id() -> str:
    """
    Generate unique run identifier.

    Format: c-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"c-{ts}-{suffix}"
