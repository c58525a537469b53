"""
pytest configuration for the maintenance pipeline tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from core.logging.context import clear_log_context  # noqa: E402


@pytest.fixture(autouse=True)
def reset_log_context():
    """Reset log context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()
