"""
pytest configuration for the vault client tests.

Adds src directory to Python path for imports and resets shared state
between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _reset_log_context():
    """Keep contextvar-based log context from leaking between tests."""
    from core.logging.context import clear_log_context

    clear_log_context()
    yield
    clear_log_context()
