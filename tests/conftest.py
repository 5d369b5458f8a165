"""Shared pytest fixtures for the notice-guard test suite.

Non-fixture helpers (payload and notice builders) are in helpers.py.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add the tests directory to sys.path so test files can import helpers.py
sys.path.insert(0, str(Path(__file__).parent))

from helpers import build_payload  # noqa: E402


@pytest.fixture
def log() -> MagicMock:
    """Stand-in for the logging collaborator (error/warning sinks)."""
    return MagicMock()


@pytest.fixture
def payload() -> dict:
    """A fully populated notice payload with nested sensitive data."""
    return build_payload()


@pytest.fixture
def valid_params() -> dict:
    return {"project_id": 1, "project_key": "2"}
