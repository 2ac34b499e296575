"""
Pytest configuration for relayrouter tests.

Provides:
- Logging configured at DEBUG so structured log calls are exercised
- Shared collaborator fakes and engine fixtures via ``pytest_plugins``
  (see ``tests/fixtures/collaborators.py``)
"""

from __future__ import annotations

import logging

import pytest


pytest_plugins = ["tests.fixtures.collaborators"]


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)
