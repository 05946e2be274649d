"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RPC_URL", "http://localhost:8545")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from tests.factories import FakeBlockStore, FakeChainSource


@pytest.fixture
def chain_source():
    """Fake node with head 0."""
    return FakeChainSource()


@pytest.fixture
def block_store():
    """Empty in-memory block store."""
    return FakeBlockStore()
