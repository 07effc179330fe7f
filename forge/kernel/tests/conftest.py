"""
Kernel test configuration.

Shared fixtures: an in-memory store, a workspace on top of it, and a
deterministic clock. Nothing here touches the filesystem.
"""

from datetime import UTC, datetime

import pytest

from forge.kernel.records import IdAllocator
from forge.kernel.storage import MemoryStore, Persistence
from forge.kernel.workspace import Workspace

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def persistence(store):
    return Persistence(store)


@pytest.fixture
def workspace(persistence, fixed_clock):
    return Workspace(persistence, ids=IdAllocator(clock=lambda: 1_700_000_000.0), clock=fixed_clock)
