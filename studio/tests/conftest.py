"""
Pytest configuration and fixtures for studio tests.
"""

from __future__ import annotations

import os

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before importing config
os.environ.setdefault("FORGE_ENVIRONMENT", "test")
os.environ.setdefault("FORGE_PREVIEW_ORIGIN", "null")

from forge.kernel.deployment import Deployer  # noqa: E402
from forge.kernel.storage import MemoryStore, Persistence  # noqa: E402
from forge.kernel.workspace import Workspace  # noqa: E402
from studio.deps import get_deployer, get_workspace  # noqa: E402
from studio.main import app  # noqa: E402


@pytest.fixture
def workspace():
    """A fresh in-memory workspace per test."""
    return Workspace(Persistence(MemoryStore()))


@pytest.fixture
def deployer(workspace):
    """Deployments that finish instantly."""
    return Deployer(workspace, time_scale=0)


@pytest_asyncio.fixture
async def async_client(workspace, deployer):
    """Async HTTP client against the ASGI app, wired to the test workspace."""
    app.dependency_overrides[get_workspace] = lambda: workspace
    app.dependency_overrides[get_deployer] = lambda: deployer
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
