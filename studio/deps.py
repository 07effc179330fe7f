"""
Shared dependencies for studio routes.

One workspace per process, opened lazily on first use. Tests replace
these through app.dependency_overrides.
"""

from __future__ import annotations

from forge.kernel.deployment import Deployer
from forge.kernel.workspace import Workspace

_workspace: Workspace | None = None
_deployer: Deployer | None = None


def get_workspace() -> Workspace:
    global _workspace
    if _workspace is None:
        _workspace = Workspace.open()
    return _workspace


def get_deployer() -> Deployer:
    global _deployer
    if _deployer is None:
        _deployer = Deployer(get_workspace())
    return _deployer
