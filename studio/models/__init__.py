"""
Pydantic models for the studio API.

All request/response shapes defined here. No imports from routes.
"""

from studio.models.project import (
    CreateProjectRequest,
    DeployResponse,
    PreviewMessageRequest,
    PreviewMessageResponse,
    ProjectResponse,
    UpdateConfigRequest,
)

__all__ = [
    "CreateProjectRequest",
    "DeployResponse",
    "PreviewMessageRequest",
    "PreviewMessageResponse",
    "ProjectResponse",
    "UpdateConfigRequest",
]
