"""Project models for the studio API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from forge.kernel.types import Project


class CreateProjectRequest(BaseModel):
    """What the client sends to POST /api/projects."""

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=200)
    type: Literal["bot", "website"]
    template_id: str = "quantum"  # website projects only


class UpdateConfigRequest(BaseModel):
    """One path-based field replacement."""

    model_config = {"extra": "forbid"}

    path: list[str | int] = Field(min_length=1)
    value: Any = None


class ProjectResponse(BaseModel):
    """Public project shape returned to the client."""

    id: str
    name: str
    type: str
    created_at: datetime
    hosting_status: str
    live_url: str | None
    bot_invite_url: str | None
    config: dict[str, Any]

    @classmethod
    def from_model(cls, project: Project) -> ProjectResponse:
        return cls(
            id=project.id,
            name=project.name,
            type=project.type,
            created_at=project.created_at,
            hosting_status=project.hosting_status,
            live_url=project.live_url,
            bot_invite_url=project.bot_invite_url,
            config=project.config,
        )


class PreviewMessageRequest(BaseModel):
    """
    A message the rendered document posted to the studio page, forwarded
    with the origin the browser reported for it.
    """

    model_config = {"extra": "forbid"}

    origin: str
    data: Any = None


class PreviewMessageResponse(BaseModel):
    accepted: bool
    preview: dict[str, Any] | None = None
    order_id: str | None = None


class DeployResponse(BaseModel):
    project_id: str
    status: str
    live_url: str | None
    bot_invite_url: str | None
    logs: list[str]
