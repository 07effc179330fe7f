"""Project routes: list, create, get, update config, generated bot code, deploy."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from forge.kernel.deployment import Deployer
from forge.kernel.paths import InvalidPathError
from forge.kernel.workspace import ProjectNotFound, ValidationError, Workspace
from studio.deps import get_deployer, get_workspace
from studio.models.project import (
    CreateProjectRequest,
    DeployResponse,
    ProjectResponse,
    UpdateConfigRequest,
)

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", status_code=200)
async def list_projects(workspace: Workspace = Depends(get_workspace)) -> list[ProjectResponse]:
    """List every project in the workspace."""
    return [ProjectResponse.from_model(p) for p in workspace.projects]


@router.post("", status_code=201)
async def create_project(
    req: CreateProjectRequest,
    workspace: Workspace = Depends(get_workspace),
) -> ProjectResponse:
    """Create a bot or website project from its default configuration."""
    try:
        project = workspace.add_project(req.name, req.type, template_id=req.template_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return ProjectResponse.from_model(project)


@router.get("/{project_id}", status_code=200)
async def get_project(project_id: str, workspace: Workspace = Depends(get_workspace)) -> ProjectResponse:
    return ProjectResponse.from_model(_project_or_404(workspace, project_id))


@router.patch("/{project_id}/config", status_code=200)
async def update_config(
    project_id: str,
    req: UpdateConfigRequest,
    workspace: Workspace = Depends(get_workspace),
) -> ProjectResponse:
    """
    Replace one field of the project's configuration.

    The path must already exist in the tree: unknown fields and
    out-of-range indexes are rejected with 422.
    """
    _project_or_404(workspace, project_id)
    try:
        workspace.update_config(project_id, req.path, req.value)
    except InvalidPathError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from None
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return ProjectResponse.from_model(workspace.get_project(project_id))


@router.get("/{project_id}/bot.py", status_code=200, response_class=PlainTextResponse)
async def get_bot_code(project_id: str, workspace: Workspace = Depends(get_workspace)) -> str:
    """The generated discord.py program for a bot project."""
    _project_or_404(workspace, project_id)
    try:
        return workspace.bot_code(project_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None


@router.post("/{project_id}/deploy", status_code=200)
async def deploy_project(
    project_id: str,
    workspace: Workspace = Depends(get_workspace),
    deployer: Deployer = Depends(get_deployer),
) -> DeployResponse:
    """Run a simulated deployment to completion."""
    _project_or_404(workspace, project_id)
    try:
        result = await deployer.deploy(project_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return DeployResponse(
        project_id=result.project_id,
        status=result.status,
        live_url=result.live_url,
        bot_invite_url=result.bot_invite_url,
        logs=result.logs,
    )


def _project_or_404(workspace: Workspace, project_id: str):
    try:
        return workspace.get_project(project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.") from None
