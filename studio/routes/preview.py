"""Storefront preview routes: rendered document and the message bridge."""

from __future__ import annotations

import dataclasses

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse

from forge.kernel.workspace import ProjectNotFound, ValidationError, Workspace
from studio.deps import get_workspace
from studio.models.project import PreviewMessageRequest, PreviewMessageResponse

router = APIRouter(prefix="/api/projects", tags=["preview"])


@router.get("/{project_id}/preview", status_code=200, response_class=HTMLResponse)
async def get_preview(project_id: str, workspace: Workspace = Depends(get_workspace)) -> HTMLResponse:
    """The storefront document for the project's current preview state."""
    try:
        html = workspace.preview_document(project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.") from None
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return HTMLResponse(content=html)


@router.post("/{project_id}/preview/messages", status_code=200)
async def post_preview_message(
    project_id: str,
    req: PreviewMessageRequest,
    workspace: Workspace = Depends(get_workspace),
) -> PreviewMessageResponse:
    """
    Forward one message posted by the preview document.

    Untrusted or malformed messages are not an error: they are dropped
    and reported back as accepted=false.
    """
    try:
        outcome = workspace.receive_preview_message(project_id, req.origin, req.data)
    except ProjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.") from None
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    if outcome is None:
        return PreviewMessageResponse(accepted=False)
    return PreviewMessageResponse(
        accepted=True,
        preview=dataclasses.asdict(outcome.preview),
        order_id=outcome.order["id"] if outcome.order else None,
    )
