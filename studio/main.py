"""
NexusForge Studio FastAPI application.

Entry point for the local studio server:

    uvicorn studio.main:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from forge import __version__
from forge.config import settings
from studio.routes import preview as preview_routes
from studio.routes import projects as project_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="NexusForge Studio",
    version=__version__,
    docs_url=None if settings.ENVIRONMENT == "production" else "/docs",
    redoc_url=None,
)

# Register routes
app.include_router(project_routes.router)
app.include_router(preview_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
