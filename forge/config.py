"""
NexusForge configuration: all environment variables in one place.

Read from environment at import time. Nothing here is required; every value
has a development default.
"""

from __future__ import annotations

import os
from pathlib import Path


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("FORGE_ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("FORGE_LOG_LEVEL", "INFO")

    # Persistence
    DATA_DIR: Path = Path(os.environ.get("FORGE_DATA_DIR", str(Path.home() / ".nexusforge")))

    # Preview bridge: messages from any other origin are dropped
    PREVIEW_ORIGIN: str = os.environ.get("FORGE_PREVIEW_ORIGIN", "null")

    # Deployment simulation. 1.0 = original step timings, 0 = instant.
    DEPLOY_TIME_SCALE: float = float(os.environ.get("FORGE_DEPLOY_TIME_SCALE", "1.0"))

    # Logs kept in the in-app system log collection
    MAX_SYSTEM_LOGS: int = 100


# Singleton instance
settings = Settings()
