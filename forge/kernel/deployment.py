"""
NexusForge Kernel — Deployment Simulator

Walks a project through hosting states with timed steps:

    undeployed/offline → deploying → online

Websites get a generated live URL; bots get an invite URL from their
client id. Nothing is actually deployed. A started deployment runs to the
end and always succeeds. stop() takes a project offline.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
import string
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from forge.config import settings
from forge.kernel.workspace import ValidationError, Workspace

logger = logging.getLogger(__name__)

# (log line, duration in ms)
WEBSITE_STEPS: tuple[tuple[str, int], ...] = (
    ('> Cloning project: "{name}"...', 300),
    ("> Installing dependencies...", 1000),
    ("> Analyzing project structure...", 500),
    ("> Building static assets...", 1500),
    ("> Optimizing images...", 800),
    ("> Finalizing build...", 400),
    ("> Deploying to NexusForge global network...", 1200),
    ("> Assigning domain...", 500),
)

BOT_STEPS: tuple[tuple[str, int], ...] = (
    ('> Starting bot: "{name}"...', 1500),
)

_SLUG_RE = re.compile(r"[^a-z0-9]")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class DeploymentResult:
    project_id: str
    status: str
    live_url: str | None = None
    bot_invite_url: str | None = None
    logs: list[str] = field(default_factory=list)


class Deployer:
    """Runs simulated deployments against a workspace."""

    def __init__(
        self,
        workspace: Workspace,
        *,
        time_scale: float | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.workspace = workspace
        self.time_scale = settings.DEPLOY_TIME_SCALE if time_scale is None else time_scale
        self.rng = rng or random.Random()
        self.sleep = sleep

    async def deploy(self, project_id: str) -> DeploymentResult:
        project = self.workspace.get_project(project_id)
        if project.type == "bot" and not (project.config.get("token") and project.config.get("clientId")):
            raise ValidationError("A bot token and client id are required before deploying")

        self.workspace.update_hosting(project_id, "deploying")
        steps = BOT_STEPS if project.type == "bot" else WEBSITE_STEPS

        lines: list[str] = []
        for text, duration_ms in steps:
            await self.sleep(duration_ms / 1000 * self.time_scale)
            line = text.format(name=project.name)
            lines.append(line)
            logger.info("[%s] %s", project_id, line)

        live_url = None if project.type == "bot" else self.live_url(project.name)
        project = self.workspace.update_hosting(project_id, "online", live_url=live_url)
        target = live_url or project.bot_invite_url
        lines.append(f"> Success! Deployed to {target}" if target else "> Success! Bot is online.")

        return DeploymentResult(
            project_id=project_id,
            status=project.hosting_status,
            live_url=project.live_url,
            bot_invite_url=project.bot_invite_url,
            logs=lines,
        )

    def stop(self, project_id: str) -> None:
        self.workspace.update_hosting(project_id, "offline")

    def live_url(self, name: str) -> str:
        """https://<slug>-<6 random chars>.vercel.app"""
        slug = _SLUG_RE.sub("-", name.lower())
        suffix = "".join(self.rng.choices(_SUFFIX_ALPHABET, k=6))
        return f"https://{slug}-{suffix}.vercel.app"
