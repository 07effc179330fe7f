"""
NexusForge Kernel — Workspace

Application state for one user session: the project list, per-project
preview state, and the admin collections (system logs, feature and
maintenance flags, announcement, custom images).

Every mutation goes through an intent-named method. Each one validates
its input first, then replaces the affected config tree with a new one
(the path engine never mutates), then writes the collection through
Persistence before returning.

This is where IO happens. The path engine, code generator and renderer
are pure.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Collection, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from forge.config import settings
from forge.kernel.codegen import RESERVED_COMMANDS, generate_bot_code
from forge.kernel.defaults import THEME_PRESETS, default_bot_config, website_config
from forge.kernel.paths import apply_update, get_at_path
from forge.kernel.preview import PreviewHost, PreviewOutcome
from forge.kernel.records import (
    CUSTOM_COMMANDS_PATH,
    EMBEDS_PATH,
    TICKET_PANELS_PATH,
    IdAllocator,
    append_record,
    find_record,
    remove_record,
    upsert_record,
)
from forge.kernel.renderer import render_site
from forge.kernel.storage import (
    ANNOUNCEMENT_KEY,
    CUSTOM_IMAGES_KEY,
    FEATURE_FLAGS_KEY,
    LOGS_KEY,
    MAINTENANCE_FLAGS_KEY,
    PROJECTS_KEY,
    JsonFileStore,
    Persistence,
)
from forge.kernel.types import (
    HOSTING_STATUSES,
    LOG_LEVELS,
    PRODUCT_PAGE_LAYOUTS,
    PROJECT_TYPES,
    SITE_TEMPLATES,
    PagePreview,
    PathKey,
    PreviewState,
    Project,
    SystemLog,
    now_utc,
)

logger = logging.getLogger(__name__)

BOT_INVITE_URL = "https://discord.com/api/oauth2/authorize?client_id={client_id}&permissions=8&scope=bot"

DEFAULT_FEATURE_FLAGS: dict[str, bool] = {"supportSystem": True}
DEFAULT_MAINTENANCE_FLAGS: dict[str, bool] = {
    "Website Builder": False,
    "Bot Builder": False,
    "Embed Builder": False,
}

_LOG_LEVEL_MAP = {"info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}

# Website fields limited to a fixed set of values
_CHOICE_FIELDS: dict[tuple[str, ...], Collection[str]] = {
    ("template",): SITE_TEMPLATES,
    ("productPageLayout",): PRODUCT_PAGE_LAYOUTS,
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ProjectNotFound(Exception):
    """No project with this id in the workspace."""

    pass


class ValidationError(Exception):
    """User input rejected before any state changed."""

    pass


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class Workspace:
    """
    Owns every project and its configuration tree.

    Readers get the current tree; a tree handed out is never changed
    afterwards, so holding on to it is safe.
    """

    def __init__(
        self,
        persistence: Persistence,
        *,
        ids: IdAllocator | None = None,
        clock: Callable[[], datetime] = now_utc,
        preview_host: PreviewHost | None = None,
    ) -> None:
        self.persistence = persistence
        self.ids = ids or IdAllocator()
        self.clock = clock
        self.preview_host = preview_host or PreviewHost(ids=self.ids, clock=clock)

        self.projects: list[Project] = [Project.from_dict(d) for d in self._load_list(PROJECTS_KEY)]
        self.logs: list[SystemLog] = [SystemLog.from_dict(d) for d in self._load_list(LOGS_KEY)]
        self.feature_flags: dict[str, bool] = persistence.load(FEATURE_FLAGS_KEY, dict(DEFAULT_FEATURE_FLAGS))
        self.maintenance_flags: dict[str, bool] = persistence.load(
            MAINTENANCE_FLAGS_KEY, dict(DEFAULT_MAINTENANCE_FLAGS)
        )
        self.announcement: dict[str, Any] = persistence.load(ANNOUNCEMENT_KEY, {"message": "", "active": False})
        self.custom_images: list[str] = self._load_list(CUSTOM_IMAGES_KEY)

        self._previews: dict[str, PreviewState] = {}

    @classmethod
    def open(cls, directory: Path | str | None = None) -> Workspace:
        """Workspace backed by JSON files under directory (default: settings.DATA_DIR)."""
        store = JsonFileStore(directory if directory is not None else settings.DATA_DIR)
        return cls(Persistence(store))

    # -- Projects ----------------------------------------------------------

    def get_project(self, project_id: str) -> Project:
        for project in self.projects:
            if project.id == project_id:
                return project
        raise ProjectNotFound(project_id)

    def add_project(
        self,
        name: str,
        project_type: str,
        *,
        template_id: str = "quantum",
        owner: dict[str, Any] | None = None,
    ) -> Project:
        """Create a project with a fully-defined default configuration."""
        name = _require_name(name)
        if project_type not in PROJECT_TYPES:
            raise ValidationError(f"Unknown project type: {project_type!r}")

        if project_type == "bot":
            config = default_bot_config()
        else:
            try:
                config = website_config(template_id)
            except KeyError as e:
                raise ValidationError(str(e.args[0])) from None

        project = Project(
            id=self.ids.next("proj"),
            name=name,
            type=project_type,
            config=config,
            created_at=self.clock(),
            owner_id=owner.get("id") if owner else None,
            owner_username=owner.get("username") if owner else None,
        )
        self.projects.append(project)
        self._save_projects()
        creator = f" by {project.owner_username}" if project.owner_username else ""
        self.add_log("info", f"Project '{name}' created{creator}.")
        return project

    def rename_project(self, project_id: str, name: str) -> Project:
        name = _require_name(name)
        project = self.get_project(project_id)
        project.name = name
        self._save_projects()
        self.add_log("info", f"Project {project_id} was renamed to '{name}'.")
        return project

    def duplicate_project(self, project_id: str) -> Project:
        """Deep copy with a new id and creation time. Hosting state starts over."""
        original = self.get_project(project_id)
        project = Project(
            id=self.ids.next("proj"),
            name=f"{original.name} (Copy)",
            type=original.type,
            config=copy.deepcopy(original.config),
            created_at=self.clock(),
            owner_id=original.owner_id,
            owner_username=original.owner_username,
        )
        self.projects.append(project)
        self._save_projects()
        self.add_log("info", f"Project '{original.name}' was duplicated.")
        return project

    def delete_project(self, project_id: str) -> None:
        project = self.get_project(project_id)
        self.projects = [p for p in self.projects if p.id != project_id]
        self._previews.pop(project_id, None)
        self._save_projects()
        self.add_log("warn", f"Project '{project.name}' (ID: {project_id}) was deleted.")

    def update_config(self, project_id: str, path: Sequence[PathKey], value: Any) -> dict[str, Any]:
        """
        Replace one field of a project's configuration.
        Raises InvalidPathError when path does not resolve, ValidationError
        when a website choice field (template, productPageLayout) gets an
        unknown value.
        """
        project = self.get_project(project_id)
        choices = _CHOICE_FIELDS.get(tuple(path)) if project.type == "website" else None
        if choices is not None and (not isinstance(value, str) or value not in choices):
            raise ValidationError(f"Unknown value for {'.'.join(map(str, path))}: {value!r}")
        return self._replace_config(project, apply_update(project.config, path, value))

    def update_hosting(
        self,
        project_id: str,
        status: str,
        live_url: str | None = None,
        bot_invite_url: str | None = None,
    ) -> Project:
        """Set hosting status. A bot going online gets an invite URL built from its client id."""
        if status not in HOSTING_STATUSES:
            raise ValidationError(f"Unknown hosting status: {status!r}")
        project = self.get_project(project_id)

        if project.type == "bot" and status == "online":
            client_id = project.config.get("clientId")
            if client_id:
                bot_invite_url = BOT_INVITE_URL.format(client_id=client_id)

        project.hosting_status = status
        project.live_url = live_url
        project.bot_invite_url = bot_invite_url
        self._save_projects()
        self.add_log("info", f"Project '{project.name}' status changed to {status}.")
        return project

    def sync_bot_data(self, project_id: str, channels: list[str], roles: list[str]) -> dict[str, Any]:
        """Store the channel and role names fetched from the bot's guild."""
        project = self._bot_project(project_id)
        config = copy.deepcopy(project.config)
        config["syncedChannels"] = list(channels)
        config["syncedRoles"] = list(roles)
        return self._replace_config(project, config)

    # -- Bot records -------------------------------------------------------

    def add_custom_command(self, project_id: str, trigger: str, response: str) -> dict[str, Any]:
        trigger = trigger.strip()
        if not trigger:
            raise ValidationError("Command trigger must not be empty")
        if trigger in RESERVED_COMMANDS:
            raise ValidationError(f"Command name {trigger!r} is already used by the bot")
        project = self._bot_project(project_id)
        if any((c.get("trigger") or "").strip() == trigger for c in project.config.get("customCommands", [])):
            raise ValidationError(f"A command named {trigger!r} already exists")
        command = {"id": self.ids.next("cmd"), "trigger": trigger, "response": response}
        self._replace_config(project, append_record(project.config, CUSTOM_COMMANDS_PATH, command))
        return command

    def remove_custom_command(self, project_id: str, command_id: str) -> None:
        project = self._bot_project(project_id)
        self._replace_config(project, remove_record(project.config, CUSTOM_COMMANDS_PATH, command_id))

    def save_ticket_panel(self, project_id: str, panel: dict[str, Any]) -> dict[str, Any]:
        """
        Replace the panel with the same id, or create a new one. An id that
        does not name a current panel is ignored and a fresh one allocated.
        """
        project = self._bot_project(project_id)
        record = {**_default_ticket_panel(), **panel}
        if not str(record.get("title", "")).strip():
            raise ValidationError("Ticket panel title must not be empty")
        panels = get_at_path(project.config, TICKET_PANELS_PATH)
        if not record.get("id") or find_record(panels, record["id"]) is None:
            record["id"] = self.ids.next("panel")
        self._replace_config(project, upsert_record(project.config, TICKET_PANELS_PATH, record))
        return record

    def remove_ticket_panel(self, project_id: str, panel_id: str) -> None:
        project = self._bot_project(project_id)
        self._replace_config(project, remove_record(project.config, TICKET_PANELS_PATH, panel_id))

    def add_embed(self, project_id: str, embed: dict[str, Any] | None = None) -> dict[str, Any]:
        project = self._bot_project(project_id)
        record = {**_default_embed(), **(embed or {}), "id": self.ids.next("embed")}
        self._replace_config(project, append_record(project.config, EMBEDS_PATH, record))
        return record

    def remove_embed(self, project_id: str, embed_id: str) -> None:
        project = self._bot_project(project_id)
        self._replace_config(project, remove_record(project.config, EMBEDS_PATH, embed_id))

    def bot_code(self, project_id: str) -> str:
        return generate_bot_code(self._bot_project(project_id).config)

    # -- Website -----------------------------------------------------------

    def select_template(self, project_id: str, template: str) -> dict[str, Any]:
        """Switch the visual preset and merge its colours and font into the theme."""
        if template not in SITE_TEMPLATES:
            raise ValidationError(f"Unknown site template: {template!r}")
        project = self._website_project(project_id)
        config = apply_update(project.config, ["template"], template)
        config = apply_update(config, ["theme"], {**config["theme"], **THEME_PRESETS[template]})
        return self._replace_config(project, config)

    def preview_state(self, project_id: str) -> PreviewState:
        project = self._website_project(project_id)
        if project_id not in self._previews:
            pages = project.config.get("pages", [])
            self._previews[project_id] = PagePreview(pages[0]["id"] if pages else "home")
        return self._previews[project_id]

    def set_preview_state(self, project_id: str, preview: PreviewState) -> None:
        self._website_project(project_id)
        self._previews[project_id] = preview

    def preview_document(self, project_id: str) -> str:
        project = self._website_project(project_id)
        return render_site(project.config, self.preview_state(project_id), site_name=project.name)

    def receive_preview_message(self, project_id: str, origin: str, data: Any) -> PreviewOutcome | None:
        """
        Feed one message from the rendered document back into the workspace.
        Returns None when the message was dropped.
        """
        project = self._website_project(project_id)
        outcome = self.preview_host.receive(origin, data, project.config)
        if outcome is None:
            return None
        self._previews[project_id] = outcome.preview
        if outcome.config is not project.config:
            self._replace_config(project, outcome.config)
        if outcome.order is not None:
            self.add_log("info", f"Order {outcome.order['id']} placed on '{project.name}'.")
        return outcome

    # -- Admin collections -------------------------------------------------

    def add_log(self, level: str, message: str) -> SystemLog:
        """Record a system log entry. Newest first; only the latest 100 are kept."""
        if level not in LOG_LEVELS:
            raise ValidationError(f"Unknown log level: {level!r}")
        entry = SystemLog(id=self.ids.next("log"), timestamp=self.clock(), level=level, message=message)
        self.logs = [entry, *self.logs][: settings.MAX_SYSTEM_LOGS]
        self.persistence.save(LOGS_KEY, [log.to_dict() for log in self.logs])
        logger.log(_LOG_LEVEL_MAP[level], message)
        return entry

    def toggle_feature_flag(self, name: str) -> bool:
        self.feature_flags = {**self.feature_flags, name: not self.feature_flags.get(name, False)}
        self.persistence.save(FEATURE_FLAGS_KEY, self.feature_flags)
        return self.feature_flags[name]

    def toggle_maintenance_flag(self, name: str) -> bool:
        self.maintenance_flags = {**self.maintenance_flags, name: not self.maintenance_flags.get(name, False)}
        self.persistence.save(MAINTENANCE_FLAGS_KEY, self.maintenance_flags)
        return self.maintenance_flags[name]

    def set_announcement(self, message: str, active: bool) -> None:
        self.announcement = {"message": message, "active": active}
        self.persistence.save(ANNOUNCEMENT_KEY, self.announcement)

    def add_custom_image(self, image_url: str) -> None:
        if not image_url:
            raise ValidationError("Image must not be empty")
        self.custom_images = [image_url, *self.custom_images]
        self.persistence.save(CUSTOM_IMAGES_KEY, self.custom_images)

    # -- Internals ---------------------------------------------------------

    def _replace_config(self, project: Project, config: dict[str, Any]) -> dict[str, Any]:
        project.config = config
        self._save_projects()
        return config

    def _save_projects(self) -> None:
        self.persistence.save(PROJECTS_KEY, [p.to_dict() for p in self.projects])

    def _bot_project(self, project_id: str) -> Project:
        project = self.get_project(project_id)
        if project.type != "bot":
            raise ValidationError(f"Project {project_id} is not a bot project")
        return project

    def _website_project(self, project_id: str) -> Project:
        project = self.get_project(project_id)
        if project.type != "website":
            raise ValidationError(f"Project {project_id} is not a website project")
        return project

    def _load_list(self, key: str) -> list[Any]:
        value = self.persistence.load(key, [])
        if not isinstance(value, list):
            logger.warning("Storage key %r does not hold a list, ignoring it", key)
            return []
        return value


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Project name must not be empty")
    return name


def _default_ticket_panel() -> dict[str, Any]:
    return {
        "id": "",
        "channel": "#support",
        "title": "Support Ticket",
        "description": "Click the button below to open a ticket.",
        "buttonText": "Create Ticket",
        "buttonEmoji": "🎫",
        "category": "Tickets",
        "supportRoles": [],
        "welcomeMessage": "Welcome {user}! Support will be with you shortly.",
    }


def _default_embed() -> dict[str, Any]:
    return {
        "name": "New Embed",
        "title": "",
        "description": "",
        "color": "#5865F2",
        "footer": "",
        "fields": [],
    }
