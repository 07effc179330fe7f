"""
NexusForge Workspace -- Projects and Bot Records

Intent-named mutations over the project collection.

This verifies:
  - New projects start from a fully-defined default config
  - Every mutation replaces the config tree and persists it
  - Invalid input is rejected before any state changes
  - Custom commands, ticket panels and embeds get fresh ids
  - A reloaded workspace sees the same projects
"""

import copy

import pytest

from forge.kernel.codegen import generate_bot_code
from forge.kernel.defaults import THEME_PRESETS, default_bot_config, website_config
from forge.kernel.paths import InvalidPathError
from forge.kernel.storage import PROJECTS_KEY, KeyValueStore, Persistence
from forge.kernel.workspace import ProjectNotFound, ValidationError, Workspace


class ReadOnlyStore(KeyValueStore):
    def get(self, key):
        return None

    def set(self, key, value):
        raise OSError("Read-only file system")

    def delete(self, key):
        raise OSError("Read-only file system")


# ============================================================================
# Creating projects
# ============================================================================


class TestAddProject:
    def test_bot(self, workspace, fixed_clock):
        project = workspace.add_project("My Bot", "bot")
        assert project.type == "bot"
        assert project.config == default_bot_config()
        assert project.hosting_status == "undeployed"
        assert project.created_at == fixed_clock()
        assert project.id.startswith("proj_")
        assert workspace.get_project(project.id) is project

    def test_website_from_template(self, workspace):
        project = workspace.add_project("Grill", "website", template_id="ember")
        assert project.config == website_config("ember")

    def test_logs_creation(self, workspace):
        workspace.add_project("My Bot", "bot", owner={"id": "u1", "username": "ada"})
        assert workspace.logs[0].message == "Project 'My Bot' created by ada."
        assert workspace.logs[0].level == "info"

    def test_owner_recorded(self, workspace):
        project = workspace.add_project("Shop", "website", owner={"id": "u1", "username": "ada"})
        assert project.owner_id == "u1"
        assert project.owner_username == "ada"

    @pytest.mark.parametrize(
        "name,project_type,template_id",
        [("", "bot", "quantum"), ("   ", "website", "quantum"), ("X", "app", "quantum"), ("X", "website", "nope")],
    )
    def test_rejected(self, workspace, name, project_type, template_id):
        with pytest.raises(ValidationError):
            workspace.add_project(name, project_type, template_id=template_id)
        assert workspace.projects == []

    def test_unknown_project(self, workspace):
        with pytest.raises(ProjectNotFound):
            workspace.get_project("proj_missing")


# ============================================================================
# Project lifecycle
# ============================================================================


class TestLifecycle:
    def test_rename(self, workspace):
        project = workspace.add_project("Old", "bot")
        workspace.rename_project(project.id, "  New  ")
        assert workspace.get_project(project.id).name == "New"

    def test_duplicate(self, workspace):
        original = workspace.add_project("Shop", "website")
        workspace.update_hosting(original.id, "online", live_url="https://shop-abc123.vercel.app")
        copy_ = workspace.duplicate_project(original.id)

        assert copy_.id != original.id
        assert copy_.name == "Shop (Copy)"
        assert copy_.config == original.config
        assert copy_.config is not original.config
        assert copy_.hosting_status == "undeployed"
        assert copy_.live_url is None
        assert len(workspace.projects) == 2

    def test_duplicate_is_independent(self, workspace):
        original = workspace.add_project("Shop", "website")
        copy_ = workspace.duplicate_project(original.id)
        workspace.update_config(copy_.id, ["seo", "metaTitle"], "Copy Store")
        assert original.config["seo"]["metaTitle"] == "Quantum Tech Store"

    def test_delete(self, workspace):
        project = workspace.add_project("Doomed", "bot")
        workspace.delete_project(project.id)
        with pytest.raises(ProjectNotFound):
            workspace.get_project(project.id)
        assert workspace.logs[0].level == "warn"
        assert "Doomed" in workspace.logs[0].message

    def test_update_hosting_rejects_unknown_status(self, workspace):
        project = workspace.add_project("Bot", "bot")
        with pytest.raises(ValidationError):
            workspace.update_hosting(project.id, "exploded")
        assert project.hosting_status == "undeployed"

    def test_bot_online_gets_invite_url(self, workspace):
        project = workspace.add_project("Bot", "bot")
        workspace.update_config(project.id, ["clientId"], "123456")
        workspace.update_hosting(project.id, "online")
        assert project.bot_invite_url == (
            "https://discord.com/api/oauth2/authorize?client_id=123456&permissions=8&scope=bot"
        )

    def test_sync_bot_data(self, workspace):
        project = workspace.add_project("Bot", "bot")
        config = workspace.sync_bot_data(project.id, ["general", "rules"], ["Moderator"])
        assert config["syncedChannels"] == ["general", "rules"]
        assert config["syncedRoles"] == ["Moderator"]


# ============================================================================
# Config updates
# ============================================================================


class TestUpdateConfig:
    def test_replaces_tree(self, workspace):
        project = workspace.add_project("Bot", "bot")
        old = project.config
        new = workspace.update_config(project.id, ["features", "welcomeMessage", "channel"], "#lobby")
        assert project.config is new
        assert new["features"]["welcomeMessage"]["channel"] == "#lobby"
        assert old["features"]["welcomeMessage"]["channel"] == "#general"

    def test_invalid_path_raises_and_changes_nothing(self, workspace):
        project = workspace.add_project("Bot", "bot")
        before = project.config
        with pytest.raises(InvalidPathError):
            workspace.update_config(project.id, ["features", "nope", "enabled"], True)
        assert project.config is before

    def test_persisted(self, workspace, persistence):
        project = workspace.add_project("Bot", "bot")
        workspace.update_config(project.id, ["token"], "secret")
        saved = persistence.load(PROJECTS_KEY, [])
        assert saved[0]["config"]["token"] == "secret"


# ============================================================================
# Bot records
# ============================================================================


class TestBotRecords:
    @pytest.fixture
    def bot(self, workspace):
        return workspace.add_project("Bot", "bot")

    def test_custom_command(self, workspace, bot):
        command = workspace.add_custom_command(bot.id, "  ping ", "pong")
        assert command["trigger"] == "ping"
        assert command["id"].startswith("cmd_")
        assert bot.config["customCommands"] == [command]
        assert "async def cmd_ping(ctx):" in workspace.bot_code(bot.id)

    def test_empty_trigger_rejected(self, workspace, bot):
        with pytest.raises(ValidationError):
            workspace.add_custom_command(bot.id, "   ", "pong")
        assert bot.config["customCommands"] == []

    def test_remove_custom_command(self, workspace, bot):
        first = workspace.add_custom_command(bot.id, "a", "1")
        second = workspace.add_custom_command(bot.id, "b", "2")
        workspace.remove_custom_command(bot.id, first["id"])
        assert bot.config["customCommands"] == [second]

    def test_ids_never_reused(self, workspace, bot):
        first = workspace.add_custom_command(bot.id, "a", "1")
        workspace.remove_custom_command(bot.id, first["id"])
        again = workspace.add_custom_command(bot.id, "a", "1")
        assert again["id"] != first["id"]

    def test_removed_panel_id_not_revived(self, workspace, bot):
        first = workspace.save_ticket_panel(bot.id, {"title": "A"})
        workspace.remove_ticket_panel(bot.id, first["id"])
        again = workspace.save_ticket_panel(bot.id, {"id": first["id"], "title": "B"})
        assert again["id"] != first["id"]
        assert [p["id"] for p in bot.config["features"]["ticketSystem"]["panels"]] == [again["id"]]

    def test_unknown_panel_id_gets_fresh_one(self, workspace, bot):
        panel = workspace.save_ticket_panel(bot.id, {"id": "panel_made_up", "title": "A"})
        assert panel["id"] != "panel_made_up"
        assert panel["id"].startswith("panel_")

    def test_duplicate_trigger_rejected(self, workspace, bot):
        workspace.add_custom_command(bot.id, "hello", "hi")
        with pytest.raises(ValidationError):
            workspace.add_custom_command(bot.id, " hello ", "again")
        assert len(bot.config["customCommands"]) == 1

    @pytest.mark.parametrize("trigger", ["help", "kick", "ban", "clear", "close", "setup_tickets", "grabimages"])
    def test_reserved_trigger_rejected(self, workspace, bot, trigger):
        with pytest.raises(ValidationError):
            workspace.add_custom_command(bot.id, trigger, "nope")
        assert bot.config["customCommands"] == []

    def test_new_ticket_panel(self, workspace, bot):
        panel = workspace.save_ticket_panel(bot.id, {"title": "Billing"})
        assert panel["id"].startswith("panel_")
        assert panel["title"] == "Billing"
        assert panel["buttonText"] == "Create Ticket"
        assert bot.config["features"]["ticketSystem"]["panels"] == [panel]

    def test_update_ticket_panel(self, workspace, bot):
        panel = workspace.save_ticket_panel(bot.id, {"title": "Billing"})
        workspace.save_ticket_panel(bot.id, {**panel, "title": "Payments"})
        panels = bot.config["features"]["ticketSystem"]["panels"]
        assert len(panels) == 1
        assert panels[0]["title"] == "Payments"

    def test_panel_needs_title(self, workspace, bot):
        with pytest.raises(ValidationError):
            workspace.save_ticket_panel(bot.id, {"title": " "})
        assert bot.config["features"]["ticketSystem"]["panels"] == []

    def test_remove_ticket_panel(self, workspace, bot):
        panel = workspace.save_ticket_panel(bot.id, {"title": "Billing"})
        workspace.remove_ticket_panel(bot.id, panel["id"])
        assert bot.config["features"]["ticketSystem"]["panels"] == []

    def test_embeds(self, workspace, bot):
        embed = workspace.add_embed(bot.id, {"title": "Rules"})
        assert embed["id"].startswith("embed_")
        assert embed["color"] == "#5865F2"
        assert bot.config["embeds"] == [embed]
        workspace.remove_embed(bot.id, embed["id"])
        assert bot.config["embeds"] == []

    def test_bot_code_matches_generator(self, workspace, bot):
        assert workspace.bot_code(bot.id) == generate_bot_code(bot.config)

    def test_website_project_rejected(self, workspace):
        site = workspace.add_project("Shop", "website")
        with pytest.raises(ValidationError):
            workspace.add_custom_command(site.id, "ping", "pong")
        with pytest.raises(ValidationError):
            workspace.bot_code(site.id)


class TestSelectTemplate:
    def test_merges_preset(self, workspace):
        site = workspace.add_project("Shop", "website")
        config = workspace.select_template(site.id, "bold")
        assert config["template"] == "bold"
        assert config["theme"] == {**website_config()["theme"], **THEME_PRESETS["bold"]}

    def test_unknown_template(self, workspace):
        site = workspace.add_project("Shop", "website")
        with pytest.raises(ValidationError):
            workspace.select_template(site.id, "neon")

    def test_bot_project_rejected(self, workspace):
        bot = workspace.add_project("Bot", "bot")
        with pytest.raises(ValidationError):
            workspace.select_template(bot.id, "bold")

    def test_product_layout_choices(self, workspace):
        site = workspace.add_project("Shop", "website")
        assert workspace.update_config(site.id, ["productPageLayout"], "image-top")["productPageLayout"] == "image-top"
        before = site.config
        for bad in ("sideways", ["image-left"]):
            with pytest.raises(ValidationError):
                workspace.update_config(site.id, ["productPageLayout"], bad)
        assert site.config is before

    def test_template_field_choices(self, workspace):
        site = workspace.add_project("Shop", "website")
        with pytest.raises(ValidationError):
            workspace.update_config(site.id, ["template"], "neon")
        assert site.config["template"] == "modern"


# ============================================================================
# Persistence
# ============================================================================


class TestReload:
    def test_reload_sees_same_projects(self, workspace, persistence, fixed_clock):
        bot = workspace.add_project("Bot", "bot")
        workspace.add_custom_command(bot.id, "ping", "pong")
        site = workspace.add_project("Shop", "website", template_id="serene")

        reloaded = Workspace(persistence)
        assert [p.id for p in reloaded.projects] == [bot.id, site.id]
        assert reloaded.get_project(bot.id).config == bot.config
        assert reloaded.get_project(site.id).created_at == fixed_clock()
        assert [log.message for log in reloaded.logs] == [log.message for log in workspace.logs]

    def test_write_failure_does_not_raise(self, fixed_clock):
        workspace = Workspace(Persistence(ReadOnlyStore()), clock=fixed_clock)
        project = workspace.add_project("Bot", "bot")
        workspace.update_config(project.id, ["token"], "t")
        assert project.config["token"] == "t"

    def test_config_trees_survive_deepcopy(self, workspace):
        project = workspace.add_project("Bot", "bot")
        assert copy.deepcopy(project.config) == project.config
