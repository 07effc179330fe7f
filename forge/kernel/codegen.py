"""
NexusForge Kernel — Bot Code Generator

Pure function: bot config → Python source for a discord.py bot.
No IO. Deterministic: same config → byte-identical output (no timestamps,
no randomness).

The program is assembled from Mustache blocks (chevron). Each feature
block is rendered only when its flag is on; a disabled feature contributes
no bytes at all. Every value copied from the config is pre-formatted by
forge.kernel.literals, so templates only ever use raw {{{...}}} tags.
"""

from __future__ import annotations

from typing import Any

import chevron

from forge.kernel.literals import python_string, sanitize_identifier, to_python_literal

ACTIVITY_TYPES: set[str] = {"playing", "watching", "listening", "competing"}

PLACEHOLDER_TOKEN = "YOUR_BOT_TOKEN_HERE"

# Names discord.py or the feature blocks register; custom triggers may not reuse them
RESERVED_COMMANDS: frozenset[str] = frozenset(
    {"help", "kick", "ban", "clear", "setup_tickets", "close", "grabimages"}
)

# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

PREAMBLE = r"""# NexusForge Generated Bot
# To run this bot:
# 1. Make sure you have Python 3.10+ installed.
# 2. Install the required libraries:
#    pip install {{{requirements}}}
# 3. Create a file named ".env" in the same directory as this script.
# 4. Inside the .env file, add the line: DISCORD_TOKEN='YOUR_BOT_TOKEN_HERE'
# 5. Run the bot from your terminal: python bot.py

import asyncio
import os
{{#need_re}}
import re
{{/need_re}}
{{#anti_spam}}
import time
from collections import defaultdict, deque
{{/anti_spam}}
from datetime import datetime, timezone
{{#transcripts}}
from io import StringIO
{{/transcripts}}
{{#scraper}}
from urllib.parse import urljoin
{{/scraper}}

import discord
{{#scraper}}
import requests
from bs4 import BeautifulSoup
{{/scraper}}
from discord.ext import commands
from dotenv import load_dotenv

# --- Configuration ---
load_dotenv()
TOKEN = os.getenv('DISCORD_TOKEN', {{{token}}})
{{#moderation}}
ADMIN_ROLE = {{{admin_role}}}
{{/moderation}}

# --- Bot Setup ---
intents = discord.Intents.default()
intents.members = True
intents.message_content = True
{{#status}}
activity = discord.Activity(type=discord.ActivityType.{{{activity_type}}}, name={{{status_text}}})
bot = commands.Bot(command_prefix='!', intents=intents, activity=activity)
{{/status}}
{{^status}}
bot = commands.Bot(command_prefix='!', intents=intents)
{{/status}}
"""

LOG_ACTION_ENABLED = r"""# --- Helper Functions ---
LOG_CHANNEL = {{{log_channel}}}


async def log_action(guild, action, user, reason=None):
    if not LOG_CHANNEL:
        return
    log_channel = discord.utils.get(guild.text_channels, name=LOG_CHANNEL)
    if log_channel:
        embed = discord.Embed(
            title=f'Action: {action}',
            color=discord.Color.orange(),
            timestamp=datetime.now(timezone.utc),
        )
        embed.add_field(name='User', value=user.mention, inline=False)
        if reason:
            embed.add_field(name='Reason', value=reason, inline=False)
        await log_channel.send(embed=embed)
"""

LOG_ACTION_DISABLED = r"""# --- Helper Functions ---
async def log_action(guild, action, user, reason=None):
    # Logging is disabled, so this function does nothing.
    pass
"""

ON_READY = r"""@bot.event
async def on_ready():
    print(f'Logged in as {bot.user.name}')
    print('Bot is ready to go!')
{{#tickets}}
    try:
        for panel_config in TICKET_PANELS:
            bot.add_view(TicketCreationView(panel_config))
        print(f'Loaded {len(TICKET_PANELS)} persistent ticket panels.')
    except Exception as e:
        print(f'Error loading ticket panels: {e}')
{{/tickets}}
"""

WELCOME = r"""# --- Welcome Messages ---
WELCOME_CHANNEL = {{{channel}}}
WELCOME_MESSAGE = {{{message}}}
{{#has_join_roles}}
JOIN_ROLES = {{{join_roles}}}
{{/has_join_roles}}


@bot.event
async def on_member_join(member):
{{#has_join_roles}}
    for role_name in JOIN_ROLES:
        role = discord.utils.get(member.guild.roles, name=role_name)
        if role:
            await member.add_roles(role, reason='Automatic join role')
{{/has_join_roles}}
    if not WELCOME_CHANNEL:
        return
    channel = discord.utils.get(member.guild.text_channels, name=WELCOME_CHANNEL)
    if channel:
        await channel.send(WELCOME_MESSAGE.replace('{user}', member.mention))
{{#leave}}


LEAVE_CHANNEL = {{{leave_channel}}}
LEAVE_MESSAGE = {{{leave_message}}}


@bot.event
async def on_member_remove(member):
    if not LEAVE_CHANNEL:
        return
    channel = discord.utils.get(member.guild.text_channels, name=LEAVE_CHANNEL)
    if channel:
        await channel.send(LEAVE_MESSAGE.replace('{user}', member.name))
{{/leave}}
"""

MODERATION = r"""# --- Moderation ---
@bot.command()
@commands.has_role(ADMIN_ROLE)
async def kick(ctx, member: discord.Member, *, reason='No reason provided'):
    await member.kick(reason=reason)
    await ctx.send(f'Kicked {member.mention}. Reason: {reason}')
    await log_action(ctx.guild, 'Kick', member, reason)


@bot.command()
@commands.has_role(ADMIN_ROLE)
async def ban(ctx, member: discord.Member, *, reason='No reason provided'):
    await member.ban(reason=reason)
    await ctx.send(f'Banned {member.mention}. Reason: {reason}')
    await log_action(ctx.guild, 'Ban', member, reason)


@bot.command()
@commands.has_permissions(manage_messages=True)
async def clear(ctx, amount: int = 5):
    await ctx.channel.purge(limit=amount + 1)
    await ctx.send(f'Cleared {amount} messages.', delete_after=5)


@kick.error
@ban.error
async def moderation_error(ctx, error):
    if isinstance(error, commands.MissingRole):
        await ctx.send(f"You don't have the required role ('{ADMIN_ROLE}') to use this command.")
"""

AUTO_MODERATION = r"""# --- Auto-Moderation ---
BANNED_WORDS = {{{banned_words}}}
{{#anti_link}}
LINK_PATTERN = re.compile(r'(https?://|discord\.gg/)', re.IGNORECASE)
{{/anti_link}}
{{#anti_spam}}
SPAM_WINDOW_SECONDS = 5
SPAM_MAX_MESSAGES = 5
recent_messages = defaultdict(deque)
{{/anti_spam}}


@bot.event
async def on_message(message):
    if message.author.bot or message.guild is None:
        return

    content = message.content.lower()
    if any(word.lower() in content for word in BANNED_WORDS):
        await message.delete()
        await message.channel.send(f'{message.author.mention}, that word is not allowed here.', delete_after=5)
        await log_action(message.guild, 'Banned word', message.author)
        return
{{#anti_link}}

    if LINK_PATTERN.search(message.content):
        await message.delete()
        await message.channel.send(f'{message.author.mention}, links are not allowed here.', delete_after=5)
        await log_action(message.guild, 'Link removed', message.author)
        return
{{/anti_link}}
{{#anti_spam}}

    now = time.monotonic()
    history = recent_messages[message.author.id]
    history.append(now)
    while history and now - history[0] > SPAM_WINDOW_SECONDS:
        history.popleft()
    if len(history) > SPAM_MAX_MESSAGES:
        await message.delete()
        await message.channel.send(f'{message.author.mention}, please slow down.', delete_after=5)
        await log_action(message.guild, 'Spam', message.author)
        return
{{/anti_spam}}

    await bot.process_commands(message)
"""

TICKETS = r"""# --- Ticket System ---
TICKET_PANELS = {{{panels}}}
TICKET_TRANSCRIPTS_ENABLED = {{{transcripts_enabled}}}
TICKET_TRANSCRIPTS_CHANNEL = {{{transcript_channel}}}


class TicketCreationView(discord.ui.View):
    def __init__(self, panel_config: dict):
        super().__init__(timeout=None)
        self.panel_config = panel_config
        self.add_item(discord.ui.Button(
            label=self.panel_config.get('buttonText') or 'Create Ticket',
            emoji=self.panel_config.get('buttonEmoji') or None,
            style=discord.ButtonStyle.primary,
            custom_id=f"create_ticket_{self.panel_config['id']}",
        ))


async def handle_ticket_creation(interaction: discord.Interaction):
    if interaction.type != discord.InteractionType.component:
        return
    custom_id = interaction.data.get('custom_id', '')
    if not custom_id.startswith('create_ticket_'):
        return

    try:
        panel_id = custom_id.removeprefix('create_ticket_')
        panel_config = next((p for p in TICKET_PANELS if p['id'] == panel_id), None)
        if not panel_config:
            await interaction.response.send_message('Error: Ticket panel configuration not found.', ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True, thinking=True)

        guild = interaction.guild
        category_name = panel_config.get('category')
        if not category_name:
            await interaction.followup.send('Error: Ticket category not configured.', ephemeral=True)
            return

        category = discord.utils.get(guild.categories, name=category_name)
        if not category:
            await interaction.followup.send(f"Error: Category '{category_name}' not found.", ephemeral=True)
            return

        ticket_channel_name = f"ticket-{interaction.user.name.lower().replace(' ', '-')}"
        existing_channel = discord.utils.get(guild.text_channels, name=ticket_channel_name, category=category)
        if existing_channel:
            await interaction.followup.send(f'You already have a ticket open: {existing_channel.mention}', ephemeral=True)
            return

        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            interaction.user: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_messages=True),
            guild.me: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_messages=True),
        }

        support_roles = []
        for role_name in panel_config.get('supportRoles', []):
            role = discord.utils.get(guild.roles, name=role_name)
            if role:
                overwrites[role] = discord.PermissionOverwrite(view_channel=True, send_messages=True, read_messages=True)
                support_roles.append(role.mention)

        ticket_channel = await guild.create_text_channel(
            name=ticket_channel_name,
            category=category,
            overwrites=overwrites,
            topic=f"Ticket for {interaction.user.name}. Panel: {panel_config.get('title', 'Support')}",
        )

        welcome_message = (panel_config.get('welcomeMessage') or 'Welcome {user}!').replace('{user}', interaction.user.mention)
        embed = discord.Embed(
            title=f"Ticket Created: {panel_config.get('title', 'Support')}",
            description=welcome_message,
            color=discord.Color.green(),
        )
        embed.set_footer(text=f'Ticket for {interaction.user.name}')

        await ticket_channel.send(content=f"{interaction.user.mention} {' '.join(support_roles)}", embed=embed)
        await interaction.followup.send(f'Your ticket has been created: {ticket_channel.mention}', ephemeral=True)

    except discord.DiscordException as e:
        print(f'Error during ticket creation: {e}')
        try:
            await interaction.followup.send('An unexpected error occurred while creating your ticket. Please contact an admin.', ephemeral=True)
        except discord.errors.InteractionResponded:
            pass


@bot.event
async def on_interaction(interaction: discord.Interaction):
    await handle_ticket_creation(interaction)


@bot.command()
@commands.has_permissions(administrator=True)
async def setup_tickets(ctx):
    '''Posts every ticket panel in its configured channel.'''
    for panel_config in TICKET_PANELS:
        channel_name = panel_config.get('channel', '').lstrip('#')
        if not channel_name:
            continue
        channel = discord.utils.get(ctx.guild.text_channels, name=channel_name)
        if channel:
            embed = discord.Embed(
                title=panel_config.get('title', 'Support'),
                description=panel_config.get('description', 'Click to create a ticket.'),
                color=discord.Color.blue(),
            )
            await channel.send(embed=embed, view=TicketCreationView(panel_config))
    await ctx.message.add_reaction('✅')
    await asyncio.sleep(5)
    await ctx.message.delete()


@bot.command()
async def close(ctx):
    '''Closes the current ticket channel.'''
    if not ctx.channel.name.startswith('ticket-'):
        await ctx.send('This command can only be used in a ticket channel.', delete_after=10)
        return
{{#transcripts}}

    if TICKET_TRANSCRIPTS_ENABLED:
        transcript_channel = discord.utils.get(ctx.guild.text_channels, name=TICKET_TRANSCRIPTS_CHANNEL)
        if transcript_channel:
            await ctx.send('Saving transcript and closing ticket...')
            lines = []
            async for msg in ctx.channel.history(limit=None, oldest_first=True):
                lines.append(f"[{msg.created_at.strftime('%Y-%m-%d %H:%M:%S')}] {msg.author.name}: {msg.content}")
            transcript = discord.File(StringIO('\n'.join(lines)), filename=f'transcript-{ctx.channel.name}.txt')
            await transcript_channel.send(f'Transcript for closed ticket from {ctx.channel.topic}:', file=transcript)
{{/transcripts}}

    await ctx.send('Closing ticket in 5 seconds...')
    await asyncio.sleep(5)
    await ctx.channel.delete(reason='Ticket closed.')
"""

IMAGE_SCRAPER = r"""# --- Image Scraper ---
SCRAPER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0 Safari/537.36',
}
SCRAPER_SELECTORS = '.product-small-picture a, .gallery-picture a, .product-essential .product-img-box .product-image a'


@bot.command()
async def grabimages(ctx, link: str):
    '''Scrapes product images from a bbdbuy.com link.'''
    if 'bbdbuy.com' not in link:
        await ctx.send('Please provide a valid bbdbuy.com product link.')
        return

    await ctx.send('🔎 Scraping images from link... please wait.')
    try:
        response = requests.get(link, headers=SCRAPER_HEADERS, timeout=10)
        response.raise_for_status()
    except requests.exceptions.RequestException:
        await ctx.send('Sorry, I could not fetch the page. It might be down or the link is incorrect.')
        return

    soup = BeautifulSoup(response.text, 'html.parser')
    image_urls = []
    for container in soup.select(SCRAPER_SELECTORS):
        img = container.find('img')
        src = container.get('href') or (img and img.get('data-src')) or (img and img.get('src'))
        if not src:
            continue
        cleaned_url = re.sub(r'_\d+x\d+\.(jpg|jpeg|png|webp)$', r'.\1', src)
        if not cleaned_url.startswith(('http:', 'https:')):
            cleaned_url = urljoin(link, cleaned_url)
        if cleaned_url not in image_urls:
            image_urls.append(cleaned_url)

    if not image_urls:
        await ctx.send('Could not find any product images on that page.')
        return

    await ctx.send(f'✅ Found {len(image_urls)} unique image(s). Posting up to 8.')
    for url in image_urls[:8]:
        embed = discord.Embed(color=discord.Color.green())
        embed.set_image(url=url)
        await ctx.send(embed=embed)
"""

CUSTOM_COMMANDS = r"""# --- Custom Commands ---
{{#commands}}
@bot.command(name={{{trigger}}})
async def {{{func_name}}}(ctx):
    await ctx.send({{{response}}})


{{/commands}}
"""

RUN = r"""# --- Run Bot ---
if TOKEN == 'YOUR_BOT_TOKEN_HERE' or not TOKEN:
    print('ERROR: Bot token is not set. Set DISCORD_TOKEN in a .env file or in the TOKEN variable.')
else:
    try:
        bot.run(TOKEN)
    except discord.errors.LoginFailure:
        print('ERROR: Failed to log in. Please ensure your bot token is correct.')
"""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_bot_code(config: dict[str, Any]) -> str:
    """
    Generate the bot program for a configuration.
    Pure function. No side effects. No IO.
    """
    features = config.get("features", {})
    welcome = features.get("welcomeMessage", {})
    moderation = features.get("moderation", {})
    auto_mod = moderation.get("autoModeration", {})
    tickets = features.get("ticketSystem", {})
    logging_cfg = features.get("logging", {})
    status = config.get("status", {})

    has_welcome = bool(welcome.get("enabled"))
    has_moderation = bool(moderation.get("enabled"))
    has_auto_mod = has_moderation and bool(auto_mod.get("enabled"))
    has_tickets = bool(tickets.get("enabled"))
    has_transcripts = has_tickets and bool(tickets.get("transcripts"))
    has_scraper = bool(features.get("imageScraper"))
    has_logging = bool(logging_cfg.get("enabled"))
    anti_link = has_auto_mod and bool(auto_mod.get("antiLink"))
    anti_spam = has_auto_mod and bool(auto_mod.get("antiSpam"))
    has_status = bool(status.get("enabled")) and bool(status.get("text"))

    activity_type = status.get("activityType", "playing")
    if activity_type not in ACTIVITY_TYPES:
        activity_type = "playing"

    blocks: list[str] = []

    blocks.append(_render(PREAMBLE, {
        "requirements": " ".join(_requirements(has_scraper)),
        "need_re": anti_link or has_scraper,
        "anti_spam": anti_spam,
        "transcripts": has_transcripts,
        "scraper": has_scraper,
        "token": python_string(config.get("token") or PLACEHOLDER_TOKEN),
        "moderation": has_moderation,
        "admin_role": python_string(moderation.get("adminRole") or "Moderator"),
        "status": has_status,
        "activity_type": activity_type,
        "status_text": python_string(status.get("text", "")),
    }))

    if has_logging:
        blocks.append(_render(LOG_ACTION_ENABLED, {
            "log_channel": python_string(_channel_name(logging_cfg.get("channel", ""))),
        }))
    else:
        blocks.append(LOG_ACTION_DISABLED)

    blocks.append(_render(ON_READY, {"tickets": has_tickets}))

    if has_welcome:
        leave = welcome.get("leaveMessage", {})
        join_roles = list(welcome.get("joinRoles", []))
        blocks.append(_render(WELCOME, {
            "channel": python_string(_channel_name(welcome.get("channel", ""))),
            "message": python_string(welcome.get("message", "")),
            "has_join_roles": bool(join_roles),
            "join_roles": to_python_literal(join_roles),
            "leave": bool(leave.get("enabled")),
            "leave_channel": python_string(_channel_name(leave.get("channel", ""))),
            "leave_message": python_string(leave.get("message", "")),
        }))

    if has_moderation:
        blocks.append(MODERATION)

    if has_auto_mod:
        blocks.append(_render(AUTO_MODERATION, {
            "banned_words": to_python_literal(list(auto_mod.get("bannedWords", []))),
            "anti_link": anti_link,
            "anti_spam": anti_spam,
        }))

    if has_tickets:
        blocks.append(_render(TICKETS, {
            "panels": to_python_literal(list(tickets.get("panels", []))),
            "transcripts_enabled": to_python_literal(has_transcripts),
            "transcript_channel": python_string(_channel_name(tickets.get("transcriptChannel", ""))),
            "transcripts": has_transcripts,
        }))

    if has_scraper:
        blocks.append(IMAGE_SCRAPER)

    commands = _command_context(config.get("customCommands", []))
    if commands:
        blocks.append(_render(CUSTOM_COMMANDS, {"commands": commands}).rstrip("\n") + "\n")

    blocks.append(RUN)

    return "\n\n\n".join(block.strip("\n") for block in blocks) + "\n"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _render(template: str, context: dict[str, Any]) -> str:
    return chevron.render(template, context)


def _requirements(has_scraper: bool) -> list[str]:
    reqs = ["discord.py", "python-dotenv"]
    if has_scraper:
        reqs += ["beautifulsoup4", "requests"]
    return reqs


def _channel_name(channel: str) -> str:
    """Config stores channels as shown in the UI ("#general"); the API wants "general"."""
    return channel.strip().lstrip("#")


def _command_context(custom_commands: list[dict[str, Any]]) -> list[dict[str, str]]:
    """
    One template context per custom command. A trigger that is empty,
    repeats an earlier one, or names a command the bot already registers
    is skipped; the first occurrence wins. Function names get numeric
    suffixes until they are unique.
    """
    registered = set(RESERVED_COMMANDS)
    func_names: set[str] = set()
    out: list[dict[str, str]] = []
    for cmd in custom_commands:
        trigger = (cmd.get("trigger") or "").strip()
        if not trigger or trigger in registered:
            continue
        registered.add(trigger)
        base = sanitize_identifier(f"cmd_{trigger}")
        func_name, n = base, 1
        while func_name in func_names:
            n += 1
            func_name = f"{base}_{n}"
        func_names.add(func_name)
        out.append({
            "trigger": python_string(trigger),
            "func_name": func_name,
            "response": python_string(cmd.get("response", "")),
        })
    return out
