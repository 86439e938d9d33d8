"""
Guildcord
=========

A single-guild Discord bot: slash commands and buttons routed through one
gated dispatcher (cooldown, blacklist, error notice), chat XP with level
roles, a URL filter and persistent temporary bans.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. GUILDCORD_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("GUILDCORD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
from types import ModuleType
from typing import Iterable, Tuple

import discord
from dotenv import load_dotenv

from guildcord.bot.command_sync import sync_application_commands
from guildcord.bot.services import BotServices
from guildcord.commands import BUTTON_PLUGINS, COMMAND_PLUGINS
from guildcord.configuration.app_configuration import AppConfig, app_config
from guildcord.core.cooldown_tracker import CooldownTracker
from guildcord.core.errors import MembershipStoreUnavailable
from guildcord.core.event_router import EventRouter, RouterState
from guildcord.core.level_bridge import LevelEventBridge
from guildcord.core.membership_store import MembershipStore
from guildcord.core.registry import ButtonRegistry, CommandRegistry, load_plugins
from guildcord.database.database import Database
from guildcord.database.db_connection import db_connection
from guildcord.leveling.leveling_system import LevelingSystem
from guildcord.moderation.url_filter import UrlFilter
from guildcord.scheduler.unban_scheduler import UnbanScheduler
from guildcord.util.logger import get_logger, handle_exception

logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild, member and message events, including message content for the URL filter and XP."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def build_registries(
    command_plugins: Iterable[ModuleType] = COMMAND_PLUGINS,
    button_plugins: Iterable[ModuleType] = BUTTON_PLUGINS,
) -> Tuple[CommandRegistry, ButtonRegistry]:
    """Load every plugin into fresh registries and freeze them.

    A broken plugin is logged and skipped; startup continues with the rest.
    """
    commands = CommandRegistry()
    buttons = ButtonRegistry()

    command_report = load_plugins(commands, command_plugins)
    button_report = load_plugins(buttons, button_plugins)
    for report in (command_report, button_report):
        if not report.ok:
            logger.warning("[FILE-LOAD] %d plugin entries failed to load", len(report.failures))

    commands.freeze()
    buttons.freeze()
    logger.info("[FILE-LOAD] Registered %d commands and %d buttons", len(commands), len(buttons))
    return commands, buttons


def create_bot() -> discord.Bot:
    """Instantiate the Discord bot.

    py-cord's own command sync is disabled; the guild's commands are
    replaced from our registry in :func:`start_bot`.
    """
    bot = discord.Bot(intents=build_intents(), auto_sync_commands=False)

    @bot.event
    async def on_error(event_method: str, *args, **kwargs):
        logger.exception("Unhandled exception in %s", event_method)

    return bot


def load_cogs(
    discord_bot_instance: discord.Bot,
    router: EventRouter,
    bridge: LevelEventBridge,
    unban_scheduler: UnbanScheduler,
) -> None:
    """Register all operational cogs with the provided Discord bot instance."""
    from guildcord.bot.cogs import events_listener, interaction_listener, level_listener

    events_listener.setup(discord_bot_instance, unban_scheduler)
    interaction_listener.setup(discord_bot_instance, router)
    level_listener.setup(discord_bot_instance, bridge)

    logger.info("All cogs loaded successfully.")


async def initialize_storage(config: AppConfig, membership: MembershipStore) -> Database:
    """Open the database and warm the membership cache.

    Both failures are logged and tolerated: the bot then runs with an empty
    blacklist and whitelist rather than refusing to start.
    """
    database = Database(config.database_path)
    logger.info("Initializing database at %s...", config.database_path)
    if not await database.initialize():
        logger.critical("Database unavailable; continuing without persistence.")
        return database

    try:
        await membership.load()
    except MembershipStoreUnavailable as exc:
        logger.critical("Membership lists unavailable (%s); continuing with empty lists.", exc)
    return database


async def start_bot(bot: discord.Bot, token: str, commands: CommandRegistry, config: AppConfig) -> None:
    """Log in, replace the guild's slash commands, then connect to the gateway."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.login(token)
        await sync_application_commands(bot, commands, config.application_id, config.guild_id)
        await bot.connect()
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(
    bot: discord.Bot | None,
    cooldowns: CooldownTracker,
    unban_scheduler: UnbanScheduler,
    database: Database,
) -> None:
    """Close the Discord client first, then stop timers and close the database."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    for name, step in (
        ("cooldown tracker", cooldowns.shutdown),
        ("unban scheduler", unban_scheduler.shutdown),
        ("database", database.shutdown),
    ):
        try:
            await step()
        except Exception as exc:
            logger.exception("Error during %s shutdown: %s", name, exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap storage, registries and the bot, returning an exit code."""
    token = load_environment()
    config = app_config

    membership = MembershipStore()
    database = await initialize_storage(config, membership)

    commands, buttons = build_registries()

    try:
        bot = create_bot()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await database.shutdown()
        return 1

    cooldowns = CooldownTracker()
    unban_scheduler = UnbanScheduler(connection_manager=db_connection)
    leveling = LevelingSystem(bot, config.xp_settings)
    url_filter = UrlFilter(membership, enabled=config.url_filter_enabled)

    services = BotServices(
        bot=bot,
        config=config,
        membership=membership,
        leveling=leveling,
        unban_scheduler=unban_scheduler,
    )
    state = RouterState(
        commands=commands,
        buttons=buttons,
        cooldowns=cooldowns,
        membership=membership,
        cooldown_ms=config.command_cooldown_ms,
        owner_id=config.owner_id,
    )
    router = EventRouter(state, services=services, message_hooks=(url_filter.filter_url, leveling.handle_chat_xp))
    bridge = LevelEventBridge(bot, config.level_channel_id, config.level_roles)
    load_cogs(bot, router, bridge, unban_scheduler)

    exit_code = 0
    try:
        await start_bot(bot, token, commands, config)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, cooldowns, unban_scheduler, database)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Guildcord…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
