"""Registration of the slash-command schemas with Discord."""

from __future__ import annotations

import time

import discord

from guildcord.core.registry import CommandRegistry
from guildcord.util.logger import get_logger

logger = get_logger("command_sync")


async def sync_application_commands(
    bot: discord.Bot,
    registry: CommandRegistry,
    application_id: int | None,
    guild_id: int | None,
) -> bool:
    """
    Replace the guild's slash commands with the registered schemas.

    Must run after login. Failures are logged with the elapsed time and
    reported through the return value; the bot keeps running with whatever
    commands Discord already has.
    """
    if guild_id is None:
        logger.warning("[APP-REFR] No guild_id configured; skipping slash command registration")
        return False

    started = time.perf_counter()
    logger.info("[APP-REFR] Started refreshing application (/) commands")
    try:
        if application_id is None:
            application_id = (await bot.application_info()).id
        await bot.http.bulk_upsert_guild_commands(application_id, guild_id, registry.schemas())
    except Exception as exc:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.error("[APP-REFR] Failed to reload application (/) commands after %.0fms: %s", elapsed_ms, exc)
        return False

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("[APP-REFR] Successfully reloaded %d application (/) commands after %.0fms", len(registry), elapsed_ms)
    return True
