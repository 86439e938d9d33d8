"""
Temporary bans: applying them and restoring their unban jobs after a restart.
"""

from __future__ import annotations

import time

import discord

from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.repositories.temporary_ban_repo import TemporaryBanRepo
from guildcord.scheduler.unban_scheduler import DEFAULT_UNBAN_REASON, UnbanScheduler
from guildcord.util.logger import get_logger

logger = get_logger("auto_unban")


async def apply_temporary_ban(
    guild: discord.Guild,
    user: discord.abc.Snowflake,
    minutes: int,
    reason: str,
    scheduler: UnbanScheduler,
    *,
    bot: discord.Bot | None = None,
    channel: discord.abc.Messageable | None = None,
    connection_manager: ConnectionManager = db_connection,
) -> int:
    """
    Ban ``user`` now, persist the ban and schedule the unban.

    The ban itself propagates Discord errors to the caller. A failure to
    persist is only logged: the unban is still scheduled for this run.

    Returns:
        int: Unix timestamp at which the ban is lifted.
    """
    duration_seconds = max(0, minutes) * 60
    unban_at = int(time.time()) + duration_seconds

    await guild.ban(user, reason=reason)

    try:
        async with connection_manager.transaction() as conn:
            await TemporaryBanRepo.upsert(conn, guild.id, str(user.id), unban_at, reason)
    except Exception as exc:
        logger.error("[BAN-MANAGE] Could not persist tempban of %s; it will not survive a restart: %s", user.id, exc)

    await scheduler.schedule(guild, user.id, channel, duration_seconds, bot, reason=DEFAULT_UNBAN_REASON)
    logger.info("[BAN-MANAGE] Temporarily banned %s from %s for %d minutes", user.id, guild.id, minutes)
    return unban_at


async def load_unbans(
    bot: discord.Bot,
    scheduler: UnbanScheduler,
    *,
    connection_manager: ConnectionManager = db_connection,
    now: int | None = None,
) -> int:
    """
    Lift every stored ban that has expired and schedule the rest.

    Returns:
        int: Number of stored bans handed to the scheduler.
    """
    try:
        async with connection_manager.read() as conn:
            records = await TemporaryBanRepo.list_all(conn)
    except Exception as exc:
        logger.error("[BAN-MANAGE] Could not read temporary bans: %s", exc)
        return 0

    now = int(time.time()) if now is None else now
    handled = 0
    for record in records:
        guild = bot.get_guild(record.guild_id)
        if guild is None:
            logger.warning("[BAN-MANAGE] Skipping tempban of %s: guild %s is not available", record.user_id, record.guild_id)
            continue
        await scheduler.schedule(
            guild,
            record.user_id,
            None,
            record.unban_at - now,
            bot,
            reason=DEFAULT_UNBAN_REASON,
        )
        handled += 1

    logger.info("[BAN-MANAGE] Removed expired bans and put jobs for the rest (%d stored)", handled)
    return handled
