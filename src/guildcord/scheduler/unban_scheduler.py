"""
Scheduled unbans for temporary bans.

Jobs are keyed by ``(guild_id, user_id)`` on a :class:`DelayedTaskQueue`, so
banning someone again replaces their previous unban. When a job fires the
user is unbanned, the ``temporary_bans`` row is deleted and, if a channel was
given, a short notice is posted there.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Tuple

import discord

from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.datatypes.discord_datatypes import UserID
from guildcord.repositories.temporary_ban_repo import TemporaryBanRepo
from guildcord.scheduler.delayed_task_queue import DelayedTaskQueue
from guildcord.util.logger import get_logger

logger = get_logger("unban_scheduler")

DEFAULT_UNBAN_REASON = "Ban duration expired."


@dataclass
class UnbanData:
    """
    Everything needed to carry out one scheduled unban.

    Attributes:
        guild (discord.Guild): Guild that holds the ban.
        user_id (UserID): User to unban.
        channel (discord.abc.Messageable | None): Where to post the unban notice, if anywhere.
        bot (discord.Bot | None): Used to fetch the user for the notice.
        reason (str): Audit log reason for the unban.
    """
    guild: discord.Guild
    user_id: UserID
    channel: discord.abc.Messageable | None
    bot: discord.Bot | None
    reason: str = DEFAULT_UNBAN_REASON

    @property
    def key(self) -> Tuple[int, str]:
        return (self.guild.id, str(self.user_id))


class UnbanScheduler:
    """Schedules, cancels and executes unbans."""

    def __init__(
        self,
        queue: DelayedTaskQueue | None = None,
        connection_manager: ConnectionManager = db_connection,
    ) -> None:
        self.queue = queue or DelayedTaskQueue(name="guildcord-unban-scheduler")
        self.connection_manager = connection_manager

    def is_scheduled(self, guild_id: int, user_id) -> bool:
        return self.queue.is_pending((guild_id, str(user_id)))

    async def schedule(
        self,
        guild: discord.Guild,
        user_id,
        channel: discord.abc.Messageable | None,
        duration_seconds: float,
        bot: discord.Bot | None,
        *,
        reason: str = DEFAULT_UNBAN_REASON,
    ) -> None:
        """
        Unban ``user_id`` after ``duration_seconds``; non-positive durations unban right away.

        A pending unban for the same guild and user is replaced.
        """
        payload = UnbanData(guild=guild, user_id=UserID(user_id), channel=channel, bot=bot, reason=reason)

        if duration_seconds <= 0:
            self.queue.cancel(payload.key)
            await self.execute(payload)
            return

        self.queue.schedule(payload.key, duration_seconds, lambda: self.execute(payload))
        logger.debug("[BAN-MANAGE] Unban of %s in %s scheduled in %.0fs", payload.user_id, guild.id, duration_seconds)

    async def cancel(self, guild_id: int, user_id) -> bool:
        """Cancel a pending unban. Returns False when none was scheduled."""
        return self.queue.cancel((guild_id, str(user_id)))

    async def shutdown(self) -> None:
        """Drop every pending unban; the rows stay in the database for the next start."""
        await self.queue.shutdown()

    async def execute(self, payload: UnbanData) -> None:
        """
        Lift the ban, forget the stored row and post the optional notice.

        Errors are logged, never raised, so one failed unban cannot stop the
        scheduler.
        """
        guild = payload.guild
        user_id = payload.user_id

        try:
            await guild.unban(discord.Object(id=user_id.to_int()), reason=payload.reason)
            logger.info("[BAN-MANAGE] Unbanned %s from %s", user_id, guild.id)
        except discord.NotFound:
            logger.warning("[BAN-MANAGE] Could not unban %s: not in the ban list of %s", user_id, guild.id)
        except Exception as exc:
            logger.error("[BAN-MANAGE] Failed to auto-unban %s: %s", user_id, exc)
            return

        await self._forget(payload)
        await self._notify(payload)

    async def _forget(self, payload: UnbanData) -> None:
        try:
            async with self.connection_manager.transaction() as conn:
                await TemporaryBanRepo.delete(conn, payload.guild.id, str(payload.user_id))
        except Exception as exc:
            logger.warning("[BAN-MANAGE] Could not delete tempban row for %s: %s", payload.user_id, exc)

    async def _notify(self, payload: UnbanData) -> None:
        if payload.bot is None or not isinstance(payload.channel, (discord.TextChannel, discord.Thread)):
            return
        try:
            user = await payload.bot.fetch_user(payload.user_id.to_int())
            embed = discord.Embed(
                title="🔓 User Unbanned",
                description=f"{user.mention} (`{user.id}`) has been unbanned.\n{payload.reason}",
                timestamp=datetime.datetime.now(datetime.timezone.utc),
            )
            await payload.channel.send(embed=embed)
        except Exception as exc:
            logger.warning("[BAN-MANAGE] Could not send unban notification for %s: %s", payload.user_id, exc)
