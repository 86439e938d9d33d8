"""
Level event bridge: turns level-up / level-down events into role changes.

Each configured ``(threshold, role)`` pair is handled independently and
concurrently. A pair that fails is logged and the others still go through;
there is no attempt to make the set of changes atomic.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence, Tuple

import discord

from guildcord.datatypes.level_datatypes import LevelEvent
from guildcord.util.logger import get_logger

logger = get_logger("level_bridge")

LEVEL_UP_REASON = "Reached level role threshold"
LEVEL_DOWN_REASON = "Dropped below level role threshold"


def level_up_announcement(user_id, new_level: int) -> str:
    return f"🎉 <@{user_id}> leveled up to level {new_level}! 🎉"


class LevelEventBridge:
    """
    Grants and revokes level roles.

    Attributes:
        bot: Client used to resolve guilds (``get_guild``).
        announce_channel_id (int | None): Where level-ups are announced.
        level_roles (Sequence[Tuple[int, int]]): ``(threshold, role_id)`` pairs.
    """

    def __init__(
        self,
        bot,
        announce_channel_id: Optional[int],
        level_roles: Sequence[Tuple[int, int]],
    ) -> None:
        self.bot = bot
        self.announce_channel_id = announce_channel_id
        self.level_roles = tuple(level_roles)

    async def _resolve(self, event: LevelEvent):
        guild = self.bot.get_guild(event.member.guild_id.to_int())
        if guild is None:
            logger.warning("[LEVELS] Guild %s is not cached; ignoring level event", event.member.guild_id)
            return None, None

        user_id = event.member.user_id.to_int()
        member = guild.get_member(user_id)
        if member is None:
            try:
                member = await guild.fetch_member(user_id)
            except discord.HTTPException as exc:
                logger.warning("[LEVELS] Could not fetch member %s in %s: %s", user_id, guild.id, exc)
                return guild, None
        return guild, member

    async def on_level_up(self, event: LevelEvent) -> None:
        """Announce the level-up and grant every role whose threshold is now met."""
        guild, member = await self._resolve(event)
        if guild is None:
            return

        await self._announce(guild, event)
        if member is None:
            return

        targets = [role_id for threshold, role_id in self.level_roles if event.new_level >= threshold]
        await self._apply(guild, member, targets, grant=True)

    async def on_level_down(self, event: LevelEvent) -> None:
        """Revoke every role whose threshold the member no longer meets."""
        guild, member = await self._resolve(event)
        if guild is None or member is None:
            return

        targets = [role_id for threshold, role_id in self.level_roles if event.new_level < threshold]
        await self._apply(guild, member, targets, grant=False)

    async def _announce(self, guild, event: LevelEvent) -> None:
        if not self.announce_channel_id:
            return
        channel = guild.get_channel(self.announce_channel_id)
        if channel is None:
            logger.warning("[LEVELS] Announcement channel %s not found in %s", self.announce_channel_id, guild.id)
            return
        try:
            await channel.send(level_up_announcement(event.member.user_id, event.new_level))
        except Exception as exc:
            logger.error("[LEVELS] Could not announce level-up for %s: %s", event.member.user_id, exc)

    async def _apply(self, guild, member, role_ids, *, grant: bool) -> None:
        if not role_ids:
            return
        results = await asyncio.gather(
            *(self._mutate_role(guild, member, role_id, grant=grant) for role_id in role_ids),
            return_exceptions=True,
        )
        for role_id, result in zip(role_ids, results):
            if isinstance(result, BaseException):
                logger.error(
                    "[LEVELS] Failed to %s role %s for %s: %s",
                    "grant" if grant else "revoke",
                    role_id,
                    member.id,
                    result,
                )

    @staticmethod
    async def _mutate_role(guild, member, role_id: int, *, grant: bool) -> None:
        held = member.get_role(role_id) is not None
        if held == grant:
            return

        role = guild.get_role(role_id)
        if role is None:
            raise LookupError(f"role {role_id} does not exist in guild {guild.id}")

        if grant:
            await member.add_roles(role, reason=LEVEL_UP_REASON)
            logger.info("[LEVELS] Granted role %s to %s", role_id, member.id)
        else:
            await member.remove_roles(role, reason=LEVEL_DOWN_REASON)
            logger.info("[LEVELS] Revoked role %s from %s", role_id, member.id)
