"""
Chat XP and level tracking.

Members earn a random amount of XP for chatting, at most once per XP
cooldown. Levels follow the usual quadratic curve: going from level ``n`` to
``n + 1`` costs ``5n² + 50n + 100`` XP. Whenever a member's level changes
the system raises ``level_up`` or ``level_down`` through ``bot.dispatch``;
role handling lives in the level bridge, not here.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Dict, Tuple

import discord

from guildcord.configuration.xp_settings import XPSettings
from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.datatypes.discord_datatypes import GuildID, UserID
from guildcord.datatypes.level_datatypes import LevelEvent, LevelMember
from guildcord.repositories.level_repo import LevelRepo, MemberLevelRecord
from guildcord.util.logger import get_logger

logger = get_logger("leveling_system")


def xp_for_next_level(level: int) -> int:
    """XP needed to go from ``level`` to ``level + 1``."""
    return 5 * level ** 2 + 50 * level + 100


def total_xp_for_level(level: int) -> int:
    """Total XP at which ``level`` is reached."""
    return sum(xp_for_next_level(n) for n in range(max(0, level)))


def level_for_xp(xp: int) -> int:
    level = 0
    remaining = max(0, xp)
    while remaining >= xp_for_next_level(level):
        remaining -= xp_for_next_level(level)
        level += 1
    return level


class LevelingSystem:
    """
    Awards chat XP and emits level change events.

    Attributes:
        bot: Client whose ``dispatch`` receives ``level_up`` / ``level_down``.
        settings (XPSettings): Gain range, per-member cooldown, on/off switch.
        connection_manager (ConnectionManager): Where XP rows are stored.
    """

    def __init__(
        self,
        bot,
        settings: XPSettings,
        connection_manager: ConnectionManager = db_connection,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self.bot = bot
        self.settings = settings
        self.connection_manager = connection_manager
        self.clock = clock
        self.rng = rng or random.Random()
        self._last_award: Dict[Tuple[int, str], float] = {}

    async def handle_chat_xp(self, message: discord.Message) -> None:
        """Message hook: award XP for ``message`` if its author is eligible."""
        if not self.settings.enabled or message.guild is None or message.author.bot:
            return

        key = (message.guild.id, str(message.author.id))
        now = self.clock()
        last = self._last_award.get(key)
        if last is not None and now - last < self.settings.message_cooldown_seconds:
            return
        self._forget_expired(now)
        self._last_award[key] = now

        gain = self.rng.randint(self.settings.min_gain, self.settings.max_gain)
        await self.add_xp(message.guild.id, message.author.id, gain)

    def _forget_expired(self, now: float) -> None:
        cooldown = self.settings.message_cooldown_seconds
        expired = [key for key, last in self._last_award.items() if now - last >= cooldown]
        for key in expired:
            del self._last_award[key]

    async def get_record(self, guild_id: int, user_id) -> MemberLevelRecord:
        async with self.connection_manager.read() as conn:
            return await LevelRepo.get(conn, guild_id, str(user_id))

    async def leaderboard(self, guild_id: int, limit: int = 10):
        async with self.connection_manager.read() as conn:
            return await LevelRepo.top(conn, guild_id, limit)

    async def add_xp(self, guild_id: int, user_id, amount: int) -> MemberLevelRecord:
        """Add ``amount`` (may be negative) to the member's XP, never going below zero."""
        async with self.connection_manager.transaction() as conn:
            record = await LevelRepo.get(conn, guild_id, str(user_id))
            old_level = record.level
            record.xp = max(0, record.xp + amount)
            record.level = level_for_xp(record.xp)
            await LevelRepo.save(conn, record)

        self._emit_level_change(record, old_level)
        return record

    async def set_xp(self, guild_id: int, user_id, xp: int) -> MemberLevelRecord:
        """Overwrite the member's XP; can raise either level event."""
        async with self.connection_manager.transaction() as conn:
            record = await LevelRepo.get(conn, guild_id, str(user_id))
            old_level = record.level
            record.xp = max(0, xp)
            record.level = level_for_xp(record.xp)
            await LevelRepo.save(conn, record)

        self._emit_level_change(record, old_level)
        return record

    def _emit_level_change(self, record: MemberLevelRecord, old_level: int) -> None:
        if record.level == old_level:
            return

        event = LevelEvent(
            new_level=record.level,
            member=LevelMember(user_id=UserID(record.user_id), guild_id=GuildID(record.guild_id)),
            old_level=old_level,
        )
        event_name = "level_up" if record.level > old_level else "level_down"
        logger.info("[LEVELS] %s in %s: level %d -> %d", record.user_id, record.guild_id, old_level, record.level)
        self.bot.dispatch(event_name, event)
