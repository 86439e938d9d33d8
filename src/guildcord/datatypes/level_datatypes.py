"""Level change events raised by the leveling system and consumed by the level bridge."""

from __future__ import annotations

from dataclasses import dataclass

from guildcord.datatypes.discord_datatypes import GuildID, UserID


@dataclass(frozen=True)
class LevelMember:
    """Member whose level changed."""
    user_id: UserID
    guild_id: GuildID


@dataclass(frozen=True)
class LevelEvent:
    """
    A level change, dispatched through ``bot.dispatch("level_up" | "level_down", event)``.

    Attributes:
        new_level (int): Level the member holds after the change.
        member (LevelMember): Who changed level, and where.
        old_level (int | None): Level before the change, when known.
    """
    new_level: int
    member: LevelMember
    old_level: int | None = None
