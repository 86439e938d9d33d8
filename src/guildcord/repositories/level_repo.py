"""Storage for chat XP and levels, one row per (guild, member)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import aiosqlite


@dataclass
class MemberLevelRecord:
    """A single row from the ``member_levels`` table."""
    guild_id: int
    user_id: str
    xp: int = 0
    level: int = 0


class LevelRepo:
    """CRUD for the ``member_levels`` table."""

    @staticmethod
    async def get(conn: aiosqlite.Connection, guild_id: int, user_id: str) -> MemberLevelRecord:
        """Return the member's row, or a zeroed record when they have none yet."""
        cursor = await conn.execute(
            "SELECT xp, level FROM member_levels WHERE guild_id = ? AND user_id = ?",
            (guild_id, str(user_id)),
        )
        row = await cursor.fetchone()
        if row is None:
            return MemberLevelRecord(guild_id=guild_id, user_id=str(user_id))
        return MemberLevelRecord(guild_id=guild_id, user_id=str(user_id), xp=row[0], level=row[1])

    @staticmethod
    async def save(conn: aiosqlite.Connection, record: MemberLevelRecord) -> None:
        await conn.execute(
            """
            INSERT INTO member_levels (guild_id, user_id, xp, level)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(guild_id, user_id) DO UPDATE SET
                xp         = excluded.xp,
                level      = excluded.level,
                updated_at = CURRENT_TIMESTAMP
            """,
            (record.guild_id, record.user_id, record.xp, record.level),
        )

    @staticmethod
    async def top(conn: aiosqlite.Connection, guild_id: int, limit: int = 10) -> List[MemberLevelRecord]:
        cursor = await conn.execute(
            "SELECT user_id, xp, level FROM member_levels WHERE guild_id = ? ORDER BY xp DESC LIMIT ?",
            (guild_id, limit),
        )
        rows = await cursor.fetchall()
        return [
            MemberLevelRecord(guild_id=guild_id, user_id=str(row[0]), xp=row[1], level=row[2])
            for row in rows
        ]
