"""
Persistent storage for scheduled temporary bans.

Timestamps are INTEGER unix seconds so "is it due" is a plain comparison.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import aiosqlite


@dataclass
class TemporaryBanRecord:
    """A single row from the ``temporary_bans`` table."""
    guild_id: int
    user_id: str
    unban_at: int   # unix seconds (UTC)
    reason: str


class TemporaryBanRepo:
    """Low-level CRUD for the ``temporary_bans`` table."""

    @staticmethod
    async def upsert(
        conn: aiosqlite.Connection,
        guild_id: int,
        user_id: str,
        unban_at: int,
        reason: str,
    ) -> None:
        """Insert or replace a tempban row (primary key = guild_id + user_id)."""
        await conn.execute(
            """
            INSERT INTO temporary_bans (guild_id, user_id, unban_at, reason)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(guild_id, user_id) DO UPDATE SET
                unban_at = excluded.unban_at,
                reason   = excluded.reason
            """,
            (guild_id, str(user_id), unban_at, reason),
        )

    @staticmethod
    async def delete(conn: aiosqlite.Connection, guild_id: int, user_id: str) -> None:
        """Remove a tempban row after the ban has been lifted (or cancelled)."""
        await conn.execute(
            "DELETE FROM temporary_bans WHERE guild_id = ? AND user_id = ?",
            (guild_id, str(user_id)),
        )

    @staticmethod
    async def list_all(conn: aiosqlite.Connection) -> List[TemporaryBanRecord]:
        """Return every pending tempban, soonest first."""
        cursor = await conn.execute(
            "SELECT guild_id, user_id, unban_at, reason FROM temporary_bans ORDER BY unban_at"
        )
        rows = await cursor.fetchall()
        return [
            TemporaryBanRecord(guild_id=row[0], user_id=str(row[1]), unban_at=row[2], reason=row[3])
            for row in rows
        ]
