"""
Storage for the command blacklist and the URL whitelist.

Both tables are small and read in bulk at startup; the admin commands
write through here and then patch the in-memory membership store.
"""

from __future__ import annotations

from typing import List

import aiosqlite


class MembershipRepo:
    """CRUD for the ``blacklist`` and ``url_whitelist`` tables."""

    # ------------------------------------------------------------------
    # Blacklist
    # ------------------------------------------------------------------

    @staticmethod
    async def list_blacklist(conn: aiosqlite.Connection) -> List[str]:
        cursor = await conn.execute("SELECT target FROM blacklist")
        rows = await cursor.fetchall()
        return [str(row[0]) for row in rows]

    @staticmethod
    async def add_blacklist(conn: aiosqlite.Connection, target: str, reason: str = "") -> bool:
        """Insert ``target``. Returns False when it was already blacklisted."""
        cursor = await conn.execute(
            "INSERT OR IGNORE INTO blacklist (target, reason) VALUES (?, ?)",
            (str(target), reason),
        )
        return cursor.rowcount > 0

    @staticmethod
    async def remove_blacklist(conn: aiosqlite.Connection, target: str) -> bool:
        """Delete ``target``. Returns False when it was not blacklisted."""
        cursor = await conn.execute("DELETE FROM blacklist WHERE target = ?", (str(target),))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # URL whitelist
    # ------------------------------------------------------------------

    @staticmethod
    async def list_whitelist(conn: aiosqlite.Connection) -> List[str]:
        cursor = await conn.execute("SELECT url FROM url_whitelist")
        rows = await cursor.fetchall()
        return [str(row[0]) for row in rows]

    @staticmethod
    async def add_whitelist(conn: aiosqlite.Connection, url: str) -> bool:
        cursor = await conn.execute("INSERT OR IGNORE INTO url_whitelist (url) VALUES (?)", (url,))
        return cursor.rowcount > 0

    @staticmethod
    async def remove_whitelist(conn: aiosqlite.Connection, url: str) -> bool:
        cursor = await conn.execute("DELETE FROM url_whitelist WHERE url = ?", (url,))
        return cursor.rowcount > 0
