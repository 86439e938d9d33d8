"""
Database schema initialization.

Creates the tables and indexes Guildcord needs and records the schema
version.
"""

import aiosqlite
from guildcord.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates and versions the Guildcord schema."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create every table and index that does not exist yet.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized (version %d)", SCHEMA_VERSION)

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        # Users barred from running slash commands
        await db.execute("""
            CREATE TABLE IF NOT EXISTS blacklist (
                target TEXT PRIMARY KEY,
                reason TEXT NOT NULL DEFAULT '',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # URLs and hosts the URL filter lets through
        await db.execute("""
            CREATE TABLE IF NOT EXISTS url_whitelist (
                url TEXT PRIMARY KEY,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Pending temporary bans; unban_at is unix seconds (UTC)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS temporary_bans (
                guild_id INTEGER NOT NULL,
                user_id TEXT NOT NULL,
                unban_at INTEGER NOT NULL,
                reason TEXT NOT NULL DEFAULT '',
                PRIMARY KEY (guild_id, user_id)
            )
        """)

        # Chat XP per member
        await db.execute("""
            CREATE TABLE IF NOT EXISTS member_levels (
                guild_id INTEGER NOT NULL,
                user_id TEXT NOT NULL,
                xp INTEGER NOT NULL DEFAULT 0,
                level INTEGER NOT NULL DEFAULT 0,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, user_id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_temporary_bans_unban_at ON temporary_bans(unban_at)"
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_member_levels_guild_xp ON member_levels(guild_id, xp DESC)"
        )

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute(
            "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
