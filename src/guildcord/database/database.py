"""
Database lifecycle coordinator.

Opens the shared connection, creates the schema and closes everything at
shutdown. A failed initialization is reported through the return value:
Guildcord keeps running without persistence rather than refusing to start.
"""

from __future__ import annotations

from pathlib import Path

from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.database.db_schema import SchemaManager
from guildcord.util.logger import get_logger

logger = get_logger("database")


class Database:
    """
    Coordinates the connection manager and the schema.

    Lifecycle:
        1. ``await initialize()`` at startup
        2. repositories use ``connection_manager.read()`` / ``transaction()``
        3. ``await shutdown()`` at exit
    """

    def __init__(self, db_path: Path, connection_manager: ConnectionManager = db_connection):
        self.db_path = db_path
        self.connection_manager = connection_manager
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """
        Open the database and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection_manager.open(self.db_path)
            async with self.connection_manager.transaction() as conn:
                await SchemaManager.initialize_schema(conn)
        except Exception as exc:
            logger.error("[DATABASE] Database initialization failed for %s: %s", self.db_path, exc)
            await self.connection_manager.close()
            return False

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        """Close the connection. Safe to call when initialization failed."""
        await self.connection_manager.close()
        if self._initialized:
            self._initialized = False
            logger.info("[DATABASE] Database shutdown complete")
