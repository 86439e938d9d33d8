"""
Pytest configuration and fixtures for Guildcord tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

import discord  # noqa: E402

from guildcord.database.db_connection import ConnectionManager  # noqa: E402
from guildcord.database.db_schema import SchemaManager  # noqa: E402


def _permissions(**flags):
    return SimpleNamespace(
        administrator=flags.get("administrator", False),
        ban_members=flags.get("ban_members", False),
        manage_messages=flags.get("manage_messages", False),
    )


def _make_interaction(
    *,
    kind: str = "command",
    name: str = "ping",
    custom_id: str = "verify",
    user_id: int = 111,
    options: dict | None = None,
    guild=None,
    permissions: dict | None = None,
):
    """Build a py-cord-shaped interaction whose response methods are AsyncMocks."""
    interaction = MagicMock()
    if kind == "command":
        interaction.type = discord.InteractionType.application_command
        interaction.data = {
            "name": name,
            "options": [{"name": key, "value": value} for key, value in (options or {}).items()],
        }
    elif kind == "button":
        interaction.type = discord.InteractionType.component
        interaction.data = {"custom_id": custom_id, "component_type": discord.ComponentType.button.value}
    else:
        interaction.type = discord.InteractionType.ping
        interaction.data = {}

    interaction.id = 999
    interaction.user = MagicMock()
    interaction.user.id = user_id
    interaction.user.guild_permissions = _permissions(**(permissions or {}))
    interaction.guild = guild
    interaction.guild_id = getattr(guild, "id", None)
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def make_interaction():
    return _make_interaction


@pytest.fixture
def connection_manager_factory(tmp_path):
    """Return a coroutine opening a fresh ConnectionManager on a temp database with the schema applied.

    Tests close the manager themselves.
    """

    async def factory(name: str = "guildcord.db") -> ConnectionManager:
        manager = ConnectionManager()
        await manager.open(tmp_path / name)
        async with manager.transaction() as conn:
            await SchemaManager.initialize_schema(conn)
        return manager

    return factory
