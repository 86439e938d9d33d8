from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildcord.database.db_connection import ConnectionManager
from guildcord.moderation.auto_unban import apply_temporary_ban, load_unbans
from guildcord.repositories.temporary_ban_repo import TemporaryBanRepo
from guildcord.scheduler.unban_scheduler import DEFAULT_UNBAN_REASON


def _guild(guild_id: int = 1):
    guild = MagicMock()
    guild.id = guild_id
    guild.ban = AsyncMock()
    return guild


@pytest.mark.asyncio
async def test_apply_temporary_ban_persists_and_schedules(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()
    guild = _guild()
    user = SimpleNamespace(id=42)

    try:
        unban_at = await apply_temporary_ban(guild, user, 10, "spam", scheduler, connection_manager=manager)
        async with manager.read() as conn:
            rows = await TemporaryBanRepo.list_all(conn)
    finally:
        await manager.close()

    guild.ban.assert_awaited_once_with(user, reason="spam")
    assert len(rows) == 1
    assert rows[0].user_id == "42"
    assert rows[0].unban_at == unban_at
    assert rows[0].reason == "spam"
    args = scheduler.schedule.await_args.args
    assert args[0] is guild
    assert args[1] == 42
    assert args[3] == 600


@pytest.mark.asyncio
async def test_failed_ban_is_not_persisted(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()
    guild = _guild()
    guild.ban.side_effect = discord.Forbidden(MagicMock(status=403), "Missing Permissions")

    try:
        with pytest.raises(discord.Forbidden):
            await apply_temporary_ban(guild, SimpleNamespace(id=42), 10, "spam", scheduler, connection_manager=manager)
        async with manager.read() as conn:
            rows = await TemporaryBanRepo.list_all(conn)
    finally:
        await manager.close()

    assert rows == []
    scheduler.schedule.assert_not_awaited()


@pytest.mark.asyncio
async def test_persistence_failure_still_schedules_the_unban() -> None:
    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()

    await apply_temporary_ban(_guild(), SimpleNamespace(id=42), 1, "spam", scheduler, connection_manager=ConnectionManager())

    scheduler.schedule.assert_awaited_once()


@pytest.mark.asyncio
async def test_load_unbans_schedules_remaining_time_and_skips_unknown_guilds(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()
    known = _guild(1)
    bot = MagicMock()
    bot.get_guild.side_effect = lambda guild_id: known if guild_id == 1 else None

    try:
        async with manager.transaction() as conn:
            await TemporaryBanRepo.upsert(conn, 1, "10", 1_000, "expired")
            await TemporaryBanRepo.upsert(conn, 1, "11", 1_300, "pending")
            await TemporaryBanRepo.upsert(conn, 2, "12", 1_300, "other guild")

        handled = await load_unbans(bot, scheduler, connection_manager=manager, now=1_100)
    finally:
        await manager.close()

    assert handled == 2
    delays = {call.args[1]: call.args[3] for call in scheduler.schedule.await_args_list}
    assert delays == {"10": -100, "11": 200}
    assert all(call.kwargs["reason"] == DEFAULT_UNBAN_REASON for call in scheduler.schedule.await_args_list)


@pytest.mark.asyncio
async def test_load_unbans_with_closed_database_returns_zero() -> None:
    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()

    assert await load_unbans(MagicMock(), scheduler, connection_manager=ConnectionManager()) == 0
    scheduler.schedule.assert_not_awaited()
