import random
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from guildcord.configuration.xp_settings import XPSettings
from guildcord.leveling.leveling_system import (
    LevelingSystem,
    level_for_xp,
    total_xp_for_level,
    xp_for_next_level,
)


def test_level_curve() -> None:
    assert xp_for_next_level(0) == 100
    assert xp_for_next_level(1) == 155
    assert total_xp_for_level(0) == 0
    assert total_xp_for_level(2) == 255
    assert level_for_xp(0) == 0
    assert level_for_xp(99) == 0
    assert level_for_xp(100) == 1
    assert level_for_xp(254) == 1
    assert level_for_xp(255) == 2
    assert level_for_xp(-50) == 0


def _message(author_id: int = 10, guild_id: int = 1, bot: bool = False):
    return SimpleNamespace(
        guild=SimpleNamespace(id=guild_id) if guild_id else None,
        author=SimpleNamespace(id=author_id, bot=bot),
    )


@pytest.mark.asyncio
async def test_add_xp_dispatches_level_up(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    bot = MagicMock()
    system = LevelingSystem(bot, XPSettings(), manager)
    try:
        record = await system.add_xp(1, 10, 260)
        unchanged = await system.add_xp(1, 10, 5)
    finally:
        await manager.close()

    assert record.level == 2
    assert unchanged.xp == 265
    bot.dispatch.assert_called_once()
    event_name, event = bot.dispatch.call_args.args
    assert event_name == "level_up"
    assert event.new_level == 2
    assert event.old_level == 0
    assert event.member.user_id == 10
    assert event.member.guild_id == 1


@pytest.mark.asyncio
async def test_set_xp_lower_dispatches_level_down(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    bot = MagicMock()
    system = LevelingSystem(bot, XPSettings(), manager)
    try:
        await system.set_xp(1, 10, 1000)
        bot.dispatch.reset_mock()
        record = await system.set_xp(1, 10, 0)
        stored = await system.get_record(1, 10)
    finally:
        await manager.close()

    assert record.level == 0
    assert stored.xp == 0
    assert bot.dispatch.call_args.args[0] == "level_down"


@pytest.mark.asyncio
async def test_chat_xp_respects_cooldown_and_eligibility(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    now = [0.0]
    settings = XPSettings({"min_gain": 20, "max_gain": 20, "message_cooldown_seconds": 60})
    system = LevelingSystem(MagicMock(), settings, manager, clock=lambda: now[0], rng=random.Random(1))
    try:
        await system.handle_chat_xp(_message())
        await system.handle_chat_xp(_message())
        now[0] = 61.0
        await system.handle_chat_xp(_message())
        await system.handle_chat_xp(_message(author_id=11, bot=True))
        await system.handle_chat_xp(_message(author_id=12, guild_id=0))
        record = await system.get_record(1, 10)
        bot_record = await system.get_record(1, 11)
    finally:
        await manager.close()

    assert record.xp == 40
    assert bot_record.xp == 0


@pytest.mark.asyncio
async def test_chat_xp_forgets_members_whose_cooldown_expired(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    now = [0.0]
    settings = XPSettings({"min_gain": 5, "max_gain": 5, "message_cooldown_seconds": 60})
    system = LevelingSystem(MagicMock(), settings, manager, clock=lambda: now[0], rng=random.Random(1))
    try:
        await system.handle_chat_xp(_message(author_id=10))
        await system.handle_chat_xp(_message(author_id=11))
        now[0] = 30.0
        await system.handle_chat_xp(_message(author_id=12))
        now[0] = 70.0
        await system.handle_chat_xp(_message(author_id=13))
    finally:
        await manager.close()

    assert set(system._last_award) == {(1, "12"), (1, "13")}


@pytest.mark.asyncio
async def test_leaderboard_orders_by_xp(connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    system = LevelingSystem(MagicMock(), XPSettings(), manager)
    try:
        await system.set_xp(1, 10, 50)
        await system.set_xp(1, 11, 500)
        await system.set_xp(2, 12, 9999)
        top = await system.leaderboard(1, 10)
    finally:
        await manager.close()

    assert [record.user_id for record in top] == ["11", "10"]


@pytest.mark.asyncio
async def test_disabled_xp_awards_nothing() -> None:
    system = LevelingSystem(MagicMock(), XPSettings({"enabled": False}), MagicMock())

    await system.handle_chat_xp(_message())

    system.connection_manager.transaction.assert_not_called()


def test_xp_settings_defaults_and_inverted_range() -> None:
    settings = XPSettings({"min_gain": 30, "max_gain": 10})

    assert settings.enabled is True
    assert settings.min_gain == 30
    assert settings.max_gain == 30
    assert XPSettings().message_cooldown_seconds == 60.0
