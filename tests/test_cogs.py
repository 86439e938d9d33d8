from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from guildcord.bot.cogs import events_listener, interaction_listener, level_listener
from guildcord.datatypes.discord_datatypes import GuildID, UserID
from guildcord.datatypes.interaction_datatypes import DispatchOutcome
from guildcord.datatypes.level_datatypes import LevelEvent, LevelMember


class FakeActivityType:
    listening = "listening"


class FakeActivity:
    def __init__(self, *, type, name):
        self.type = type
        self.name = name


@pytest.fixture(autouse=True)
def patch_discord(monkeypatch):
    monkeypatch.setattr(events_listener.discord, "ActivityType", FakeActivityType, raising=False)
    monkeypatch.setattr(events_listener.discord, "Activity", FakeActivity, raising=False)
    yield


@pytest.fixture
def fake_bot():
    return SimpleNamespace(
        user=SimpleNamespace(id=999, display_name="GuildcordBot"),
        change_presence=AsyncMock(),
        add_cog=MagicMock(),
    )


@pytest.mark.asyncio
async def test_on_ready_restores_unbans_once_and_sets_presence(fake_bot, monkeypatch) -> None:
    load_mock = AsyncMock(return_value=0)
    monkeypatch.setattr(events_listener, "load_unbans", load_mock)
    scheduler = MagicMock()
    cog = events_listener.EventsListenerCog(fake_bot, scheduler, connection_manager=MagicMock())

    await cog.on_ready()
    await cog.on_ready()

    load_mock.assert_awaited_once()
    assert load_mock.await_args.args == (fake_bot, scheduler)
    activity = fake_bot.change_presence.await_args.kwargs["activity"]
    assert activity.type == "listening"
    assert activity.name == events_listener.PRESENCE_TEXT
    assert fake_bot.change_presence.await_count == 2


@pytest.mark.asyncio
async def test_on_ready_without_user_still_sets_presence(monkeypatch) -> None:
    monkeypatch.setattr(events_listener, "load_unbans", AsyncMock(return_value=0))
    bot = SimpleNamespace(user=None, change_presence=AsyncMock())
    cog = events_listener.EventsListenerCog(bot, MagicMock(), connection_manager=MagicMock())

    await cog.on_ready()

    bot.change_presence.assert_awaited_once()


def test_invite_url_contains_client_id() -> None:
    assert "client_id=999" in events_listener.invite_url(999)


@pytest.mark.asyncio
async def test_interaction_listener_forwards_to_router(fake_bot) -> None:
    router = MagicMock()
    router.dispatch_interaction = AsyncMock(return_value=DispatchOutcome.HANDLED)
    router.dispatch_message = AsyncMock()
    cog = interaction_listener.InteractionListenerCog(fake_bot, router)
    interaction = SimpleNamespace(id=1)
    message = SimpleNamespace(id=2)

    await cog.on_interaction(interaction)
    await cog.on_message(message)

    router.dispatch_interaction.assert_awaited_once_with(interaction)
    router.dispatch_message.assert_awaited_once_with(message)


@pytest.mark.asyncio
async def test_level_listener_forwards_to_bridge(fake_bot) -> None:
    bridge = MagicMock()
    bridge.on_level_up = AsyncMock()
    bridge.on_level_down = AsyncMock()
    cog = level_listener.LevelListenerCog(fake_bot, bridge)
    event = LevelEvent(new_level=3, member=LevelMember(user_id=UserID(1), guild_id=GuildID(2)))

    await cog.on_level_up(event)
    await cog.on_level_down(event)

    bridge.on_level_up.assert_awaited_once_with(event)
    bridge.on_level_down.assert_awaited_once_with(event)


def test_setup_functions_register_cogs(fake_bot) -> None:
    events_listener.setup(fake_bot, MagicMock())
    interaction_listener.setup(fake_bot, MagicMock())
    level_listener.setup(fake_bot, MagicMock())

    registered = [call.args[0] for call in fake_bot.add_cog.call_args_list]
    assert [type(cog).__name__ for cog in registered] == [
        "EventsListenerCog",
        "InteractionListenerCog",
        "LevelListenerCog",
    ]
