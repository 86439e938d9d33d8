from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildcord.commands import general, verification
from guildcord.commands.checks import GUILD_ONLY_NOTICE
from guildcord.core.interaction_context import InteractionContext
from guildcord.datatypes.interaction_datatypes import InteractionKind


def _ctx(interaction, services, kind=InteractionKind.COMMAND) -> InteractionContext:
    return InteractionContext(interaction, kind, services)


@pytest.mark.asyncio
async def test_ping_reports_latency(make_interaction) -> None:
    interaction = make_interaction(name="ping")
    services = SimpleNamespace(bot=SimpleNamespace(latency=0.0423))

    await general.ping(_ctx(interaction, services))

    interaction.response.send_message.assert_awaited_once_with("🏓 Pong! Gateway latency: 42ms", ephemeral=True)


@pytest.mark.asyncio
async def test_ping_before_first_heartbeat(make_interaction) -> None:
    interaction = make_interaction(name="ping")
    services = SimpleNamespace(bot=SimpleNamespace(latency=float("nan")))

    await general.ping(_ctx(interaction, services))

    assert "n/a" in interaction.response.send_message.await_args.args[0]


@pytest.mark.asyncio
async def test_level_outside_a_guild_is_refused(make_interaction) -> None:
    interaction = make_interaction(name="level")

    await general.level(_ctx(interaction, SimpleNamespace()))

    assert GUILD_ONLY_NOTICE in interaction.response.send_message.await_args.kwargs["embed"].description


@pytest.mark.asyncio
async def test_level_shows_progress(make_interaction) -> None:
    interaction = make_interaction(name="level", user_id=10, guild=SimpleNamespace(id=1))
    leveling = MagicMock()
    leveling.get_record = AsyncMock(return_value=SimpleNamespace(xp=300, level=2))

    await general.level(_ctx(interaction, SimpleNamespace(leveling=leveling)))

    description = interaction.response.send_message.await_args.kwargs["embed"].description
    assert "level **2**" in description
    assert "45/220 XP" in description


@pytest.mark.asyncio
async def test_leaderboard_defers_and_follows_up(make_interaction) -> None:
    interaction = make_interaction(name="leaderboard", guild=SimpleNamespace(id=1))
    leveling = MagicMock()
    leveling.leaderboard = AsyncMock(
        return_value=[SimpleNamespace(user_id="11", level=3, xp=500), SimpleNamespace(user_id="10", level=0, xp=20)]
    )

    await general.leaderboard(_ctx(interaction, SimpleNamespace(leveling=leveling)))

    interaction.response.defer.assert_awaited_once()
    description = interaction.followup.send.await_args.kwargs["embed"].description
    assert description.splitlines()[0] == "**1.** <@11> level 3 (500 XP)"


@pytest.mark.asyncio
async def test_verify_panel_posts_persistent_button(make_interaction) -> None:
    interaction = make_interaction(
        name="verify-panel", guild=SimpleNamespace(id=1), permissions={"administrator": True}
    )

    await verification.verify_panel(_ctx(interaction, SimpleNamespace()))

    view = interaction.response.send_message.await_args.kwargs["view"]
    assert view.timeout is None
    assert [item.custom_id for item in view.children] == [verification.VERIFY_BUTTON_ID]


@pytest.mark.asyncio
async def test_verify_button_grants_role(make_interaction) -> None:
    role = SimpleNamespace(id=900)
    guild = MagicMock()
    guild.id = 1
    guild.get_role.return_value = role
    interaction = make_interaction(kind="button", guild=guild)
    interaction.user.get_role.return_value = None
    interaction.user.add_roles = AsyncMock()
    services = SimpleNamespace(config=SimpleNamespace(verified_role_id=900))

    await verification.verify(_ctx(interaction, services, InteractionKind.BUTTON))

    interaction.user.add_roles.assert_awaited_once()
    assert interaction.user.add_roles.await_args.args[0] is role
    assert interaction.response.send_message.await_args.kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_verify_button_without_configured_role(make_interaction) -> None:
    guild = MagicMock()
    guild.id = 1
    interaction = make_interaction(kind="button", guild=guild)
    interaction.user.add_roles = AsyncMock()
    services = SimpleNamespace(config=SimpleNamespace(verified_role_id=None))

    await verification.verify(_ctx(interaction, services, InteractionKind.BUTTON))

    interaction.user.add_roles.assert_not_awaited()
    embed = interaction.response.send_message.await_args.kwargs["embed"]
    assert isinstance(embed, discord.Embed)
    assert "not set up" in embed.description
