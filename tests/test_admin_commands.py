from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from guildcord.commands import admin
from guildcord.commands.checks import NO_PERMISSION_NOTICE
from guildcord.core.interaction_context import InteractionContext
from guildcord.core.membership_store import MembershipStore
from guildcord.datatypes.interaction_datatypes import AckState, InteractionKind
from guildcord.repositories.membership_repo import MembershipRepo


def _ctx(interaction, services) -> InteractionContext:
    return InteractionContext(interaction, InteractionKind.COMMAND, services)


def _services(manager, **extra):
    return SimpleNamespace(
        connection_manager=manager,
        membership=MembershipStore(source=MagicMock()),
        **extra,
    )


@pytest.mark.asyncio
async def test_blacklist_requires_administrator(make_interaction) -> None:
    interaction = make_interaction(
        name="blacklist", guild=SimpleNamespace(id=1), options={"action": "add", "user": "77"}
    )
    services = _services(MagicMock())

    await admin.blacklist(_ctx(interaction, services))

    embed = interaction.response.send_message.await_args.kwargs["embed"]
    assert NO_PERMISSION_NOTICE in embed.description
    services.connection_manager.transaction.assert_not_called()


@pytest.mark.asyncio
async def test_blacklist_add_and_remove_update_table_and_cache(make_interaction, connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    services = _services(manager)
    guild = SimpleNamespace(id=1)

    try:
        add = make_interaction(
            name="blacklist", guild=guild, permissions={"administrator": True},
            options={"action": "add", "user": "77", "reason": "spam"},
        )
        await admin.blacklist(_ctx(add, services))
        async with manager.read() as conn:
            after_add = await MembershipRepo.list_blacklist(conn)
        assert services.membership.is_blacklisted(77)

        remove = make_interaction(
            name="blacklist", guild=guild, permissions={"administrator": True},
            options={"action": "remove", "user": "77"},
        )
        await admin.blacklist(_ctx(remove, services))
        async with manager.read() as conn:
            after_remove = await MembershipRepo.list_blacklist(conn)
    finally:
        await manager.close()

    assert after_add == ["77"]
    assert after_remove == []
    assert not services.membership.is_blacklisted(77)
    assert "can no longer use my commands" in add.response.send_message.await_args.kwargs["embed"].description


@pytest.mark.asyncio
async def test_admin_cannot_blacklist_themselves(make_interaction) -> None:
    interaction = make_interaction(
        name="blacklist", user_id=5, guild=SimpleNamespace(id=1), permissions={"administrator": True},
        options={"action": "add", "user": "5"},
    )
    services = _services(MagicMock())

    await admin.blacklist(_ctx(interaction, services))

    assert not services.membership.is_blacklisted(5)
    services.connection_manager.transaction.assert_not_called()


@pytest.mark.asyncio
async def test_whitelist_add_normalizes_url(make_interaction, connection_manager_factory) -> None:
    manager = await connection_manager_factory()
    services = _services(manager)
    interaction = make_interaction(
        name="whitelist", guild=SimpleNamespace(id=1), permissions={"administrator": True},
        options={"action": "add", "url": "  YouTube.com "},
    )

    try:
        await admin.whitelist(_ctx(interaction, services))
        async with manager.read() as conn:
            stored = await MembershipRepo.list_whitelist(conn)
    finally:
        await manager.close()

    assert stored == ["youtube.com"]
    assert services.membership.is_whitelisted_url("youtube.com")


@pytest.mark.asyncio
async def test_tempban_rejects_out_of_range_minutes(make_interaction) -> None:
    interaction = make_interaction(
        name="tempban", guild=SimpleNamespace(id=1), permissions={"ban_members": True},
        options={"user": "77", "minutes": 0},
    )
    services = _services(MagicMock(), unban_scheduler=MagicMock(), bot=MagicMock())

    with patch.object(admin, "apply_temporary_ban", AsyncMock()) as apply_mock:
        await admin.tempban(_ctx(interaction, services))

    apply_mock.assert_not_awaited()
    assert "Minutes must be between" in interaction.response.send_message.await_args.kwargs["embed"].description


@pytest.mark.asyncio
async def test_tempban_defers_then_follows_up(make_interaction) -> None:
    guild = SimpleNamespace(id=1)
    interaction = make_interaction(
        name="tempban", guild=guild, permissions={"ban_members": True},
        options={"user": "77", "minutes": 30, "reason": "raid"},
    )
    services = _services(MagicMock(), unban_scheduler=MagicMock(), bot=MagicMock())
    ctx = _ctx(interaction, services)

    with patch.object(admin, "apply_temporary_ban", AsyncMock(return_value=1_700_000_000)) as apply_mock:
        await admin.tempban(ctx)

    assert ctx.ack_state is AckState.DEFERRED
    interaction.response.defer.assert_awaited_once_with(ephemeral=True)
    args = apply_mock.await_args.args
    assert args[0] is guild
    assert args[1].id == 77
    assert args[2] == 30
    assert args[3] == "raid"
    assert "<t:1700000000:f>" in interaction.followup.send.await_args.kwargs["embed"].description


@pytest.mark.asyncio
async def test_setxp_reports_new_level(make_interaction) -> None:
    interaction = make_interaction(
        name="setxp", guild=SimpleNamespace(id=1), permissions={"administrator": True},
        options={"user": "77", "xp": 300},
    )
    leveling = MagicMock()
    leveling.set_xp = AsyncMock(return_value=SimpleNamespace(xp=300, level=2))
    services = _services(MagicMock(), leveling=leveling)

    await admin.setxp(_ctx(interaction, services))

    assert leveling.set_xp.await_args.args[0] == 1
    assert leveling.set_xp.await_args.args[1] == 77
    assert leveling.set_xp.await_args.args[2] == 300
    assert "level 2" in interaction.response.send_message.await_args.kwargs["embed"].description
