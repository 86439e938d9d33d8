"""Verification panel: an admin posts a button; members press it to get the verified role."""

from __future__ import annotations

import discord

from guildcord.commands.checks import ensure_guild, ensure_permissions
from guildcord.core.interaction_context import InteractionContext
from guildcord.datatypes.command_datatypes import ButtonDescriptor, slash_command
from guildcord.ui.embeds import info, success, warning
from guildcord.util.logger import get_logger

logger = get_logger("verification")

VERIFY_BUTTON_ID = "verify"


def build_verify_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(label="Verify", style=discord.ButtonStyle.success, custom_id=VERIFY_BUTTON_ID))
    return view


async def verify_panel(ctx: InteractionContext) -> None:
    if not await ensure_permissions(ctx, administrator=True):
        return

    embed = info("Verification", "Press **Verify** below to unlock the rest of the server.")
    await ctx.reply(embed=embed, view=build_verify_view())


async def verify(ctx: InteractionContext) -> None:
    if not await ensure_guild(ctx):
        return

    role_id = ctx.services.config.verified_role_id
    role = ctx.guild.get_role(role_id) if role_id else None
    if role is None:
        logger.warning("[VERIFY] Verified role %s is not configured or missing", role_id)
        await ctx.reply(embed=warning("Verification is not set up yet, please ask a moderator."), ephemeral=True)
        return

    member = ctx.user
    if member.get_role(role.id) is not None:
        await ctx.reply(embed=success("You are already verified."), ephemeral=True)
        return

    await member.add_roles(role, reason="Pressed the verify button")
    logger.info("[VERIFY] Verified %s", member.id)
    await ctx.reply(embed=success("You are verified, welcome!"), ephemeral=True)


COMMANDS = [
    slash_command("verify-panel", "Post the verification button in this channel", verify_panel),
]

BUTTONS = [
    ButtonDescriptor(custom_id=VERIFY_BUTTON_ID, handler=verify),
]
