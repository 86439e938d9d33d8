"""
Administrative commands: blacklist, URL whitelist, temporary bans and XP overrides.

The blacklist and whitelist handlers write to the database first and only
then patch the in-memory membership store, so the cache never claims an
entry the table does not have.
"""

from __future__ import annotations

import discord

from guildcord.commands.checks import ensure_permissions
from guildcord.core.interaction_context import InteractionContext
from guildcord.core.membership_store import normalize_url
from guildcord.datatypes.command_datatypes import CommandOption, slash_command
from guildcord.datatypes.discord_datatypes import UserID
from guildcord.moderation.auto_unban import apply_temporary_ban
from guildcord.repositories.membership_repo import MembershipRepo
from guildcord.ui.embeds import success, warning
from guildcord.util.logger import get_logger

logger = get_logger("admin_commands")

ACTIONS = ("add", "remove")
MAX_TEMPBAN_MINUTES = 60 * 24 * 365


async def blacklist(ctx: InteractionContext) -> None:
    if not await ensure_permissions(ctx, administrator=True):
        return

    action = ctx.option("action")
    target = UserID(ctx.option("user"))
    services = ctx.services

    if action == "add":
        if target == ctx.user_id:
            await ctx.reply(embed=warning("You cannot blacklist yourself."), ephemeral=True)
            return
        async with services.connection_manager.transaction() as conn:
            changed = await MembershipRepo.add_blacklist(conn, str(target), ctx.option("reason") or "")
        services.membership.add_blacklisted(target)
        message = f"<@{target}> can no longer use my commands" if changed else f"<@{target}> was already blacklisted"
    else:
        async with services.connection_manager.transaction() as conn:
            changed = await MembershipRepo.remove_blacklist(conn, str(target))
        services.membership.remove_blacklisted(target)
        message = f"<@{target}> can use my commands again" if changed else f"<@{target}> was not blacklisted"

    logger.info("[ADMIN] %s ran blacklist %s on %s", ctx.user_id, action, target)
    await ctx.reply(embed=success(message), ephemeral=True)


async def whitelist(ctx: InteractionContext) -> None:
    if not await ensure_permissions(ctx, administrator=True):
        return

    action = ctx.option("action")
    url = normalize_url(ctx.option("url") or "")
    if not url:
        await ctx.reply(embed=warning("Please give a URL or host name."), ephemeral=True)
        return

    services = ctx.services
    async with services.connection_manager.transaction() as conn:
        if action == "add":
            changed = await MembershipRepo.add_whitelist(conn, url)
        else:
            changed = await MembershipRepo.remove_whitelist(conn, url)

    if action == "add":
        services.membership.add_whitelisted_url(url)
        message = f"`{url}` is now allowed" if changed else f"`{url}` was already allowed"
    else:
        services.membership.remove_whitelisted_url(url)
        message = f"`{url}` is no longer allowed" if changed else f"`{url}` was not on the whitelist"

    logger.info("[ADMIN] %s ran whitelist %s on %s", ctx.user_id, action, url)
    await ctx.reply(embed=success(message), ephemeral=True)


async def tempban(ctx: InteractionContext) -> None:
    if not await ensure_permissions(ctx, ban_members=True):
        return

    target = UserID(ctx.option("user"))
    minutes = int(ctx.option("minutes") or 0)
    reason = ctx.option("reason") or "No reason provided."

    if target == ctx.user_id:
        await ctx.reply(embed=warning("You cannot ban yourself."), ephemeral=True)
        return
    if not 1 <= minutes <= MAX_TEMPBAN_MINUTES:
        await ctx.reply(embed=warning(f"Minutes must be between 1 and {MAX_TEMPBAN_MINUTES}."), ephemeral=True)
        return

    await ctx.defer(ephemeral=True)
    unban_at = await apply_temporary_ban(
        ctx.guild,
        discord.Object(id=target.to_int()),
        minutes,
        reason,
        ctx.services.unban_scheduler,
        bot=ctx.services.bot,
        channel=ctx.interaction.channel,
        connection_manager=ctx.services.connection_manager,
    )
    await ctx.follow_up(embed=success(f"<@{target}> is banned until <t:{unban_at}:f>"), ephemeral=True)


async def setxp(ctx: InteractionContext) -> None:
    if not await ensure_permissions(ctx, administrator=True):
        return

    target = UserID(ctx.option("user"))
    xp = int(ctx.option("xp") or 0)
    record = await ctx.services.leveling.set_xp(ctx.guild.id, target, xp)
    await ctx.reply(embed=success(f"<@{target}> now has {record.xp} XP (level {record.level})"), ephemeral=True)


COMMANDS = [
    slash_command(
        "blacklist",
        "Stop or allow a user using the bot's commands",
        blacklist,
        options=[
            CommandOption("action", "Add or remove", choices=ACTIONS),
            CommandOption("user", "Target user", discord.SlashCommandOptionType.user),
            CommandOption("reason", "Why (stored with the entry)", required=False),
        ],
    ),
    slash_command(
        "whitelist",
        "Allow or disallow a URL or host in chat",
        whitelist,
        options=[
            CommandOption("action", "Add or remove", choices=ACTIONS),
            CommandOption("url", "Full URL or host name, e.g. youtube.com"),
        ],
    ),
    slash_command(
        "tempban",
        "Ban a user for a number of minutes",
        tempban,
        options=[
            CommandOption("user", "User to ban", discord.SlashCommandOptionType.user),
            CommandOption("minutes", "Ban length in minutes", discord.SlashCommandOptionType.integer),
            CommandOption("reason", "Audit log reason", required=False),
        ],
    ),
    slash_command(
        "setxp",
        "Set a member's XP, adjusting their level roles",
        setxp,
        options=[
            CommandOption("user", "Member to change", discord.SlashCommandOptionType.user),
            CommandOption("xp", "New XP total", discord.SlashCommandOptionType.integer),
        ],
    ),
]
