"""Everyday commands: latency, levels and the XP leaderboard."""

from __future__ import annotations

import math

import discord

from guildcord.commands.checks import ensure_guild
from guildcord.core.interaction_context import InteractionContext
from guildcord.datatypes.command_datatypes import CommandOption, slash_command
from guildcord.leveling.leveling_system import total_xp_for_level, xp_for_next_level
from guildcord.ui.embeds import info

LEADERBOARD_SIZE = 10


async def ping(ctx: InteractionContext) -> None:
    latency = ctx.services.bot.latency
    shown = "n/a" if latency is None or math.isnan(latency) else f"{round(latency * 1000)}ms"
    await ctx.reply(f"🏓 Pong! Gateway latency: {shown}", ephemeral=True)


async def level(ctx: InteractionContext) -> None:
    if not await ensure_guild(ctx):
        return

    target_id = ctx.option("user") or ctx.user_id
    record = await ctx.services.leveling.get_record(ctx.guild.id, target_id)

    into_level = record.xp - total_xp_for_level(record.level)
    needed = xp_for_next_level(record.level)
    embed = info(
        "Level",
        f"<@{target_id}> is level **{record.level}**\n"
        f"{into_level}/{needed} XP towards level {record.level + 1} ({record.xp} XP total)",
    )
    await ctx.reply(embed=embed)


async def leaderboard(ctx: InteractionContext) -> None:
    if not await ensure_guild(ctx):
        return

    await ctx.defer()
    records = await ctx.services.leveling.leaderboard(ctx.guild.id, LEADERBOARD_SIZE)
    if not records:
        await ctx.follow_up("Nobody has earned any XP yet.")
        return

    lines = [
        f"**{position}.** <@{record.user_id}> level {record.level} ({record.xp} XP)"
        for position, record in enumerate(records, start=1)
    ]
    await ctx.follow_up(embed=info("Leaderboard", "\n".join(lines)))


COMMANDS = [
    slash_command("ping", "Check whether the bot is responsive", ping),
    slash_command(
        "level",
        "Show your level, or someone else's",
        level,
        options=[
            CommandOption("user", "Member to look up", discord.SlashCommandOptionType.user, required=False),
        ],
    ),
    slash_command("leaderboard", "Show the members with the most XP", leaderboard),
]
