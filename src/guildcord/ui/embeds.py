"""
One-line notice embeds used for replies to interactions.

Each is a coloured bar, an emoji and the message.
"""

import datetime

import discord

WARNING_COLOR = discord.Color.gold()
SUCCESS_COLOR = discord.Color.green()
INFO_COLOR = discord.Color.blurple()


def warning(description: str) -> discord.Embed:
    """Yellow embed for refusals and failures."""
    return discord.Embed(description=f"⚠️ {description}", color=WARNING_COLOR)


def success(description: str) -> discord.Embed:
    """Green embed confirming that an action went through."""
    return discord.Embed(description=f"✅ {description}", color=SUCCESS_COLOR)


def info(title: str, description: str = "") -> discord.Embed:
    """Neutral embed with a title, timestamped now."""
    return discord.Embed(
        title=title,
        description=description,
        color=INFO_COLOR,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
