"""Guildcord: a py-cord community bot with gated slash commands, leveling and URL filtering."""

__version__ = "0.1.0"
