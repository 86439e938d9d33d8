"""Event listener Cog for Guildcord.

Handles the bot lifecycle: restoring scheduled unbans on the first
``on_ready``, logging the session details and setting the presence.
"""

import datetime

import discord
from discord.ext import commands

from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.moderation.auto_unban import load_unbans
from guildcord.scheduler.unban_scheduler import UnbanScheduler
from guildcord.util.logger import get_logger

logger = get_logger("events_listener_cog")

SEPARATOR = "-" * 115
PRESENCE_TEXT = "(/) commands!"


def invite_url(client_id: int) -> str:
    return (
        "https://discord.com/api/oauth2/authorize"
        f"?client_id={client_id}&permissions=8&scope=bot%20applications.commands"
    )


class EventsListenerCog(commands.Cog):
    """Cog containing the bot lifecycle handlers."""

    def __init__(
        self,
        discord_bot_instance,
        unban_scheduler: UnbanScheduler,
        connection_manager: ConnectionManager = db_connection,
    ):
        self.bot = discord_bot_instance
        self.unban_scheduler = unban_scheduler
        self.connection_manager = connection_manager
        self.unbans_loaded = False
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Restore unban jobs once per process, then log the session and set the presence.

        ``on_ready`` fires again after every gateway resume that needs a full
        reconnect, so the unban restore is guarded.
        """
        if not self.unbans_loaded:
            self.unbans_loaded = True
            await load_unbans(self.bot, self.unban_scheduler, connection_manager=self.connection_manager)

        if self.bot.user:
            logger.info(SEPARATOR)
            logger.info("[READY] Logged in as %s (%s)", self.bot.user, self.bot.user.id)
            logger.info("[READY] Login at %s", datetime.datetime.now().astimezone().isoformat(timespec="seconds"))
            logger.info("[READY] Invite URL: %s", invite_url(self.bot.user.id))
            logger.info(SEPARATOR)
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        await self.bot.change_presence(
            activity=discord.Activity(type=discord.ActivityType.listening, name=PRESENCE_TEXT)
        )


def setup(discord_bot_instance, unban_scheduler: UnbanScheduler, connection_manager: ConnectionManager = db_connection):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, unban_scheduler, connection_manager))
