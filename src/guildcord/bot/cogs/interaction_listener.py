"""Interaction listener Cog for Guildcord.

Forwards every interaction and every message to the event router; all
gating and error handling happens there.
"""

import discord
from discord.ext import commands

from guildcord.core.event_router import EventRouter
from guildcord.util.logger import get_logger

logger = get_logger("interaction_listener_cog")


class InteractionListenerCog(commands.Cog):
    """Cog feeding py-cord events into an :class:`EventRouter`."""

    def __init__(self, discord_bot_instance, router: EventRouter):
        self.bot = discord_bot_instance
        self.router = router
        logger.info("Interaction listener cog loaded")

    @commands.Cog.listener(name="on_interaction")
    async def on_interaction(self, interaction: discord.Interaction):
        outcome = await self.router.dispatch_interaction(interaction)
        logger.debug("[ROUTER] Interaction %s finished as %s", interaction.id, outcome.value)

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        await self.router.dispatch_message(message)


def setup(discord_bot_instance, router: EventRouter):
    """Register the InteractionListenerCog with the bot."""
    discord_bot_instance.add_cog(InteractionListenerCog(discord_bot_instance, router))
