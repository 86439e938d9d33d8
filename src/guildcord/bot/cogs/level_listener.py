"""Level listener Cog for Guildcord.

Receives the ``level_up`` / ``level_down`` events raised by the leveling
system and hands them to the level bridge.
"""

from discord.ext import commands

from guildcord.core.level_bridge import LevelEventBridge
from guildcord.datatypes.level_datatypes import LevelEvent
from guildcord.util.logger import get_logger

logger = get_logger("level_listener_cog")


class LevelListenerCog(commands.Cog):
    """Cog forwarding level change events to a :class:`LevelEventBridge`."""

    def __init__(self, discord_bot_instance, bridge: LevelEventBridge):
        self.bot = discord_bot_instance
        self.bridge = bridge
        logger.info("Level listener cog loaded")

    @commands.Cog.listener(name="on_level_up")
    async def on_level_up(self, event: LevelEvent):
        await self.bridge.on_level_up(event)

    @commands.Cog.listener(name="on_level_down")
    async def on_level_down(self, event: LevelEvent):
        await self.bridge.on_level_down(event)


def setup(discord_bot_instance, bridge: LevelEventBridge):
    """Register the LevelListenerCog with the bot."""
    discord_bot_instance.add_cog(LevelListenerCog(discord_bot_instance, bridge))
