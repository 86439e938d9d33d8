"""Collaborators reachable from command and button handlers through ``ctx.services``."""

from __future__ import annotations

from dataclasses import dataclass

import discord

from guildcord.configuration.app_configuration import AppConfig
from guildcord.core.membership_store import MembershipStore
from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.leveling.leveling_system import LevelingSystem
from guildcord.scheduler.unban_scheduler import UnbanScheduler


@dataclass
class BotServices:
    bot: discord.Bot
    config: AppConfig
    membership: MembershipStore
    leveling: LevelingSystem
    unban_scheduler: UnbanScheduler
    connection_manager: ConnectionManager = db_connection
