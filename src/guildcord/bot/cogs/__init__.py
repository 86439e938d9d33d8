"""
Cogs for the Guildcord bot.

Each module defines a cog class and a ``setup`` function registering it with
the bot. The cogs are loaded explicitly in main.py; nothing is discovered
dynamically.

- **events_listener.py**: on_ready (restores unban jobs, logs the session, sets presence)
- **interaction_listener.py**: on_interaction / on_message into the event router
- **level_listener.py**: on_level_up / on_level_down into the level bridge
"""
