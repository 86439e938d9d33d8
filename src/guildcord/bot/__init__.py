"""
py-cord integration for Guildcord.

- **services.py**: The collaborators handed to handlers as ``ctx.services``.
- **command_sync.py**: Upserts the registered slash-command schemas to the guild.
- **cogs/**: Listeners forwarding py-cord events to the router, the level
  bridge and the startup routines.
"""
