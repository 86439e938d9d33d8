"""
Plain data types shared across Guildcord.

- **discord_datatypes.py**: Snowflake wrappers (``UserID``, ``GuildID``, ...)
- **interaction_datatypes.py**: Interaction kind, acknowledgement state and dispatch outcome enums
- **command_datatypes.py**: Command and button descriptors plus slash-command schema helpers
- **level_datatypes.py**: Level-up / level-down event payloads
"""
