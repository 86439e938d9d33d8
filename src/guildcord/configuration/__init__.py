"""
Configuration management for Guildcord.

- **app_configuration.py**: YAML configuration loader for global settings:
  bot identity (application, guild, owner), command cooldown, the level-up
  announcement channel, level role thresholds, the verified role, XP tuning,
  URL filter toggle and database location. Falls back to defaults when the
  file is missing or malformed.

- **xp_settings.py**: Typed wrapper around the ``xp`` block.
"""
