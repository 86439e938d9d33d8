"""
Shared utilities for Guildcord.

- **logger.py**: Coloured prompt_toolkit console output plus a per-session
  rotating log file under ``./logs``. Every module obtains its logger through
  :func:`get_logger`.
"""
