"""
Command and button plugins.

Each plugin module exports ``COMMANDS`` and/or ``BUTTONS``. The tuples below
are the complete, statically known list of plugins loaded at startup;
adding a plugin means importing it here.

- **general.py**: /ping, /level, /leaderboard
- **admin.py**: /blacklist, /whitelist, /tempban, /setxp
- **verification.py**: /verify-panel and the ``verify`` button
"""

from guildcord.commands import admin, general, verification

COMMAND_PLUGINS = (general, admin, verification)
BUTTON_PLUGINS = (verification,)
