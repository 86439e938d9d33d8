"""
SQLite persistence for Guildcord.

- **db_connection.py**: Single long-lived aiosqlite connection with
  serialised write transactions.
- **db_schema.py**: Table and index creation (blacklist, url_whitelist,
  temporary_bans, member_levels, schema_version).
- **database.py**: Startup/shutdown coordinator; a failed initialization
  leaves the bot running without persistence.
"""
