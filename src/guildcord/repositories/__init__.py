"""
Row-level access to the Guildcord tables.

Each repository is a set of static coroutines taking an open aiosqlite
connection, so callers choose between ``db_connection.read()`` and
``db_connection.transaction()``.
"""
