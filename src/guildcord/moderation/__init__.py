"""
Moderation collaborators called by the event router and the admin commands.

- **url_filter.py**: Deletes messages carrying links that are not on the URL whitelist.
- **auto_unban.py**: Applies temporary bans and restores their unban jobs at startup.
"""
