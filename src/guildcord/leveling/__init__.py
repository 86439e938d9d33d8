"""
Chat XP and levels.

- **leveling_system.py**: Awards XP for chat messages, persists it, and
  raises ``level_up`` / ``level_down`` events when a member's level changes.
"""
