"""
Presentation helpers.

- **embeds.py**: Warning / success / info embeds for interaction replies.
"""
