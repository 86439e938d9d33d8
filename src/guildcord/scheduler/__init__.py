"""
Timed work on the asyncio loop.

- **delayed_task_queue.py**: Keyed min-heap of one-shot callbacks with a
  single runner task; backs both cooldown expiry and scheduled unbans.
- **unban_scheduler.py**: Lifts temporary bans when they expire and removes
  their rows from ``temporary_bans``.
"""
