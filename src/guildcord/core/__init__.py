"""
Guildcord's event core.

- **event_router.py**: Classifies interactions, applies the cooldown and
  blacklist gates to slash commands, dispatches to handlers and converts
  handler failures into one generic notice. Also fans messages out to the
  message hooks.
- **interaction_context.py**: Per-interaction wrapper tracking the
  acknowledgement state (unacknowledged / replied / deferred).
- **cooldown_tracker.py**: Per-user cooldown set with scheduled expiry.
- **membership_store.py**: In-memory blacklist and URL whitelist loaded at startup.
- **registry.py**: Command and button registries filled from static plugin modules.
- **level_bridge.py**: Grants and revokes level roles on level-up / level-down.
- **errors.py**: Exception hierarchy.
"""
