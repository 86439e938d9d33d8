"""
Per-user command cooldowns.

A user id present in the tracker is on cooldown; nothing else is counted.
Each acquisition schedules its own removal on a :class:`DelayedTaskQueue`
owned by the tracker, so every pending expiry is cancelled at shutdown.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Union

from guildcord.datatypes.discord_datatypes import UserID
from guildcord.scheduler.delayed_task_queue import DelayedTaskQueue
from guildcord.util.logger import get_logger

logger = get_logger("cooldown_tracker")

UserLike = Union[UserID, int, str]


class CooldownTracker:
    """
    Set of user ids currently rate-limited, with self-expiring entries.

    ``try_acquire`` is synchronous: the membership check and the insert
    happen without yielding to the event loop, so two interactions from the
    same user can never both acquire a window.

    Attributes:
        clock (Callable[[], float]): Monotonic seconds; injectable for tests.
        queue (DelayedTaskQueue): Owns the expiry timers.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        queue: DelayedTaskQueue | None = None,
    ) -> None:
        self.clock = clock
        self.queue = queue or DelayedTaskQueue(name="guildcord-cooldowns")
        self._deadlines: Dict[UserID, float] = {}

    @property
    def active_count(self) -> int:
        return len(self._deadlines)

    def is_cooling_down(self, user_id: UserLike) -> bool:
        deadline = self._deadlines.get(UserID(user_id))
        return deadline is not None and self.clock() < deadline

    def try_acquire(self, user_id: UserLike, duration_ms: int) -> bool:
        """
        Start a cooldown window for ``user_id`` unless one is already running.

        Args:
            user_id: The user starting a command.
            duration_ms: Window length in milliseconds.

        Returns:
            bool: True if the window was started, False (with no state change)
            if the user is already cooling down.
        """
        key = UserID(user_id)
        now = self.clock()

        deadline = self._deadlines.get(key)
        if deadline is not None:
            if now < deadline:
                return False
            # Window is over but its timer has not fired yet
            self._release(key, deadline)

        if self.queue.closed:
            # Shutting down: let the command through without starting a window
            return True

        duration_seconds = max(0, duration_ms) / 1000
        new_deadline = now + duration_seconds
        self.queue.schedule(key, duration_seconds, lambda: self._release(key, new_deadline))
        self._deadlines[key] = new_deadline
        return True

    def _release(self, key: UserID, deadline: float) -> None:
        # A stale timer must not remove a newer window
        if self._deadlines.get(key) == deadline:
            del self._deadlines[key]
            self.queue.cancel(key)
            logger.debug("[COOLDOWN] Cooldown expired for %s", key)

    async def shutdown(self) -> None:
        """Cancel every pending expiry and forget all cooldowns."""
        await self.queue.shutdown()
        self._deadlines.clear()
