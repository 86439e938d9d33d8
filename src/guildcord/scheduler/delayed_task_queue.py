"""
Keyed delayed-task queue running on the asyncio loop.

A single background runner sleeps until the earliest job is due, then calls
its callback. Jobs are keyed: scheduling a key that already has a pending
job replaces it. Cancelled jobs stay in the heap until they reach the top
and are skipped there, which keeps ``cancel`` O(1).
"""

from __future__ import annotations

import asyncio
import heapq
import inspect
from typing import Awaitable, Callable, Dict, Hashable, Optional, Tuple, Union

from guildcord.util.logger import get_logger

logger = get_logger("delayed_task_queue")

JobCallback = Callable[[], Union[Awaitable[None], None]]


class DelayedTaskQueue:
    """
    Min-heap scheduler for callbacks that should run once after a delay.

    ``schedule`` and ``cancel`` are synchronous so callers can update their
    own state and the queue in one step without yielding to the loop.

    Attributes:
        name (str): Name given to the runner task, shown in task dumps.
        heap (list): Min-heap of ``(run_at, job_id)`` tuples in loop time.
        jobs (Dict): Live jobs, ``job_id -> (key, callback)``.
        pending_keys (Dict): ``key -> job_id`` of the live job for that key.
        runner_task (asyncio.Task | None): Background task draining the heap.
    """

    def __init__(self, name: str = "guildcord-delayed-tasks") -> None:
        self.name = name
        self.heap: list[tuple[float, int]] = []
        self.jobs: Dict[int, Tuple[Hashable, JobCallback]] = {}
        self.pending_keys: Dict[Hashable, int] = {}
        self.counter: int = 0
        self.runner_task: Optional[asyncio.Task[None]] = None
        self.wakeup: asyncio.Event = asyncio.Event()
        self.closed: bool = False

    def __len__(self) -> int:
        return len(self.pending_keys)

    def is_pending(self, key: Hashable) -> bool:
        return key in self.pending_keys

    def ensure_runner(self) -> None:
        """Start the runner task if it is not already running."""
        if self.runner_task is None or self.runner_task.done():
            loop = asyncio.get_running_loop()
            self.runner_task = loop.create_task(self.run(), name=self.name)

    def schedule(self, key: Hashable, delay_seconds: float, callback: JobCallback) -> int:
        """
        Run ``callback`` once after ``delay_seconds``, replacing any pending job for ``key``.

        Must be called from inside the running event loop.

        Returns:
            int: Identifier of the new job.

        Raises:
            RuntimeError: If the queue has been shut down.
        """
        if self.closed:
            raise RuntimeError(f"{self.name} has been shut down")

        loop = asyncio.get_running_loop()
        run_at = loop.time() + max(0.0, delay_seconds)
        self.ensure_runner()

        previous = self.pending_keys.get(key)
        if previous is not None:
            self.jobs.pop(previous, None)

        self.counter += 1
        job_id = self.counter
        heapq.heappush(self.heap, (run_at, job_id))
        self.jobs[job_id] = (key, callback)
        self.pending_keys[key] = job_id
        self.wakeup.set()
        return job_id

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending job for ``key``. Returns False when there was none."""
        job_id = self.pending_keys.pop(key, None)
        if job_id is None:
            return False
        self.jobs.pop(job_id, None)
        self.wakeup.set()
        return True

    async def shutdown(self) -> None:
        """
        Stop the runner and drop every pending job. Safe to call more than once.

        Jobs dropped here never run.
        """
        self.closed = True
        self.heap.clear()
        self.jobs.clear()
        self.pending_keys.clear()

        runner = self.runner_task
        self.runner_task = None
        if runner is not None and not runner.done():
            runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass

    async def run(self) -> None:
        """Background loop: sleep until the earliest live job is due, then run it."""
        loop = asyncio.get_running_loop()
        while True:
            # Skip over cancelled or replaced jobs at the top of the heap
            while self.heap and self.heap[0][1] not in self.jobs:
                heapq.heappop(self.heap)

            if not self.heap:
                self.wakeup.clear()
                await self.wakeup.wait()
                continue

            run_at, job_id = self.heap[0]
            delay = run_at - loop.time()
            if delay > 0:
                self.wakeup.clear()
                try:
                    await asyncio.wait_for(self.wakeup.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
                continue

            heapq.heappop(self.heap)
            key, callback = self.jobs.pop(job_id)
            if self.pending_keys.get(key) == job_id:
                del self.pending_keys[key]

            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[%s] Delayed job for %r failed", self.name, key)
