"""Deferred task schedulers.

``publish`` and ``subscribe`` never deliver inline; handlers hand their
dispatch work to a scheduler that runs it on a later turn.  Both
implementations satisfy the ``Scheduler`` port.
"""

from __future__ import annotations

import asyncio
from collections import deque

import structlog

from simplemq.domain.ports import Task

logger = structlog.get_logger(__name__)


class ManualScheduler:
    """FIFO task queue drained explicitly by the host.

    Tasks scheduled while another task runs go to the back of the queue,
    so ``run_until_idle`` also runs work scheduled by earlier tasks.
    """

    def __init__(self) -> None:
        self._tasks: deque[Task] = deque()

    def schedule(self, task: Task) -> None:
        self._tasks.append(task)

    @property
    def pending(self) -> int:
        """Number of tasks waiting to run."""
        return len(self._tasks)

    def run_next(self) -> bool:
        """Run the oldest task. Returns False if there was nothing to run."""
        if not self._tasks:
            return False
        task = self._tasks.popleft()
        task()
        return True

    def run_until_idle(self, max_steps: int | None = None) -> int:
        """Run tasks until none are left (or *max_steps* ran). Returns the count."""
        steps = 0
        while self._tasks and (max_steps is None or steps < max_steps):
            self.run_next()
            steps += 1
        if steps:
            logger.debug("scheduler.drained", steps=steps, remaining=len(self._tasks))
        return steps


class AsyncioScheduler:
    """Schedules tasks with ``loop.call_soon`` on an asyncio event loop.

    Without an explicit *loop* the running loop is looked up on every
    ``schedule`` call, so it must be called from inside a coroutine.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(self, task: Task) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon(task)
