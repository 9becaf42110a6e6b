"""
Utility functions for OCPP compliance and background task bookkeeping.
"""

import asyncio
from datetime import datetime, timezone

from loguru import logger


def utc_now_iso():
    """
    Get current UTC time in ISO format with Z suffix for OCPP compliance.

    Returns:
        str: Current UTC time in ISO format with Z suffix (e.g., "2024-01-01T12:00:00.123456Z")
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class TaskGroup:
    """
    Keeps strong references to fire-and-forget tasks and logs their failures.

    asyncio only holds weak references to running tasks, so a task nobody
    keeps a handle on can disappear mid-flight.
    """

    def __init__(self, name):
        self.name = name
        self._tasks = set()

    def spawn(self, coro, description=None):
        name = description or getattr(coro, "__name__", "task")
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[{self.name}] {task.get_name()} failed: {error!r}")

    def cancel_all(self):
        for task in list(self._tasks):
            task.cancel()

    def __len__(self):
        return len(self._tasks)
