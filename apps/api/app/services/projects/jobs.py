from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Set, Tuple

from loguru import logger

from app.core.config import settings


class JobRunner:
    """
    Background jobs keyed by project id.

    At most ``workers`` jobs run at once. Work of the same kind for the same
    project (indexing, commit ingestion) runs one call at a time. A job waits
    for its project lock before taking a worker slot, so a queued duplicate
    never occupies a slot other projects could use.
    """

    def __init__(self, workers: int | None = None) -> None:
        self._slots = asyncio.Semaphore(workers or settings.INDEX_WORKERS)
        # key -> (lock, number of holders and waiters)
        self._locks: Dict[Tuple[str, str], Tuple[asyncio.Lock, int]] = {}
        self._tasks: Set[asyncio.Task] = set()

    @asynccontextmanager
    async def project_lock(self, project_id, kind: str) -> AsyncIterator[None]:
        key = (kind, str(project_id))
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    async def run_exclusive(self, project_id, fn: Callable[[], Awaitable[Any]], kind: str = "commits") -> Any:
        async with self.project_lock(project_id, kind):
            return await fn()

    def submit(self, project_id, fn: Callable[[], Awaitable[Any]], kind: str = "index") -> asyncio.Task:
        async def _job():
            async with self.project_lock(project_id, kind):
                async with self._slots:
                    return await fn()

        task = asyncio.create_task(_job(), name=f"{kind}-{project_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Background job {} crashed", task.get_name())

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
