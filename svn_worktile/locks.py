"""Reader-writer lock for asyncio tasks."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ReadWriteLock:
    """
    Many concurrent readers or one writer.

    Waiting writers take priority over new readers, so a steady stream of
    lookups cannot starve a cache insertion or a token refresh. The lock is
    not reentrant and cannot be upgraded: release the read side before taking
    the write side.

    Example:
        ```python
        lock = ReadWriteLock()

        async with lock.reader():
            value = shared.get(key)

        async with lock.writer():
            shared[key] = value
        ```
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        """Number of tasks currently holding the read side."""
        return self._readers

    @property
    def write_locked(self) -> bool:
        """True while a task holds the write side."""
        return self._writer

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[None]:
        """Hold the lock shared with other readers."""
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._writers_waiting == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def writer(self) -> AsyncIterator[None]:
        """Hold the lock exclusively."""
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._writers_waiting -= 1
                # Readers parked behind a cancelled writer must re-check.
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()
