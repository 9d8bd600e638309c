"""
Async read/write lock for the file backend cache.
"""
import asyncio
from contextlib import asynccontextmanager


class ReadWriteLock:
    """
    Many concurrent readers or one exclusive writer.

    Writers are preferred: once a writer is waiting, new readers wait until
    it has finished, so a steady stream of reads cannot starve a mutation.

    Example:
        >>> lock = ReadWriteLock()
        >>> async with lock.read():
        ...     snapshot = list(items)
        >>> async with lock.write():
        ...     items.append(item)
    """

    def __init__(self):
        self._cond = None
        self._loop = None
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def _condition(self) -> asyncio.Condition:
        """Condition bound to the running event loop.

        A lock may outlive the loop it was first used on (one ``asyncio.run``
        per command), so the condition is rebuilt when the loop changes. Holders
        from a finished loop cannot release, so their counts are dropped.
        """
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._cond = asyncio.Condition()
            self._loop = loop
            self._readers = 0
            self._writer = False
            self._waiting_writers = 0
        return self._cond

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    def _can_read(self) -> bool:
        return not self._writer and not self._waiting_writers

    def _can_write(self) -> bool:
        return not self._writer and not self._readers

    @asynccontextmanager
    async def read(self):
        """Hold the lock shared for the duration of the block."""
        cond = self._condition()
        async with cond:
            await cond.wait_for(self._can_read)
            self._readers += 1
        try:
            yield
        finally:
            async with cond:
                self._readers -= 1
                if not self._readers:
                    cond.notify_all()

    @asynccontextmanager
    async def write(self):
        """Hold the lock exclusively for the duration of the block."""
        cond = self._condition()
        async with cond:
            self._waiting_writers += 1
            try:
                await cond.wait_for(self._can_write)
            except BaseException:
                # Readers held back by this writer may proceed again
                self._waiting_writers -= 1
                cond.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with cond:
                self._writer = False
                cond.notify_all()
