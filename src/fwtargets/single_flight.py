"""
Single-flight exclusive access for the target data directory.

A SingleFlightLock allows at most one resolve-and-load sequence at a time
per loader instance. Waiters give up after a bounded timeout, and the lock
is released on every exit path, including cancellation.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fwtargets.constants import DEFAULT_LOCK_TIMEOUT_MS
from fwtargets.exceptions import LockTimeoutError
from fwtargets.log_utils import logger


class SingleFlightLock:
    """Exclusive lock with timed acquisition built on asyncio.Lock."""

    def __init__(self, name: str = "targets") -> None:
        self.name = name
        self._lock = asyncio.Lock()

    def locked(self) -> bool:
        return self._lock.locked()

    async def acquire(self, timeout_ms: float = DEFAULT_LOCK_TIMEOUT_MS) -> None:
        """
        Acquire the lock, waiting at most `timeout_ms` milliseconds.

        Raises:
            LockTimeoutError: the lock was not obtained in time. The lock is
                never left held by this call when it raises.
        """
        waiter = asyncio.ensure_future(self._lock.acquire())
        try:
            done, _ = await asyncio.wait({waiter}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            await self._abandon(waiter)
            raise

        if waiter in done:
            waiter.result()
            logger.debug("Acquired %s lock", self.name)
            return

        await self._abandon(waiter)
        logger.debug("Timed out after %s ms waiting for %s lock", timeout_ms, self.name)
        raise LockTimeoutError(timeout_ms)

    async def _abandon(self, waiter: "asyncio.Future[bool]") -> None:
        # The waiter can win the lock between the deadline and cancel();
        # hand it straight back in that case.
        waiter.cancel()
        try:
            await waiter
        except asyncio.CancelledError:
            return
        self._lock.release()

    def release(self) -> None:
        self._lock.release()
        logger.debug("Released %s lock", self.name)

    @asynccontextmanager
    async def exclusive(
        self, timeout_ms: float = DEFAULT_LOCK_TIMEOUT_MS
    ) -> AsyncIterator[None]:
        """
        Run the enclosed block while holding the lock.

        Example:
            async with lock.exclusive(60000):
                directory = await resolve()
        """
        await self.acquire(timeout_ms)
        try:
            yield
        finally:
            self.release()
