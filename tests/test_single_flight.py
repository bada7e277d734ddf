"""Tests for SingleFlightLock acquisition, timeout and release."""

import asyncio

import pytest

from fwtargets.exceptions import LockTimeoutError
from fwtargets.single_flight import SingleFlightLock

pytestmark = [pytest.mark.unit, pytest.mark.core]


@pytest.mark.asyncio
class TestSingleFlightLock:
    async def test_exclusive_runs_body_and_releases(self):
        lock = SingleFlightLock()
        async with lock.exclusive(100):
            assert lock.locked()
        assert not lock.locked()

    async def test_release_after_exception(self):
        lock = SingleFlightLock()
        with pytest.raises(ValueError):
            async with lock.exclusive(100):
                raise ValueError("boom")
        assert not lock.locked()

    async def test_timeout_does_not_run_body(self):
        lock = SingleFlightLock()
        await lock.acquire(100)
        ran = False
        with pytest.raises(LockTimeoutError) as exc_info:
            async with lock.exclusive(10):
                ran = True
        assert ran is False
        assert exc_info.value.timeout_ms == 10
        lock.release()

    async def test_lock_usable_after_timeout(self):
        lock = SingleFlightLock()
        await lock.acquire(100)
        with pytest.raises(LockTimeoutError):
            await lock.acquire(10)
        lock.release()

        await lock.acquire(100)
        assert lock.locked()
        lock.release()
        assert not lock.locked()

    async def test_waiter_acquires_when_released(self):
        lock = SingleFlightLock()
        await lock.acquire(100)

        async def waiter():
            async with lock.exclusive(1000):
                return "ran"

        task = asyncio.create_task(waiter())
        await asyncio.sleep(0.01)
        assert not task.done()
        lock.release()
        assert await task == "ran"
        assert not lock.locked()

    async def test_cancelled_waiter_leaves_lock_free(self):
        lock = SingleFlightLock()
        await lock.acquire(100)

        task = asyncio.create_task(lock.acquire(5000))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        lock.release()
        assert not lock.locked()
        await lock.acquire(100)
        lock.release()

    async def test_cancelled_holder_releases(self):
        lock = SingleFlightLock()
        entered = asyncio.Event()

        async def holder():
            async with lock.exclusive(100):
                entered.set()
                await asyncio.sleep(10)

        task = asyncio.create_task(holder())
        await entered.wait()
        assert lock.locked()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not lock.locked()

    async def test_bodies_never_overlap(self):
        lock = SingleFlightLock()
        active = 0
        max_active = 0

        async def body():
            nonlocal active, max_active
            async with lock.exclusive(1000):
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(*(body() for _ in range(5)))
        assert max_active == 1
