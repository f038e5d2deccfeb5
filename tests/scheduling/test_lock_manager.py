"""Tests for ScheduleLockPool."""

import asyncio

import pytest


class TestScheduleLockPool:
    """Per-schedule serialization."""

    @pytest.mark.asyncio
    async def test_same_id_is_serialized(self, lock_pool):
        events = []

        async def worker(name):
            async with lock_pool.hold(1):
                events.append(f"{name}-in")
                await asyncio.sleep(0.02)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_different_ids_run_concurrently(self, lock_pool):
        inside = 0
        peak = 0

        async def worker(schedule_id):
            nonlocal inside, peak
            async with lock_pool.hold(schedule_id):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.02)
                inside -= 1

        await asyncio.gather(worker(1), worker(2), worker(3))

        assert peak == 3

    @pytest.mark.asyncio
    async def test_is_locked(self, lock_pool):
        assert lock_pool.is_locked(5) is False
        async with lock_pool.hold(5):
            assert lock_pool.is_locked(5) is True
        assert lock_pool.is_locked(5) is False

    @pytest.mark.asyncio
    async def test_idle_locks_are_discarded(self, lock_pool):
        async with lock_pool.hold(1):
            async with lock_pool.hold(2):
                assert len(lock_pool) == 2
        assert len(lock_pool) == 0

    @pytest.mark.asyncio
    async def test_lock_released_on_error(self, lock_pool):
        with pytest.raises(RuntimeError):
            async with lock_pool.hold(1):
                raise RuntimeError("boom")

        assert len(lock_pool) == 0
        async with lock_pool.hold(1):
            assert lock_pool.is_locked(1)
