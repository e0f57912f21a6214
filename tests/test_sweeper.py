"""Tests for the expired-code sweeper worker."""

from unittest.mock import AsyncMock, patch

import pytest

from src.infrastructure.code_store import RedisCodeStore
from src.workers import sweeper


@pytest.mark.asyncio
async def test_cycle_purges_expired_codes(code_store, clock):
    await code_store.issue("+8801711111111", ttl_seconds=10)
    await code_store.issue("+8801722222222", ttl_seconds=600)
    clock.advance(60)

    with patch(
        "src.workers.sweeper.get_code_store", AsyncMock(return_value=code_store)
    ):
        removed = await sweeper.run_sweep_cycle()

    assert removed == 1
    assert len(code_store) == 1


@pytest.mark.asyncio
async def test_cycle_is_noop_for_redis():
    store = RedisCodeStore(AsyncMock())
    with patch("src.workers.sweeper.get_code_store", AsyncMock(return_value=store)):
        assert await sweeper.run_sweep_cycle() == 0


@pytest.mark.asyncio
async def test_start_and_stop_loop(code_store):
    with patch(
        "src.workers.sweeper.get_code_store", AsyncMock(return_value=code_store)
    ):
        await sweeper.start_sweep_loop()
        await sweeper.stop_sweep_loop()
    assert sweeper._task.done()
