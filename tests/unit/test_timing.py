"""
Unit tests untuk Timing Utility.
"""

import pytest
import asyncio
import time
from clusterutils.communication.pool import LocalPool
from clusterutils.sync.exchange import sow, swap
from clusterutils.sync.message_dict import MessageDictionary
from clusterutils.sync.timing import mean_duration, mean_duration_async


def test_mean_duration_single_run():
    calls = []

    mean = mean_duration(1, lambda: calls.append(1))

    assert calls == [1]
    assert mean >= 0.0


def test_mean_duration_fixed_cost():
    mean = mean_duration(5, lambda: time.sleep(0.01))

    assert 0.009 <= mean < 0.1


def test_mean_duration_rejects_invalid_repetitions():
    with pytest.raises(ValueError):
        mean_duration(0, lambda: None)
    with pytest.raises(ValueError):
        mean_duration(-3, lambda: None)


@pytest.mark.asyncio
async def test_mean_duration_async_runs_sequentially():
    """Setiap run harus selesai sebelum run berikutnya dimulai"""
    running = 0
    max_running = 0
    runs = 0

    async def operation():
        nonlocal running, max_running, runs
        running += 1
        max_running = max(max_running, running)
        await asyncio.sleep(0.005)
        running -= 1
        runs += 1

    mean = await mean_duration_async(4, operation)

    assert runs == 4
    assert max_running == 1
    assert mean >= 0.004


@pytest.mark.asyncio
async def test_mean_duration_of_swap():
    pool = LocalPool.with_workers([1, 2, 3, 4])
    await sow(pool, None, 'msgs', MessageDictionary.zeros('msgs', [1, 2, 3, 4]))

    mean = await mean_duration_async(3, lambda: swap(pool, [1, 2, 3, 4], 'msgs'), label='swap')

    assert mean > 0.0


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
