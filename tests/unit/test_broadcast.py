"""
Unit tests untuk Namespace Broadcaster.
"""

import pytest
import asyncio
from clusterutils.communication.pool import LocalPool
from clusterutils.communication.remote_call import Expr, RemoteCall
from clusterutils.sync.broadcast import bind_remote, broadcast, broadcast_from
from clusterutils.sync.errors import RemoteCallError, UnboundNameError
from clusterutils.sync.exchange import reap, sow


@pytest.fixture
def pool():
    return LocalPool.with_workers([1, 2, 3])


def lookup(pool, worker_id, name, namespace='main'):
    return pool.worker(worker_id).namespaces.get(namespace).lookup(name)


@pytest.mark.asyncio
async def test_bind_remote_single_target_returns_task(pool):
    task = bind_remote(pool, 2, 'answer', 42)

    assert isinstance(task, asyncio.Task)
    assert await task is None
    assert lookup(pool, 2, 'answer') == 42

    with pytest.raises(UnboundNameError):
        lookup(pool, 1, 'answer')


@pytest.mark.asyncio
async def test_bind_remote_many_targets_does_not_wait(pool):
    tasks = bind_remote(pool, [1, 3], 'answer', 'yes')

    assert len(tasks) == 2
    await pool.await_all(tasks)
    assert lookup(pool, 1, 'answer') == 'yes'
    assert lookup(pool, 3, 'answer') == 'yes'


@pytest.mark.asyncio
async def test_read_after_write_sees_latest_binding(pool):
    await bind_remote(pool, 2, 'x', 1)
    await bind_remote(pool, 2, 'x', 2)

    assert await pool.call(2, RemoteCall("read", name='x')) == 2


@pytest.mark.asyncio
async def test_expr_is_evaluated_per_target(pool):
    """1000 - myid di setiap worker"""
    result = await sow(pool, [1, 2, 3], 'countdown', Expr("scaled_id", factor=-1, offset=1000))

    assert result.ok
    reaped = await reap(pool, [1, 2, 3], 'countdown')
    assert reaped.results == {1: 999, 2: 998, 3: 997}


@pytest.mark.asyncio
async def test_bound_values_are_copies(pool):
    await sow(pool, [1, 2], 'items', [1, 2, 3])

    lookup(pool, 1, 'items').append(4)

    assert lookup(pool, 2, 'items') == [1, 2, 3]


@pytest.mark.asyncio
async def test_custom_namespace(pool):
    await bind_remote(pool, 1, 'x', 'scratch', namespace='scratch')

    assert lookup(pool, 1, 'x', namespace='scratch') == 'scratch'
    assert 'x' not in pool.worker(1).namespaces.get('main')


@pytest.mark.asyncio
async def test_broadcast_to_all_workers(pool):
    result = await broadcast(pool, 'config', {'lr': 0.1})

    assert sorted(result.results) == [1, 2, 3]
    for worker_id in (1, 2, 3):
        assert lookup(pool, worker_id, 'config') == {'lr': 0.1}


@pytest.mark.asyncio
async def test_broadcast_from_worker(pool):
    result = await broadcast_from(pool, 2, 'seed', Expr("worker_id"))

    assert result.ok
    assert sorted(result.results) == [1, 2, 3]
    assert [lookup(pool, w, 'seed') for w in (1, 2, 3)] == [1, 2, 3]


@pytest.mark.asyncio
async def test_broadcast_with_unreachable_worker(pool):
    pool.disconnect(3)

    result = await broadcast(pool, 'x', 1)

    assert sorted(result.results) == [1, 2]
    assert result.failed_workers == {3}


@pytest.mark.asyncio
async def test_unbind_removes_binding(pool):
    await pool.await_all(bind_remote(pool, [1, 2], 'answer', 42))

    assert await pool.call(2, RemoteCall("unbind", name='answer')) is True
    assert await pool.call(2, RemoteCall("unbind", name='answer')) is False

    with pytest.raises(UnboundNameError):
        lookup(pool, 2, 'answer')
    assert lookup(pool, 1, 'answer') == 42


@pytest.mark.asyncio
async def test_message_dict_built_on_each_worker(pool):
    """Expr message_dict: setiap worker membuat dictionary dengan key semua worker"""
    await sow(pool, None, 'msgs', Expr("message_dict", name='msgs', fill=0.0, value_type='float'))

    for worker_id in (1, 2, 3):
        msgs = lookup(pool, worker_id, 'msgs')
        assert msgs == {1: 0.0, 2: 0.0, 3: 0.0}
        assert msgs.value_type is float

    with pytest.raises(TypeError):
        lookup(pool, 1, 'msgs')[1] = 'not a number'


@pytest.mark.asyncio
async def test_unknown_remote_function(pool):
    with pytest.raises(RemoteCallError):
        await pool.call(1, RemoteCall("no_such_function"))


def test_bind_remote_rejects_invalid_targets(pool):
    with pytest.raises(ValueError):
        bind_remote(pool, [], 'x', 1)
    with pytest.raises(ValueError):
        bind_remote(pool, 0, 'x', 1)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
