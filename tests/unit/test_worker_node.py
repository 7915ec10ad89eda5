"""
Integration tests untuk WorkerNode lewat HTTP.
"""

import pytest
from clusterutils.communication.pool import HttpPool
from clusterutils.communication.remote_call import Expr, RemoteCall
from clusterutils.nodes.worker_node import WorkerNode
from clusterutils.sync.exchange import collect, reap, sow, swap
from clusterutils.sync.message_dict import MessageDictionary
from clusterutils.sync.topology import discover


def make_nodes(base_port):
    addresses = {i: f"127.0.0.1:{base_port + i}" for i in (2, 3, 4)}
    hostnames = {2: 'node-a', 3: 'node-a', 4: 'node-b'}
    nodes = [
        WorkerNode(i, '127.0.0.1', base_port + i, addresses, hostname=hostnames[i], timeout=2.0)
        for i in addresses
    ]
    return addresses, nodes


@pytest.mark.asyncio
async def test_swap_over_http():
    """Scenario {2,3,4} dengan worker yang benar-benar berjalan sebagai HTTP server"""
    addresses, nodes = make_nodes(9300)

    for node in nodes:
        await node.start()

    try:
        async with HttpPool(addresses, default_timeout=2.0) as pool:
            assert await pool.alive_workers() == [2, 3, 4]

            installed = await sow(pool, [2, 3, 4], 'msgs', MessageDictionary.zeros('msgs', [2, 3, 4]))
            assert installed.ok

            await pool.await_all(pool.submit_many(
                [2, 3, 4], RemoteCall("set_entry", name='msgs', value=Expr("scaled_id", factor=10))
            ))

            collected = await collect(pool, 'msgs', [2, 3, 4])
            assert collected.results == {2: 20, 3: 30, 4: 40}

            result = await swap(pool, [2, 3, 4], 'msgs')
            assert result.ok
            for worker_id in (2, 3, 4):
                assert result[worker_id] == {2: 20, 3: 30, 4: 40}

            reaped = await reap(pool, [2, 3, 4], 'msgs')
            assert all(copy == {2: 20, 3: 30, 4: 40} for copy in reaped.results.values())
    finally:
        for node in nodes:
            await node.stop()


@pytest.mark.asyncio
async def test_topology_and_failures_over_http():
    addresses, nodes = make_nodes(9310)

    for node in nodes:
        await node.start()

    try:
        async with HttpPool(addresses, default_timeout=2.0) as pool:
            topology = await discover(pool)
            assert topology.as_dict() == {2: [2, 3], 4: [4]}

            await sow(pool, [2, 3, 4], 'msgs', MessageDictionary.zeros('msgs', [2, 3, 4]))

            # name yang tidak ada: UnboundNameError dikirim balik sebagai failure
            missing = await reap(pool, [2, 3], 'nothing')
            assert missing.results == {}
            assert {f.kind for f in missing.failures} == {'unbound'}

            # worker 4 berhenti: swap tetap selesai untuk 2 dan 3
            await nodes[2].stop()
            result = await swap(pool, [2, 3, 4], 'msgs')
            assert sorted(result.results) == [2, 3]
            assert result.failed_workers == {4}
    finally:
        for node in nodes:
            await node.stop()


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
