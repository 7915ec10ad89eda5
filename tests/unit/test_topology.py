"""
Unit tests untuk Topology Discovery.
"""

import pytest
from clusterutils.communication.pool import LocalPool
from clusterutils.sync.errors import TotalFailure
from clusterutils.sync.topology import (
    Scope, all_hosts, describe_workers, discover, local_only, local_workers, remote_only
)


HOSTS = {2: 'node-a', 3: 'node-b', 4: 'node-a', 5: 'node-c', 6: 'controller'}


@pytest.fixture
def cluster():
    return LocalPool.with_workers(sorted(HOSTS), hosts=HOSTS, controller_host='controller')


@pytest.mark.asyncio
async def test_single_host_gives_one_group():
    """Semua worker di satu host -> satu HostGroup"""
    pool = LocalPool.with_workers([3, 2, 4], controller_host='box')

    topology = await discover(pool)

    assert len(topology) == 1
    group = topology.groups[0]
    assert group.host == 'box'
    assert group.members == [2, 3, 4]
    assert group.representative == 2
    assert topology.as_dict() == {2: [2, 3, 4]}


@pytest.mark.asyncio
async def test_groups_partition_all_workers(cluster):
    topology = await discover(cluster)

    assert len(topology) == 4
    assert topology.hosts == ['controller', 'node-a', 'node-b', 'node-c']

    members = [w for group in topology.values() for w in group]
    assert sorted(members) == sorted(HOSTS)
    assert len(members) == len(set(members))

    assert topology[2] == [2, 4]
    assert topology.group_for(4).representative == 2
    for group in topology.groups:
        assert group.representative in group.members


@pytest.mark.asyncio
async def test_remote_only_filter(cluster):
    topology = await discover(cluster, host_filter=remote_only('controller'))

    assert 'controller' not in topology.hosts
    assert len(topology) == 3


@pytest.mark.asyncio
async def test_describe_workers_scopes(cluster):
    remote = await describe_workers(cluster, Scope.REMOTE)
    local = await describe_workers(cluster, Scope.LOCAL)
    everything = await describe_workers(cluster, Scope.ALL)

    assert remote.keys() == [2, 3, 5]
    assert local.as_dict() == {6: [6]}
    assert len(everything) == len(remote) + len(local)


@pytest.mark.asyncio
async def test_local_workers(cluster):
    assert await local_workers(cluster) == [6]

    remote_pool = LocalPool.with_workers([2, 3], hosts={2: 'x', 3: 'y'}, controller_host='controller')
    assert await local_workers(remote_pool) == []


@pytest.mark.asyncio
async def test_unreachable_worker_is_excluded(cluster):
    cluster.disconnect(3)

    topology = await discover(cluster)

    assert 'node-b' not in topology.hosts
    assert topology.group_for(3) is None
    assert [f.target for f in topology.failures] == [3]
    assert topology.failures[0].kind == 'unreachable'


@pytest.mark.asyncio
async def test_all_unreachable_is_total_failure(cluster):
    for worker_id in HOSTS:
        cluster.disconnect(worker_id)

    with pytest.raises(TotalFailure):
        await discover(cluster)


@pytest.mark.asyncio
async def test_empty_pool_is_total_failure():
    with pytest.raises(TotalFailure):
        await discover(LocalPool())


@pytest.mark.asyncio
async def test_custom_host_query():
    """Output seperti command `hostname` (dengan newline) di-strip"""
    pool = LocalPool.with_workers([1, 2, 3])

    def query(worker_id):
        return 'even\n' if worker_id % 2 == 0 else 'odd\n'

    topology = await discover(pool, host_query=query)

    assert topology.as_dict() == {2: [2], 1: [1, 3]}
    assert topology.hosts == ['even', 'odd']


@pytest.mark.asyncio
async def test_subset_of_workers(cluster):
    topology = await discover(cluster, worker_ids=[4, 5], host_filter=all_hosts)

    assert topology.as_dict() == {4: [4], 5: [5]}


def test_filters():
    assert all_hosts('anything')
    assert remote_only('me')('other')
    assert not remote_only('me')('me')
    assert local_only('me')('me')
    assert not local_only('me')('other')


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
