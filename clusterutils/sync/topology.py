"""
Topology Discovery: kelompokkan worker berdasarkan host tempat mereka berjalan.

length(topology) memberi jumlah host unik, keys() memberi satu representative
per host, values() memberi semua worker di host tersebut.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .errors import WorkerTimeout
from .fanout import finish, resolve_targets
from .results import ExchangeResult, Failure
from ..communication.remote_call import RemoteCall
from ..utils.metrics import measure_time

logger = logging.getLogger(__name__)

HostFilter = Callable[[str], bool]


@dataclass
class HostGroup:
    """Worker-worker yang berada di satu host"""
    host: str
    representative: int
    members: List[int]

    def __repr__(self):
        return f"HostGroup({self.host}, rep={self.representative}, members={self.members})"


@dataclass
class Topology:
    """
    Mapping representative -> members, satu entry per host.
    Worker yang host-nya gagal di-query dicatat di `failures`.
    """
    groups: List[HostGroup] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)

    def __len__(self):
        return len(self.groups)

    def __iter__(self) -> Iterator[int]:
        return iter(self.keys())

    def __getitem__(self, representative: int) -> List[int]:
        for group in self.groups:
            if group.representative == representative:
                return group.members
        raise KeyError(representative)

    def __contains__(self, representative) -> bool:
        return any(group.representative == representative for group in self.groups)

    def keys(self) -> List[int]:
        return [group.representative for group in self.groups]

    def values(self) -> List[List[int]]:
        return [group.members for group in self.groups]

    def items(self):
        return [(group.representative, group.members) for group in self.groups]

    @property
    def hosts(self) -> List[str]:
        return [group.host for group in self.groups]

    def group_for(self, worker_id: int) -> Optional[HostGroup]:
        for group in self.groups:
            if worker_id in group.members:
                return group
        return None

    def as_dict(self) -> Dict[int, List[int]]:
        return dict(self.items())


class Scope(Enum):
    """Host mana yang ikut di describe_workers()"""
    REMOTE = 0  # semua host kecuali host controller
    LOCAL = 1   # hanya host controller
    ALL = 2


def all_hosts(host: str) -> bool:
    return True


def remote_only(controller_host: str) -> HostFilter:
    """Filter yang membuang host milik controller"""
    def is_remote(host: str) -> bool:
        return host != controller_host
    return is_remote


def local_only(controller_host: str) -> HostFilter:
    """Filter yang hanya menerima host milik controller"""
    def is_local(host: str) -> bool:
        return host == controller_host
    return is_local


async def _query_host(host_query: Callable, worker_id: int, timeout: Optional[float]) -> str:
    result = host_query(worker_id)
    if inspect.isawaitable(result):
        if timeout:
            try:
                result = await asyncio.wait_for(result, timeout)
            except asyncio.TimeoutError:
                raise WorkerTimeout(worker_id, timeout) from None
        else:
            result = await result
    return result


async def discover(pool: Any,
                   worker_ids: Optional[Iterable[int]] = None,
                   host_filter: HostFilter = all_hosts,
                   host_query: Optional[Callable[[int], Any]] = None,
                   timeout: Optional[float] = None) -> Topology:
    """
    Query host identity setiap worker secara concurrent lalu group by host.

    Args:
        pool: WorkerPool
        worker_ids: Worker yang di-query (default: semua worker di pool)
        host_filter: Predicate untuk host name; host yang gagal dibuang
        host_query: Custom query worker_id -> host name (sync atau async).
            Default: remote function "hostname" di setiap worker.
        timeout: Timeout per query

    Members diurutkan berdasarkan worker id, representative = member pertama
    (id terkecil). Groups diurutkan berdasarkan host name.
    """
    ids = sorted(resolve_targets(pool, worker_ids))

    with measure_time("discover"):
        if host_query is None:
            tasks = pool.submit_many(ids, RemoteCall("hostname"), timeout)
        else:
            tasks = [asyncio.create_task(_query_host(host_query, w, timeout)) for w in ids]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

    queried = ExchangeResult("discover")
    for worker_id, response in zip(ids, responses):
        if isinstance(response, BaseException):
            queried.failures.append(Failure.from_exception(worker_id, "discover", response))
        else:
            queried.results[worker_id] = str(response).strip()

    finish(queried, len(ids))

    by_host: Dict[str, List[int]] = {}
    for worker_id in ids:
        host = queried.results.get(worker_id)
        if host is not None:
            by_host.setdefault(host, []).append(worker_id)

    topology = Topology(failures=queried.failures)
    for host in sorted(by_host):
        if not host_filter(host):
            continue
        members = by_host[host]
        topology.groups.append(HostGroup(host=host, representative=members[0], members=members))

    logger.info(f"Discovered {len(topology)} hosts for {len(queried.results)} workers "
                f"({len(queried.failures)} unreachable)")
    return topology


async def describe_workers(pool: Any, scope: Scope = Scope.REMOTE, timeout: Optional[float] = None) -> Topology:
    """
    Topology dari semua worker di pool.
    scope=REMOTE: host selain host controller, LOCAL: host controller, ALL: semua.
    """
    if scope == Scope.REMOTE:
        host_filter = remote_only(pool.controller_host)
    elif scope == Scope.LOCAL:
        host_filter = local_only(pool.controller_host)
    else:
        host_filter = all_hosts
    return await discover(pool, host_filter=host_filter, timeout=timeout)


async def local_workers(pool: Any, timeout: Optional[float] = None) -> List[int]:
    """Worker yang berjalan di host yang sama dengan controller"""
    topology = await describe_workers(pool, Scope.LOCAL, timeout)
    if not topology.groups:
        return []
    return topology.groups[0].members
