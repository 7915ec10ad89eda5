"""Synchronization package initialization"""

from .errors import (
    ClusterError,
    PartialFailure,
    RemoteCallError,
    TotalFailure,
    UnboundNameError,
    UnreachableWorker,
    WorkerTimeout,
)
from .results import ExchangeResult, Failure
from .message_dict import MessageDictionary
from .topology import (
    HostGroup,
    Scope,
    Topology,
    all_hosts,
    describe_workers,
    discover,
    local_only,
    local_workers,
    remote_only,
)
from .broadcast import bind_remote, broadcast, broadcast_from
from .exchange import collect, collect_refs, reap, sow, swap
from .timing import mean_duration, mean_duration_async

__all__ = [
    'ClusterError', 'PartialFailure', 'RemoteCallError', 'TotalFailure',
    'UnboundNameError', 'UnreachableWorker', 'WorkerTimeout',
    'ExchangeResult', 'Failure', 'MessageDictionary',
    'HostGroup', 'Scope', 'Topology', 'all_hosts', 'describe_workers',
    'discover', 'local_only', 'local_workers', 'remote_only',
    'bind_remote', 'broadcast', 'broadcast_from',
    'collect', 'collect_refs', 'reap', 'sow', 'swap',
    'mean_duration', 'mean_duration_async',
]
