"""
Builtin remote functions yang tersedia di setiap worker.

Semua function menerima WorkerContext `ctx` sebagai argument pertama.
Function yang async (refresh_entries, collect_entries, broadcast) memakai
ctx.pool untuk fetch ke peers.
"""

import logging
from typing import Any, Iterable, List, Optional

from .namespace import DEFAULT_NAMESPACE
from .registry import remote_function
from ..sync.exchange import fetch_entries
from ..sync.fanout import fan_out
from ..sync.message_dict import VALUE_TYPES, MessageDictionary
from ..sync.results import Failure
from ..communication.remote_call import RemoteCall

logger = logging.getLogger(__name__)


# Namespace access

@remote_function("bind")
async def bind(ctx, name: str, value: Any, namespace: str = DEFAULT_NAMESPACE) -> None:
    ctx.namespace(namespace).bind(name, await ctx.evaluate(value))


@remote_function("read")
def read(ctx, name: str, namespace: str = DEFAULT_NAMESPACE) -> Any:
    return ctx.lookup(name, namespace)


@remote_function("unbind")
def unbind(ctx, name: str, namespace: str = DEFAULT_NAMESPACE) -> bool:
    return ctx.namespace(namespace).unbind(name)


@remote_function("read_entry")
def read_entry(ctx, name: str, key: Optional[int] = None, namespace: str = DEFAULT_NAMESPACE) -> Any:
    """dict[key] dari copy lokal; default key = worker ini sendiri"""
    return ctx.lookup(name, namespace)[ctx.worker_id if key is None else key]


@remote_function("set_entry")
async def set_entry(ctx, name: str, value: Any, namespace: str = DEFAULT_NAMESPACE) -> Any:
    """Update entry milik worker ini sendiri (value boleh Expr)"""
    value = await ctx.evaluate(value)
    ctx.lookup(name, namespace)[ctx.worker_id] = value
    return value


# Identity & expressions

@remote_function("hostname")
def hostname(ctx) -> str:
    return ctx.hostname


@remote_function("worker_id")
def worker_id(ctx) -> int:
    return ctx.worker_id


@remote_function("scaled_id")
def scaled_id(ctx, factor: float = 1, offset: float = 0) -> float:
    """offset + factor * worker_id, contoh factor=-1, offset=1000 -> 1000 - id"""
    return offset + factor * ctx.worker_id


@remote_function("message_dict")
def message_dict(ctx,
                 name: str,
                 keys: Optional[Iterable[int]] = None,
                 fill: Any = 0,
                 value_type: Optional[str] = None) -> MessageDictionary:
    """MessageDictionary baru dengan semua entry = fill (default keys: semua worker di pool)"""
    if keys is None:
        keys = ctx.pool.worker_ids()
    return MessageDictionary.zeros(name, keys, fill, value_type=VALUE_TYPES.get(value_type))


# Exchange protocol (sisi worker)

def _fold(ctx, local: Any, entries: dict, operation: str) -> List[Failure]:
    """
    Fold fetched entries ke copy lokal. Entry yang ditolak copy (misalnya
    value type tidak cocok) dilaporkan per source dan tidak di-apply;
    entry lain tetap di-apply.
    """
    staged = local.copy()
    failures: List[Failure] = []
    for source in list(entries):
        try:
            staged[source] = entries[source]
        except (TypeError, ValueError) as e:
            failures.append(Failure.from_exception(ctx.worker_id, operation, e, source=source))
            del entries[source]

    for source, value in entries.items():
        local[source] = value
    return failures


@remote_function("refresh_entries")
async def refresh_entries(ctx,
                          name: str,
                          participants: List[int],
                          namespace: str = DEFAULT_NAMESPACE,
                          timeout: Optional[float] = None) -> dict:
    """
    Bagian swap yang berjalan di satu participant:
    fetch dict[j] dari setiap participant lain lalu overwrite entry lokal.
    """
    local = ctx.lookup(name, namespace)
    peers = [j for j in participants if j != ctx.worker_id]

    entries, failures = await fetch_entries(
        ctx.pool, name, peers, namespace, timeout, operation="swap", target=ctx.worker_id
    )
    failures.extend(_fold(ctx, local, entries, "swap"))

    if failures:
        logger.warning(f"Worker {ctx.worker_id}: refresh of {name!r} missed {[f.source for f in failures]}")

    return {'entries': local, 'failures': [f.to_dict() for f in failures]}


@remote_function("collect_entries")
async def collect_entries(ctx,
                          name: str,
                          sources: List[int],
                          namespace: str = DEFAULT_NAMESPACE,
                          timeout: Optional[float] = None) -> dict:
    """Bagian collect yang berjalan di worker `into`"""
    local = ctx.lookup(name, namespace)
    peers = [j for j in sources if j != ctx.worker_id]

    entries, failures = await fetch_entries(
        ctx.pool, name, peers, namespace, timeout, operation="collect", target=ctx.worker_id
    )
    if ctx.worker_id in sources:
        entries[ctx.worker_id] = local[ctx.worker_id]
    failures.extend(_fold(ctx, local, entries, "collect"))

    return {'entries': entries, 'failures': [f.to_dict() for f in failures]}


@remote_function("broadcast")
async def broadcast(ctx,
                    name: str,
                    value: Any,
                    namespace: str = DEFAULT_NAMESPACE,
                    timeout: Optional[float] = None) -> dict:
    """Broadcast dari worker ini ke semua worker yang dia kenal"""
    targets = ctx.pool.worker_ids()
    call = RemoteCall("bind", name=name, value=value, namespace=namespace)
    result = await fan_out(ctx.pool, targets, call, "broadcast_from", timeout)

    logger.info(f"Worker {ctx.worker_id}: broadcast {name!r} to {len(targets)} workers")
    return {
        'bound': sorted(result.results),
        'failures': [f.to_dict() for f in result.failures],
    }
