"""
Namespace Broadcaster: bind value (atau hasil Expr) ke name di namespace worker.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Union

from .errors import ClusterError
from .fanout import fan_out, finish, participant_list, resolve_targets
from .results import ExchangeResult, Failure
from ..communication.remote_call import RemoteCall
from ..utils.config import Config

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = Config.DEFAULT_NAMESPACE


def bind_remote(pool: Any,
                targets: Union[int, Iterable[int]],
                name: str,
                value: Any,
                namespace: str = DEFAULT_NAMESPACE,
                timeout: Optional[float] = None) -> Union[asyncio.Task, List[asyncio.Task]]:
    """
    Bind `value` ke `name` di namespace setiap target.

    Jika `value` adalah Expr, value di-evaluate di target dengan context
    target itu sendiri. Tidak menunggu hasil: return Task (satu target)
    atau list of Tasks. Caller yang butuh barrier harus await sendiri.
    """
    call = RemoteCall("bind", name=name, value=value, namespace=namespace)

    if isinstance(targets, int):
        participant_list([targets])
        return pool.submit(targets, call, timeout)

    return pool.submit_many(participant_list(targets), call, timeout)


async def broadcast(pool: Any,
                    name: str,
                    value: Any,
                    namespace: str = DEFAULT_NAMESPACE,
                    timeout: Optional[float] = None) -> ExchangeResult:
    """Bind ke semua worker di pool dan tunggu sampai semua selesai"""
    targets = resolve_targets(pool, None)
    call = RemoteCall("bind", name=name, value=value, namespace=namespace)

    result = await fan_out(pool, targets, call, "broadcast", timeout)
    logger.info(f"Broadcast {name!r} to {len(targets)} workers, {len(result.results)} successful")
    return finish(result, len(targets))


async def broadcast_from(pool: Any,
                         worker_id: int,
                         name: str,
                         value: Any,
                         namespace: str = DEFAULT_NAMESPACE,
                         timeout: Optional[float] = None) -> ExchangeResult:
    """
    Minta `worker_id` melakukan broadcast ke semua worker yang dia kenal.
    Failures dari sisi worker dikembalikan ke controller.
    """
    timeout = pool.default_timeout if timeout is None else timeout
    call = RemoteCall("broadcast", name=name, value=value, namespace=namespace, timeout=timeout)
    outer_timeout = 2 * timeout if timeout else None

    result = ExchangeResult("broadcast_from")
    try:
        report = await pool.call(worker_id, call, outer_timeout)
    except ClusterError as e:
        result.failures.append(Failure.from_exception(worker_id, "broadcast_from", e))
        return finish(result, 1)

    result.results = {target: None for target in report['bound']}
    result.failures = [Failure.from_dict(f) for f in report['failures']]
    return finish(result, len(result.results) + len(result.failures))
