"""
Fan-out / fan-in helpers.

Pattern yang dipakai semua operation: submit ke semua target secara
back-to-back, lalu satu barrier (gather) yang mengumpulkan hasil dan
exception per target secara eksplisit.
"""

import logging
from typing import Any, Iterable, List, Optional, Union

from .errors import TotalFailure
from .results import ExchangeResult, Failure, check_total_failure
from ..communication.remote_call import RemoteCall
from ..utils.metrics import metrics

logger = logging.getLogger(__name__)


def participant_list(participants: Iterable[int]) -> List[int]:
    """
    Normalize participants: unique, urutan dipertahankan.
    Raise ValueError jika kosong atau ada id yang tidak valid.
    """
    if isinstance(participants, int):
        participants = [participants]

    seen = []
    for worker_id in participants:
        if isinstance(worker_id, bool) or not isinstance(worker_id, int) or worker_id < 1:
            raise ValueError(f"invalid worker id {worker_id!r}")
        if worker_id not in seen:
            seen.append(worker_id)

    if not seen:
        raise ValueError("participant set must not be empty")
    return seen


def resolve_targets(pool: Any, targets: Optional[Union[int, Iterable[int]]]) -> List[int]:
    """targets=None berarti semua worker di pool"""
    if targets is None:
        worker_ids = pool.worker_ids()
        if not worker_ids:
            raise TotalFailure([], "pool has no workers")
        return list(worker_ids)
    return participant_list(targets)


async def fan_out(pool: Any,
                  targets: List[int],
                  call: RemoteCall,
                  operation: str,
                  timeout: Optional[float] = None) -> ExchangeResult:
    """Submit `call` ke semua targets, tunggu semua, pisahkan hasil dan failures"""
    tasks = pool.submit_many(targets, call, timeout)
    responses = await pool.await_all(tasks)

    result = ExchangeResult(operation)
    for worker_id, response in zip(targets, responses):
        if isinstance(response, BaseException):
            result.failures.append(Failure.from_exception(worker_id, operation, response))
        else:
            result.results[worker_id] = response

    logger.debug(f"{operation}: {len(result.results)}/{len(targets)} targets succeeded")
    return result


def finish(result: ExchangeResult, attempted: int, counted: Optional[List[Failure]] = None) -> ExchangeResult:
    """
    Record failures ke metrics dan raise TotalFailure jika tidak ada yang reachable.
    `counted` adalah failures yang dihitung untuk total failure (default: semua).
    """
    metrics.record_failures(result.operation, result.failures)
    check_total_failure(result.operation, attempted, result.failures if counted is None else counted)
    return result
