"""
Exchange Protocol untuk Message Dictionaries.

- sow:     install value/Expr ke namespace setiap target
- reap:    baca name dari setiap target
- swap:    all-to-all refresh, setiap participant pull entry milik participant lain
- collect: many-to-one, satu worker (atau controller) pull entry dari semua source

Tidak ada lock atau snapshot global. Setelah swap selesai tanpa failure,
copy di setiap participant konsisten pairwise dengan value yang di-fetch,
tetapi mutation lokal selama swap bisa terlihat oleh sebagian participant saja.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import ClusterError, TotalFailure, UnreachableWorker
from .fanout import fan_out, finish, participant_list, resolve_targets
from .results import ExchangeResult, Failure
from ..communication.remote_call import Expr, RemoteCall
from ..utils.config import Config
from ..utils.metrics import measure_time

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = Config.DEFAULT_NAMESPACE


async def sow(pool: Any,
              targets: Optional[Iterable[int]],
              name: str,
              value: Any,
              namespace: str = DEFAULT_NAMESPACE,
              timeout: Optional[float] = None) -> ExchangeResult:
    """
    Bind value ke `name` di setiap target dan tunggu semua selesai.

    Jika value adalah Expr, setiap target meng-evaluate dengan identity-nya
    sendiri, misalnya Expr("scaled_id", factor=2) menghasilkan 2 * worker_id.
    targets=None berarti semua worker di pool.
    """
    targets = resolve_targets(pool, targets)
    call = RemoteCall("bind", name=name, value=value, namespace=namespace)

    with measure_time("sow"):
        result = await fan_out(pool, targets, call, "sow", timeout)

    return finish(result, len(targets))


async def reap(pool: Any,
               targets: Optional[Iterable[int]],
               name: str,
               namespace: str = DEFAULT_NAMESPACE,
               timeout: Optional[float] = None) -> ExchangeResult:
    """
    Baca `name` dari setiap target secara concurrent.

    Target yang gagal (unbound name, unreachable) tidak muncul di results,
    tetapi dicatat di failures. Tidak ada default value yang disubstitusi.
    """
    targets = resolve_targets(pool, targets)
    call = RemoteCall("read", name=name, namespace=namespace)

    with measure_time("reap"):
        result = await fan_out(pool, targets, call, "reap", timeout)

    return finish(result, len(targets))


async def fetch_entries(pool: Any,
                        name: str,
                        sources: List[int],
                        namespace: str = DEFAULT_NAMESPACE,
                        timeout: Optional[float] = None,
                        operation: str = "fetch",
                        target: Optional[int] = None) -> Tuple[Dict[int, Any], List[Failure]]:
    """
    Fetch dict[j] dari copy milik j untuk setiap j di sources.

    Dipakai oleh controller (collect ke controller) dan oleh worker
    (refresh saat swap, collect ke worker). `target` adalah worker yang
    menerima entries, untuk failure reporting.
    """
    call = RemoteCall("read_entry", name=name, namespace=namespace)
    tasks = pool.submit_many(sources, call, timeout)
    responses = await pool.await_all(tasks)

    entries: Dict[int, Any] = {}
    failures: List[Failure] = []
    for source, response in zip(sources, responses):
        if isinstance(response, BaseException):
            failures.append(Failure.from_exception(target, operation, response, source=source))
        else:
            entries[source] = response

    return entries, failures


async def swap(pool: Any,
               participants: Iterable[int],
               name: str,
               namespace: str = DEFAULT_NAMESPACE,
               timeout: Optional[float] = None) -> ExchangeResult:
    """
    All-to-all refresh dari Message Dictionary `name`.

    Setiap participant p di-instruksikan (concurrently) untuk fetch dict[j]
    dari setiap participant j lain dan menyimpannya di copy lokal p.
    Instruksi ke p selesai setelah semua fetch milik p selesai, dan swap
    return setelah semua participant selesai.

    Returns:
        ExchangeResult dengan results[p] = copy milik p setelah refresh.
        Fetch yang gagal dicatat sebagai Failure(target=p, source=j);
        participant yang tidak bisa di-instruksikan sebagai Failure(target=p).
    """
    participants = participant_list(participants)
    timeout = pool.default_timeout if timeout is None else timeout
    call = RemoteCall("refresh_entries", name=name, namespace=namespace,
                      participants=participants, timeout=timeout)

    # fetch di dalam refresh butuh sampai `timeout`, instruksi luar diberi ruang lebih
    outer_timeout = 2 * timeout if timeout else None

    with measure_time("swap"):
        instructed = await fan_out(pool, participants, call, "swap", outer_timeout)

    result = ExchangeResult("swap", failures=list(instructed.failures))
    for participant, report in instructed.results.items():
        result.results[participant] = report['entries']
        result.failures.extend(Failure.from_dict(f) for f in report['failures'])

    logger.info(f"Swapped {name!r} across {len(participants)} participants, "
                f"{len(result.failures)} failures")

    # total failure hanya jika tidak ada participant yang bisa di-instruksikan
    return finish(result, len(participants), counted=instructed.failures)


async def collect(pool: Any,
                  name: str,
                  sources: Iterable[int],
                  into: Optional[int] = None,
                  namespace: str = DEFAULT_NAMESPACE,
                  timeout: Optional[float] = None) -> ExchangeResult:
    """
    Many-to-one reduction: kumpulkan dict[j] dari setiap source.

    into=None: controller membaca langsung dari setiap source.
    into=worker id: worker tersebut fetch dan fold entries ke copy lokalnya.

    Returns:
        ExchangeResult dengan results keyed by source yang berhasil di-fetch.
    """
    sources = participant_list(sources)
    timeout = pool.default_timeout if timeout is None else timeout

    if into is None:
        with measure_time("collect"):
            entries, failures = await fetch_entries(
                pool, name, sources, namespace, timeout, operation="collect"
            )
        return finish(ExchangeResult("collect", entries, failures), len(sources))

    call = RemoteCall("collect_entries", name=name, namespace=namespace,
                      sources=sources, timeout=timeout)
    outer_timeout = 2 * timeout if timeout else None

    try:
        with measure_time("collect"):
            report = await pool.call(into, call, outer_timeout)
    except UnreachableWorker as e:
        failure = Failure.from_exception(into, "collect", e)
        logger.error(f"collect: target worker {into} unreachable: {e}")
        raise TotalFailure([failure], f"collect: target worker {into} unreachable") from e
    except ClusterError as e:
        # target reachable tapi tidak bisa collect (misalnya name belum di-sow di sana)
        logger.warning(f"collect: target worker {into} failed: {e}")
        result = ExchangeResult("collect", failures=[Failure.from_exception(into, "collect", e)])
        return finish(result, len(sources))

    result = ExchangeResult(
        "collect",
        report['entries'],
        [Failure.from_dict(f) for f in report['failures']],
    )
    return finish(result, len(sources))


def collect_refs(pool: Any,
                 expr: Expr,
                 targets: Optional[Iterable[int]] = None,
                 timeout: Optional[float] = None) -> Dict[int, asyncio.Task]:
    """
    Evaluate `expr` di setiap target. Return Tasks yang belum di-await,
    keyed by worker id (contoh: Expr("read_entry", name="msgs")).
    """
    targets = resolve_targets(pool, targets)
    return {worker_id: pool.submit(worker_id, expr, timeout) for worker_id in targets}
