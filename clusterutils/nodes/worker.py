"""
Worker: executor untuk remote calls di atas NamespaceStore milik sendiri.

Class ini tidak tahu soal transport. LocalPool memanggilnya langsung,
WorkerNode memanggilnya dari HTTP handler.
"""

import inspect
import logging
import socket
from typing import Any, Optional

from .namespace import DEFAULT_NAMESPACE, Namespace, NamespaceStore
from .registry import get_remote_function
from . import functions  # noqa: F401  (register builtin remote functions)
from ..communication.remote_call import Expr, RemoteCall
from ..sync.errors import ClusterError, RemoteCallError

logger = logging.getLogger(__name__)


class WorkerContext:
    """
    Context yang diterima setiap remote function.
    Berisi identity worker, namespace store, dan pool untuk fetch ke peers.
    """

    def __init__(self, worker: 'Worker', pool: Any):
        self.worker = worker
        self.pool = pool

    @property
    def worker_id(self) -> int:
        return self.worker.worker_id

    @property
    def hostname(self) -> str:
        return self.worker.hostname

    def namespace(self, namespace: str = DEFAULT_NAMESPACE) -> Namespace:
        return self.worker.namespaces.get(namespace)

    def lookup(self, name: str, namespace: str = DEFAULT_NAMESPACE) -> Any:
        return self.namespace(namespace).lookup(name)

    async def evaluate(self, value: Any) -> Any:
        """Evaluate Expr di worker ini; value biasa dikembalikan apa adanya"""
        if isinstance(value, Expr):
            return await self.worker.execute(value, self.pool)
        return value


class Worker:
    """Satu addressable worker process"""

    def __init__(self, worker_id: int, hostname: Optional[str] = None):
        """
        Args:
            worker_id: Unique positive ID untuk worker
            hostname: Host identity (default: hostname mesin ini)
        """
        if worker_id < 1:
            raise ValueError(f"worker id must be positive, got {worker_id}")

        self.worker_id = worker_id
        self.hostname = hostname or socket.gethostname()
        self.namespaces = NamespaceStore(worker_id)

        # Statistics
        self.calls_executed = 0
        self.calls_failed = 0

    async def execute(self, call: RemoteCall, pool: Any) -> Any:
        """
        Jalankan registered remote function.

        Raises:
            RemoteCallError: jika function tidak dikenal atau raise exception
            ClusterError: error domain (misal UnboundNameError) diteruskan apa adanya
        """
        try:
            fn = get_remote_function(call.fn)
        except KeyError:
            self.calls_failed += 1
            raise RemoteCallError(self.worker_id, call.fn, "unknown remote function") from None

        logger.debug(f"Worker {self.worker_id}: executing {call}")

        try:
            result = fn(WorkerContext(self, pool), **call.kwargs)
            if inspect.isawaitable(result):
                result = await result
        except ClusterError:
            self.calls_failed += 1
            raise
        except Exception as e:
            self.calls_failed += 1
            logger.error(f"Worker {self.worker_id}: {call.fn} raised {type(e).__name__}: {e}")
            raise RemoteCallError(self.worker_id, call.fn, f"{type(e).__name__}: {e}") from e

        self.calls_executed += 1
        return result

    def get_stats(self):
        return {
            'worker_id': self.worker_id,
            'hostname': self.hostname,
            'calls_executed': self.calls_executed,
            'calls_failed': self.calls_failed,
            'namespaces': self.namespaces.describe(),
        }

    def __repr__(self):
        return f"Worker({self.worker_id}, host={self.hostname})"
