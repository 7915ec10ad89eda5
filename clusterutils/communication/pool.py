"""
Remote Execution Primitive.

WorkerPool memberi controller satu cara untuk mengirim RemoteCall ke worker
manapun: submit() mengembalikan asyncio.Task tanpa menunggu, call() adalah
submit + wait. Ada dua implementasi:
- LocalPool: workers in-process (testing, single host)
- HttpPool: workers adalah WorkerNode yang diakses via aiohttp
"""

import asyncio
import json
import logging
import socket
import time
from typing import Any, Dict, Iterable, List, Optional, Set

from .codec import decode, encode, encode_call
from .message_passing import Message, MessagePassing, MessageType
from .remote_call import RemoteCall
from ..nodes.worker import Worker
from ..sync.errors import UnreachableWorker, WorkerTimeout, error_from_dict
from ..utils.metrics import metrics

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Base class untuk pool of addressable workers.
    Subclass cukup implement worker_ids() dan _execute().
    """

    def __init__(self, controller_host: Optional[str] = None, default_timeout: Optional[float] = None):
        """
        Args:
            controller_host: Host identity milik controller (default: hostname mesin ini)
            default_timeout: Timeout per remote call jika caller tidak memberi timeout
        """
        self.controller_host = controller_host or socket.gethostname()
        self.default_timeout = default_timeout

    def worker_ids(self) -> List[int]:
        raise NotImplementedError

    async def _execute(self, worker_id: int, call: RemoteCall) -> Any:
        raise NotImplementedError

    def submit(self, worker_id: int, call: RemoteCall, timeout: Optional[float] = None) -> asyncio.Task:
        """Submit call ke satu worker, return Task tanpa menunggu hasilnya"""
        return asyncio.create_task(self._call(worker_id, call, timeout))

    def submit_many(self,
                    worker_ids: Iterable[int],
                    call: RemoteCall,
                    timeout: Optional[float] = None) -> List[asyncio.Task]:
        """Submit call yang sama ke banyak worker secara back-to-back"""
        return [self.submit(worker_id, call, timeout) for worker_id in worker_ids]

    async def await_all(self, tasks: Iterable[asyncio.Future]) -> List[Any]:
        """Barrier: tunggu semua tasks. Exception dikembalikan sebagai value."""
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def call(self, worker_id: int, call: RemoteCall, timeout: Optional[float] = None) -> Any:
        """Blocking call: submit + wait"""
        return await self.submit(worker_id, call, timeout)

    async def _call(self, worker_id: int, call: RemoteCall, timeout: Optional[float]) -> Any:
        if timeout is None:
            timeout = self.default_timeout

        start_time = time.perf_counter()
        status = 'ok'
        try:
            if timeout:
                try:
                    return await asyncio.wait_for(self._execute(worker_id, call), timeout)
                except asyncio.TimeoutError:
                    raise WorkerTimeout(worker_id, timeout) from None
            return await self._execute(worker_id, call)
        except Exception as e:
            status = type(e).__name__
            logger.debug(f"{call.fn} on worker {worker_id} failed: {e}")
            raise
        finally:
            metrics.record_remote_call(call.fn, status, time.perf_counter() - start_time)


class LocalPool(WorkerPool):
    """
    Pool dengan workers di process yang sama.

    Arguments dan hasil tetap melewati wire codec (JSON), jadi setiap worker
    punya copy sendiri, sama seperti di HttpPool. Worker bisa di-disconnect
    untuk simulasi failure.
    """

    def __init__(self,
                 workers: Iterable[Worker] = (),
                 controller_host: Optional[str] = None,
                 default_timeout: Optional[float] = None):
        super().__init__(controller_host, default_timeout)
        self.workers: Dict[int, Worker] = {}
        self._disconnected: Set[int] = set()
        self._hanging: Set[int] = set()

        for worker in workers:
            self.add_worker(worker)

    @classmethod
    def with_workers(cls,
                     worker_ids: Iterable[int],
                     hosts: Optional[Dict[int, str]] = None,
                     controller_host: Optional[str] = None,
                     default_timeout: Optional[float] = None) -> 'LocalPool':
        """
        Create pool dengan satu Worker per id.
        `hosts` memetakan worker id ke host identity (default: controller_host).
        """
        controller_host = controller_host or socket.gethostname()
        hosts = hosts or {}
        workers = [Worker(worker_id, hosts.get(worker_id, controller_host)) for worker_id in worker_ids]
        return cls(workers, controller_host=controller_host, default_timeout=default_timeout)

    def add_worker(self, worker: Worker):
        self.workers[worker.worker_id] = worker
        metrics.set_active_workers(len(self.workers))
        logger.info(f"LocalPool: added worker {worker.worker_id} on {worker.hostname}")

    def remove_worker(self, worker_id: int) -> Optional[Worker]:
        self._disconnected.discard(worker_id)
        self._hanging.discard(worker_id)
        worker = self.workers.pop(worker_id, None)
        metrics.set_active_workers(len(self.workers))
        return worker

    def worker(self, worker_id: int) -> Worker:
        return self.workers[worker_id]

    def disconnect(self, worker_id: int, hang: bool = False):
        """
        Simulasi failure. hang=False: call langsung gagal (UnreachableWorker).
        hang=True: call tidak pernah selesai (hanya berhenti karena timeout).
        """
        (self._hanging if hang else self._disconnected).add(worker_id)
        logger.info(f"LocalPool: worker {worker_id} disconnected (hang={hang})")

    def reconnect(self, worker_id: int):
        self._disconnected.discard(worker_id)
        self._hanging.discard(worker_id)

    def worker_ids(self) -> List[int]:
        return sorted(self.workers)

    async def _execute(self, worker_id: int, call: RemoteCall) -> Any:
        # yield ke event loop, seperti network hop
        await asyncio.sleep(0)

        if worker_id in self._hanging:
            await asyncio.Event().wait()

        worker = self.workers.get(worker_id)
        if worker is None or worker_id in self._disconnected:
            raise UnreachableWorker(worker_id)

        result = await worker.execute(_over_wire(call), self)
        return _over_wire(result)


def _over_wire(value: Any) -> Any:
    """Encode -> JSON -> decode, supaya tidak ada object yang di-share by reference"""
    return decode(json.loads(json.dumps(encode(value))))


class HttpPool(WorkerPool):
    """
    Pool dengan workers yang berjalan sebagai WorkerNode (aiohttp server).
    """

    def __init__(self,
                 addresses: Dict[int, str],
                 message_passing: Optional[MessagePassing] = None,
                 sender_id: int = 0,
                 controller_host: Optional[str] = None,
                 default_timeout: Optional[float] = None):
        """
        Args:
            addresses: Mapping worker id -> "host:port"
            message_passing: MessagePassing yang dipakai (dibuat baru jika None)
            sender_id: ID pengirim di setiap Message (0 untuk controller)
        """
        super().__init__(controller_host, default_timeout)
        self.addresses = dict(addresses)
        self.sender_id = sender_id
        self.mp = message_passing or MessagePassing(sender_id)
        self._owns_mp = message_passing is None

    def worker_ids(self) -> List[int]:
        return sorted(self.addresses)

    async def _execute(self, worker_id: int, call: RemoteCall) -> Any:
        address = self.addresses.get(worker_id)
        if address is None:
            raise UnreachableWorker(worker_id, f"worker {worker_id} has no known address")

        message = Message(
            msg_type=MessageType.EXECUTE,
            sender_id=self.sender_id,
            data={'call': encode_call(call)}
        )
        response = await self.mp.send_message(worker_id, address, message)

        if response.get('status') == 'ok':
            return decode(response.get('result'))

        raise error_from_dict(response)

    async def alive_workers(self) -> List[int]:
        """Heartbeat ke semua worker, return id yang menjawab"""
        message = Message(msg_type=MessageType.HEARTBEAT, sender_id=self.sender_id)
        responses = await self.mp.broadcast_message(self.addresses, message)
        alive = sorted(worker_id for worker_id, response in responses.items() if response is not None)
        metrics.set_active_workers(len(alive))
        return alive

    async def close(self):
        if self._owns_mp:
            await self.mp.close()

    async def __aenter__(self) -> 'HttpPool':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
