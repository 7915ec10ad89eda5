"""
Worker Node: Worker yang bisa diakses lewat HTTP.
Mengintegrasikan Worker executor, message passing ke peers, dan metrics.
"""

import asyncio
import logging
from typing import Dict, Any, Optional
from aiohttp import web

from .worker import Worker
from ..communication.codec import decode_call, encode
from ..communication.message_passing import MessagePassing, Message, MessageType
from ..communication.pool import HttpPool
from ..sync.errors import ClusterError
from ..utils.config import Config
from ..utils.metrics import metrics

logger = logging.getLogger(__name__)


class WorkerNode:
    """
    HTTP wrapper untuk Worker.
    Menyediakan:
    - HTTP API server (/api/message untuk EXECUTE dan HEARTBEAT)
    - HttpPool untuk fetch ke worker lain (swap, collect, broadcast)
    - Status dan Prometheus metrics
    """

    def __init__(self,
                 worker_id: int,
                 host: str,
                 port: int,
                 workers: Dict[int, str],
                 hostname: Optional[str] = None,
                 timeout: Optional[float] = None):
        """
        Args:
            worker_id: Unique ID untuk worker
            host: Bind address
            port: Port number
            workers: Mapping worker id -> "host:port" untuk semua worker (termasuk diri sendiri)
            hostname: Host identity yang dilaporkan ke topology discovery
            timeout: Default timeout untuk fetch ke peers
        """
        self.worker_id = worker_id
        self.host = host
        self.port = port
        self.workers = dict(workers)
        self.workers.setdefault(worker_id, f"{host}:{port}")

        # Initialize components
        self.worker = Worker(worker_id, hostname)
        self.mp = MessagePassing(worker_id)
        self.pool = HttpPool(
            self.workers,
            message_passing=self.mp,
            sender_id=worker_id,
            default_timeout=timeout
        )

        # HTTP server
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

        # Setup routes
        self._setup_routes()

        # Running state
        self._running = False

        logger.info(f"WorkerNode {worker_id} initialized at {host}:{port}")

    @classmethod
    def from_config(cls) -> 'WorkerNode':
        """Create node dari environment configuration"""
        return cls(
            worker_id=Config.WORKER_ID,
            host=Config.WORKER_HOST,
            port=Config.WORKER_PORT,
            workers=Config.get_workers(),
            hostname=Config.WORKER_HOSTNAME or None,
            timeout=Config.get_timeout()
        )

    def _setup_routes(self):
        """Setup HTTP API routes"""
        self.app.router.add_post('/api/message', self.handle_message)
        self.app.router.add_get('/api/status', self.handle_status)
        self.app.router.add_get('/api/metrics', self.handle_metrics)
        self.app.router.add_get('/health', self.handle_health)

    async def start(self):
        """Start node dan semua components"""
        logger.info(f"Starting worker {self.worker_id}...")

        # Initialize message passing
        await self.mp.initialize()

        # Start HTTP server
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        self._running = True
        logger.info(f"Worker {self.worker_id} started successfully at http://{self.host}:{self.port}")

    async def stop(self):
        """Stop node dan cleanup"""
        logger.info(f"Stopping worker {self.worker_id}...")

        self._running = False

        await self.mp.close()

        # Stop HTTP server
        if self.site:
            await self.site.stop()
            self.site = None
        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info(f"Worker {self.worker_id} stopped")

    async def handle_message(self, request: web.Request) -> web.Response:
        """
        Handle incoming messages dari controller atau worker lain.
        """
        try:
            data = await request.json()
            message = Message.from_dict(data)
        except (ValueError, KeyError) as e:
            logger.error(f"Malformed message: {e}")
            return web.json_response({'error': f"malformed message: {e}"}, status=400)

        self.mp.messages_received += 1
        logger.debug(f"Worker {self.worker_id}: Received {message.msg_type.value} from {message.sender_id}")

        try:
            response_data = await self._dispatch_message(message)
            return web.json_response(response_data)

        except Exception as e:
            logger.error(f"Error handling message: {e}")
            return web.json_response({'error': str(e)}, status=500)

    async def _dispatch_message(self, message: Message) -> Dict[str, Any]:
        """Dispatch message ke handler berdasarkan message type"""
        if message.msg_type == MessageType.EXECUTE:
            return await self._handle_execute(message)

        elif message.msg_type == MessageType.HEARTBEAT:
            return {'status': 'ok', 'worker_id': self.worker_id}

        else:
            logger.warning(f"Unknown message type: {message.msg_type}")
            return {'error': 'unknown_message_type'}

    async def _handle_execute(self, message: Message) -> Dict[str, Any]:
        """
        Jalankan RemoteCall. Error domain (UnboundNameError, RemoteCallError)
        dikirim balik sebagai payload supaya bisa di-rebuild di sisi caller.
        """
        call = decode_call(message.data['call'])

        try:
            result = await self.worker.execute(call, self.pool)
        except ClusterError as e:
            return {'status': 'error', **e.to_dict()}

        return {'status': 'ok', 'result': encode(result)}

    async def handle_status(self, request: web.Request) -> web.Response:
        """Get node status"""
        status = {
            'worker_id': self.worker_id,
            'address': f"{self.host}:{self.port}",
            'running': self._running,
            'worker': self.worker.get_stats(),
            'peers': {str(k): v for k, v in self.workers.items()},
            'message_passing': self.mp.get_stats()
        }
        return web.json_response(status)

    async def handle_metrics(self, request: web.Request) -> web.Response:
        """Export Prometheus metrics"""
        metrics_data = metrics.get_metrics()
        return web.Response(body=metrics_data, content_type='text/plain')

    async def handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint"""
        if self._running:
            return web.json_response({'status': 'healthy'})
        else:
            return web.json_response({'status': 'unhealthy'}, status=503)


# Test code
async def test_worker_nodes():
    """Jalankan 3 worker lokal dan lakukan satu swap"""
    from ..communication.remote_call import Expr, RemoteCall
    from ..sync.exchange import sow, swap
    from ..sync.message_dict import MessageDictionary

    addresses = {i: f"localhost:{5100 + i}" for i in range(1, 4)}
    nodes = [WorkerNode(i, 'localhost', 5100 + i, addresses) for i in addresses]

    for node in nodes:
        await node.start()

    async with HttpPool(addresses) as pool:
        await sow(pool, None, 'msgs', MessageDictionary.zeros('msgs', addresses))
        await asyncio.gather(*[
            pool.call(i, RemoteCall("set_entry", name="msgs", value=Expr("scaled_id", factor=10)))
            for i in addresses
        ])
        result = await swap(pool, list(addresses), 'msgs')
        for worker_id, copy in result.results.items():
            print(f"Worker {worker_id}: {copy}")

    for node in nodes:
        await node.stop()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(test_worker_nodes())
