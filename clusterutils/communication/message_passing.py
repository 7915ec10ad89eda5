"""
Message passing layer untuk controller <-> worker communication.
Menggunakan aiohttp untuk async HTTP communication.
"""

import asyncio
import time
import aiohttp
from typing import Dict, Any, Optional
from enum import Enum
import logging

from ..sync.errors import UnreachableWorker, WorkerTimeout

logger = logging.getLogger(__name__)


class MessageType(Enum):
    """Tipe-tipe message dalam sistem"""
    # Remote execution
    EXECUTE = "execute"
    EXECUTE_RESPONSE = "execute_response"

    # Heartbeat
    HEARTBEAT = "heartbeat"
    HEARTBEAT_RESPONSE = "heartbeat_response"


class Message:
    """
    Class untuk represent message yang dikirim antar nodes.
    """

    def __init__(self,
                 msg_type: MessageType,
                 sender_id: int,
                 data: Optional[Dict[str, Any]] = None):
        """
        Args:
            msg_type: Tipe message
            sender_id: ID pengirim (0 untuk controller)
            data: Payload data
        """
        self.msg_type = msg_type
        self.sender_id = sender_id
        self.data = data or {}
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert message ke dictionary untuk JSON serialization"""
        return {
            'msg_type': self.msg_type.value,
            'sender_id': self.sender_id,
            'data': self.data,
            'timestamp': self.timestamp
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Message':
        """Create message dari dictionary"""
        message = cls(
            msg_type=MessageType(data['msg_type']),
            sender_id=data['sender_id'],
            data=data.get('data', {})
        )
        message.timestamp = data.get('timestamp', message.timestamp)
        return message

    def __repr__(self):
        return f"Message({self.msg_type.value}, from={self.sender_id})"


class MessagePassing:
    """
    Class untuk handle sending dan receiving messages.
    Menggunakan aiohttp untuk async HTTP communication.
    """

    def __init__(self, node_id: int, request_timeout: Optional[float] = None):
        """
        Args:
            node_id: ID pengirim (worker id, atau 0 untuk controller)
            request_timeout: Total timeout per HTTP request (None = tanpa batas)
        """
        self.node_id = node_id
        self.request_timeout = request_timeout
        self.session: Optional[aiohttp.ClientSession] = None

        # Statistics
        self.messages_sent = 0
        self.messages_received = 0
        self.failed_sends = 0

    async def initialize(self):
        """Initialize HTTP client session"""
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.request_timeout)
        )
        logger.info(f"MessagePassing initialized for node {self.node_id}")

    async def close(self):
        """Close HTTP client session"""
        if self.session:
            await self.session.close()
            self.session = None
        logger.info(f"MessagePassing closed for node {self.node_id}")

    async def send_message(self,
                           target_id: int,
                           target_address: str,
                           message: Message) -> Dict[str, Any]:
        """
        Send message ke target worker.

        Args:
            target_id: Worker id target (untuk error reporting)
            target_address: Format "host:port"
            message: Message object to send

        Returns:
            Response JSON dari target

        Raises:
            UnreachableWorker: jika connection gagal atau response bukan JSON
            WorkerTimeout: jika request timeout
        """
        if not self.session:
            await self.initialize()

        url = f"http://{target_address}/api/message"

        try:
            async with self.session.post(url, json=message.to_dict()) as response:
                if response.status == 200:
                    self.messages_sent += 1
                    result = await response.json()
                    logger.debug(f"Sent {message.msg_type.value} to {target_address}")
                    return result
                else:
                    body = await response.text()
                    logger.warning(f"Failed to send message to {target_address}: {response.status}")
                    self.failed_sends += 1
                    raise UnreachableWorker(
                        target_id, f"worker {target_id} answered HTTP {response.status}: {body[:200]}"
                    )

        except asyncio.TimeoutError:
            logger.warning(f"Timeout sending message to {target_address}")
            self.failed_sends += 1
            raise WorkerTimeout(target_id, self.request_timeout)

        except aiohttp.ClientError as e:
            logger.error(f"Error sending message to {target_address}: {e}")
            self.failed_sends += 1
            raise UnreachableWorker(target_id, f"worker {target_id} at {target_address}: {e}") from e

    async def broadcast_message(self,
                                peer_addresses: Dict[int, str],
                                message: Message) -> Dict[int, Optional[Dict[str, Any]]]:
        """
        Broadcast message ke multiple workers secara parallel.

        Args:
            peer_addresses: Mapping worker id -> "host:port"
            message: Message to broadcast

        Returns:
            Mapping worker id -> response (None untuk failed sends)
        """
        # Gunakan asyncio.gather untuk parallel sending
        worker_ids = list(peer_addresses)
        tasks = [
            self.send_message(worker_id, peer_addresses[worker_id], message)
            for worker_id in worker_ids
        ]

        # Wait for all tasks to complete
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        # Convert exceptions to None
        results: Dict[int, Optional[Dict[str, Any]]] = {
            worker_id: r if not isinstance(r, Exception) else None
            for worker_id, r in zip(worker_ids, responses)
        }

        logger.info(f"Broadcast {message.msg_type.value} to {len(worker_ids)} workers, "
                    f"{sum(1 for r in results.values() if r is not None)} successful")

        return results

    def get_stats(self) -> Dict[str, int]:
        """Get message passing statistics"""
        return {
            'messages_sent': self.messages_sent,
            'messages_received': self.messages_received,
            'failed_sends': self.failed_sends
        }
