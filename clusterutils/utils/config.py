"""
Configuration manager untuk clusterutils.
File ini membaca environment variables dan menyediakan
konfigurasi default untuk controller dan worker nodes.
"""

import os
from typing import Dict, Optional
from dotenv import load_dotenv

# Load environment variables dari .env file
load_dotenv()


class Config:
    """Class untuk manage semua konfigurasi sistem"""

    # Worker Configuration
    WORKER_ID: int = int(os.getenv('WORKER_ID', 1))
    WORKER_HOST: str = os.getenv('WORKER_HOST', 'localhost')
    WORKER_PORT: int = int(os.getenv('WORKER_PORT', 5001))
    # Host identity yang dilaporkan worker (kosong = hostname mesin)
    WORKER_HOSTNAME: str = os.getenv('WORKER_HOSTNAME', '')

    # Controller Configuration
    CONTROLLER_ID: int = int(os.getenv('CONTROLLER_ID', 0))

    # Remote calls (seconds, 0 = tanpa timeout)
    REMOTE_TIMEOUT: float = float(os.getenv('REMOTE_TIMEOUT', 10))

    DEFAULT_NAMESPACE: str = os.getenv('DEFAULT_NAMESPACE', 'main')

    # Worker table
    @staticmethod
    def get_workers() -> Dict[int, str]:
        """
        Parse worker table dari environment variable.
        Format: "1=host1:port1,2=host2:port2"
        Returns: Mapping worker id -> address
        """
        workers_str = os.getenv('WORKERS', '')
        if not workers_str:
            return {}

        workers = {}
        for entry in workers_str.split(','):
            entry = entry.strip()
            if not entry:
                continue
            worker_id, _, address = entry.partition('=')
            if not address:
                raise ValueError(f"invalid WORKERS entry {entry!r}, expected id=host:port")
            workers[int(worker_id)] = address.strip()
        return workers

    @classmethod
    def get_timeout(cls) -> Optional[float]:
        """REMOTE_TIMEOUT sebagai Optional (0 berarti tanpa timeout)"""
        return cls.REMOTE_TIMEOUT or None

    # Logging
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE: str = os.getenv('LOG_FILE', 'logs/clusterutils.log')

    @classmethod
    def display(cls):
        """Print semua konfigurasi untuk debugging"""
        print("=== Configuration ===")
        print(f"Worker ID: {cls.WORKER_ID}")
        print(f"Worker Address: {cls.WORKER_HOST}:{cls.WORKER_PORT}")
        print(f"Workers: {cls.get_workers()}")
        print(f"Remote timeout: {cls.get_timeout()}")
        print(f"Namespace: {cls.DEFAULT_NAMESPACE}")
        print("=" * 30)


# Test configuration saat file dijalankan langsung
if __name__ == "__main__":
    Config.display()
