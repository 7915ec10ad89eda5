"""
Metrics collector menggunakan Prometheus.
File ini mengumpulkan data performa remote calls dan exchange operations
(swap, collect, reap), plus resource usage dari process.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest
from typing import Iterable
import time
import psutil


class MetricsCollector:
    """
    Class untuk mengumpulkan metrics sistem.
    Menggunakan Prometheus format untuk monitoring.
    """

    def __init__(self):
        # Counter: jumlah remote call per function dan status
        self.remote_calls = Counter(
            'clusterutils_remote_calls_total',
            'Total number of remote calls',
            ['function', 'status']
        )

        # Histogram: distribusi latency remote call
        self.remote_call_latency = Histogram(
            'clusterutils_remote_call_latency_seconds',
            'Remote call latency in seconds',
            ['function']
        )

        # Histogram: durasi operation (swap, collect, ...)
        self.operation_duration = Histogram(
            'clusterutils_operation_duration_seconds',
            'Duration of fan-out operations in seconds',
            ['operation']
        )

        self.exchange_failures = Counter(
            'clusterutils_exchange_failures_total',
            'Failed sub-operations in fan-out operations',
            ['operation', 'kind']
        )

        # Gauge: nilai yang bisa naik/turun (jumlah worker aktif)
        self.active_workers = Gauge(
            'clusterutils_active_workers',
            'Number of reachable workers'
        )

        # System metrics
        self.cpu_usage = Gauge('clusterutils_cpu_usage_percent', 'CPU usage percentage')
        self.memory_usage = Gauge('clusterutils_memory_usage_percent', 'Memory usage percentage')

    def record_remote_call(self, function: str, status: str, duration: float):
        """
        Record remote call metrics.

        Args:
            function: Nama remote function
            status: 'ok' atau nama exception
            duration: Call duration in seconds
        """
        self.remote_calls.labels(function=function, status=status).inc()
        self.remote_call_latency.labels(function=function).observe(duration)

    def observe_operation(self, operation: str, duration: float):
        self.operation_duration.labels(operation=operation).observe(duration)

    def record_failures(self, operation: str, failures: Iterable):
        """Count failures per kind"""
        for failure in failures:
            self.exchange_failures.labels(operation=operation, kind=failure.kind).inc()

    def update_system_metrics(self):
        """Update CPU dan memory usage"""
        self.cpu_usage.set(psutil.cpu_percent())
        self.memory_usage.set(psutil.virtual_memory().percent)

    def set_active_workers(self, count: int):
        """Update jumlah worker aktif"""
        self.active_workers.set(count)

    def get_metrics(self) -> bytes:
        """
        Export metrics dalam Prometheus format.
        Returns: Metrics data dalam bytes
        """
        self.update_system_metrics()
        return generate_latest()


# Context manager untuk measure operation time
class measure_time:
    """
    Context manager untuk mengukur execution time.

    Contoh penggunaan:
        with measure_time("swap") as timer:
            # your code here
            pass
        print(f"Execution time: {timer.elapsed}s")

    Jika `operation` diberikan, durasi juga dicatat ke operation_duration.
    """

    def __init__(self, operation: str = None):
        self.operation = operation
        self.start_time = None
        self.elapsed = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self.start_time
        if self.operation:
            metrics.observe_operation(self.operation, self.elapsed)
        return False


# Singleton instance
metrics = MetricsCollector()
