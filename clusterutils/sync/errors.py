"""
Error types untuk cluster operations.

Semua error turunan dari ClusterError dan bisa di-serialize ke dict
supaya bisa dikirim balik dari worker ke controller lewat HTTP.
"""

from typing import Any, Dict, List, Optional


class ClusterError(Exception):
    """Base class untuk semua error di clusterutils"""

    kind = "error"

    def __init__(self, message: str, worker_id: Optional[int] = None):
        super().__init__(message)
        self.worker_id = worker_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert error ke dictionary untuk JSON serialization"""
        return {
            'error_type': type(self).__name__,
            'worker_id': self.worker_id,
            'message': str(self),
        }


class UnreachableWorker(ClusterError):
    """Remote operation tidak bisa di-submit atau tidak pernah selesai"""

    kind = "unreachable"

    def __init__(self, worker_id: int, message: Optional[str] = None):
        super().__init__(message or f"worker {worker_id} is unreachable", worker_id)


class WorkerTimeout(UnreachableWorker):
    """Remote operation tidak selesai dalam timeout"""

    kind = "timeout"

    def __init__(self, worker_id: int, timeout: Optional[float] = None, message: Optional[str] = None):
        self.timeout = timeout
        super().__init__(
            worker_id,
            message or f"worker {worker_id} did not answer within {timeout}s"
        )


class UnboundNameError(ClusterError):
    """Name tidak ada di namespace target worker"""

    kind = "unbound"

    def __init__(self, worker_id: Optional[int], name: str, namespace: str = "main"):
        self.name = name
        self.namespace = namespace
        super().__init__(
            f"{name!r} is not bound in namespace {namespace!r} on worker {worker_id}",
            worker_id
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'name': self.name, 'namespace': self.namespace})
        return data


class RemoteCallError(ClusterError):
    """Remote function gagal dijalankan (unknown function atau exception di worker)"""

    def __init__(self, worker_id: Optional[int], function: str, message: str):
        self.function = function
        super().__init__(f"{function} failed on worker {worker_id}: {message}", worker_id)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['function'] = self.function
        return data


class TotalFailure(ClusterError):
    """Tidak ada worker yang reachable sama sekali"""

    def __init__(self, failures: List[Any], message: Optional[str] = None):
        self.failures = list(failures)
        super().__init__(message or f"no worker reachable ({len(self.failures)} failed)")


class PartialFailure(ClusterError):
    """
    Sebagian sub-operation gagal.
    Menyimpan hasil yang sukses di `result` supaya tidak hilang.
    """

    def __init__(self, result: Any):
        self.result = result
        self.failures = list(result.failures)
        workers = sorted(result.failed_workers)
        super().__init__(f"{len(self.failures)} sub-operations failed (workers {workers})")


def error_from_dict(data: Dict[str, Any]) -> ClusterError:
    """Rebuild error dari dictionary yang dikirim worker"""
    error_type = data.get('error_type')
    worker_id = data.get('worker_id')
    message = data.get('message', '')

    if error_type == 'UnboundNameError':
        return UnboundNameError(worker_id, data['name'], data.get('namespace', 'main'))
    if error_type == 'WorkerTimeout':
        return WorkerTimeout(worker_id, message=message)
    if error_type == 'UnreachableWorker':
        return UnreachableWorker(worker_id, message)
    if error_type == 'RemoteCallError':
        error = RemoteCallError(worker_id, data.get('function', '?'), '')
        error.args = (message,)
        return error
    return ClusterError(message, worker_id)
