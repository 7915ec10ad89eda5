"""
Aggregate outcome untuk fan-out/fan-in operations.

Setiap operation yang mengirim banyak remote call (swap, collect, reap,
sow, discover) mengembalikan hasil yang sukses bersama daftar Failure,
bukan satu exception yang membuang partial work.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Set, TypeVar

from .errors import ClusterError, PartialFailure, TotalFailure

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class Failure:
    """
    Satu sub-operation yang gagal.

    `target` adalah worker yang menjalankan (atau seharusnya menjalankan)
    operation. Untuk fetch point-to-point, `source` adalah worker yang
    entry-nya sedang diambil.
    """
    target: Optional[int]
    operation: str
    kind: str
    reason: str
    source: Optional[int] = None

    @classmethod
    def from_exception(cls,
                       target: Optional[int],
                       operation: str,
                       exc: BaseException,
                       source: Optional[int] = None) -> 'Failure':
        kind = exc.kind if isinstance(exc, ClusterError) else "error"
        return cls(target=target, operation=operation, kind=kind,
                   reason=str(exc) or type(exc).__name__, source=source)

    @property
    def is_unreachable(self) -> bool:
        return self.kind in ("unreachable", "timeout")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'target': self.target,
            'operation': self.operation,
            'kind': self.kind,
            'reason': self.reason,
            'source': self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Failure':
        return cls(
            target=data.get('target'),
            operation=data['operation'],
            kind=data['kind'],
            reason=data['reason'],
            source=data.get('source'),
        )

    def __repr__(self):
        pair = f"{self.source}->{self.target}" if self.source is not None else f"{self.target}"
        return f"Failure({self.operation}, {pair}, {self.kind})"


@dataclass
class ExchangeResult(Generic[V]):
    """Hasil fan-out: results per worker + daftar failures"""
    operation: str
    results: Dict[int, V] = field(default_factory=dict)
    failures: List[Failure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def partial(self) -> bool:
        return bool(self.failures) and bool(self.results)

    @property
    def failed_workers(self) -> Set[int]:
        """
        Worker yang menjadi penyebab failure.
        Untuk pairwise fetch yang dihitung adalah source-nya.
        """
        workers = set()
        for failure in self.failures:
            worker = failure.source if failure.source is not None else failure.target
            if worker is not None:
                workers.add(worker)
        return workers

    def raise_for_failures(self) -> 'ExchangeResult[V]':
        if self.failures:
            raise PartialFailure(self)
        return self

    def __getitem__(self, worker_id: int) -> V:
        return self.results[worker_id]

    def __len__(self):
        return len(self.results)

    def __repr__(self):
        return (f"ExchangeResult({self.operation}, ok={sorted(self.results)}, "
                f"failures={self.failures})")


def check_total_failure(operation: str, attempted: int, failures: List[Failure]) -> None:
    """
    Raise TotalFailure jika semua sub-operation gagal karena worker unreachable.
    Partial failure cukup di-log.
    """
    if attempted and len(failures) >= attempted and all(f.is_unreachable for f in failures):
        logger.error(f"{operation}: none of {attempted} workers reachable")
        raise TotalFailure(failures, f"{operation}: none of {attempted} workers reachable")

    if failures:
        logger.warning(f"{operation}: {len(failures)} of {attempted} sub-operations failed: {failures}")
