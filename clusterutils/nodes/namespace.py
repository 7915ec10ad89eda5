"""
Per-worker key-value store.

Pengganti global namespace binding: setiap worker punya NamespaceStore
sendiri, dan semua operation menerima store ini secara eksplisit.
"""

from typing import Any, Dict, Iterator, Optional

from ..sync.errors import UnboundNameError
from ..utils.config import Config

DEFAULT_NAMESPACE = Config.DEFAULT_NAMESPACE


class Namespace:
    """Satu namespace: mapping name -> value"""

    def __init__(self, name: str, worker_id: Optional[int] = None):
        self.name = name
        self.worker_id = worker_id
        self._bindings: Dict[str, Any] = {}

    def bind(self, name: str, value: Any):
        """Bind value ke name. Binding lama di-overwrite (last writer wins)."""
        self._bindings[name] = value

    def lookup(self, name: str) -> Any:
        try:
            return self._bindings[name]
        except KeyError:
            raise UnboundNameError(self.worker_id, name, self.name) from None

    def unbind(self, name: str) -> bool:
        if name not in self._bindings:
            return False
        del self._bindings[name]
        return True

    def names(self):
        return list(self._bindings)

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self):
        return len(self._bindings)


class NamespaceStore:
    """Semua namespace milik satu worker, dibuat on demand"""

    def __init__(self, worker_id: Optional[int] = None):
        self.worker_id = worker_id
        self._namespaces: Dict[str, Namespace] = {}

    def get(self, namespace: str = DEFAULT_NAMESPACE) -> Namespace:
        if namespace not in self._namespaces:
            self._namespaces[namespace] = Namespace(namespace, self.worker_id)
        return self._namespaces[namespace]

    def __getitem__(self, namespace: str) -> Namespace:
        return self.get(namespace)

    def __contains__(self, namespace: str) -> bool:
        return namespace in self._namespaces

    def describe(self) -> Dict[str, list]:
        return {name: ns.names() for name, ns in self._namespaces.items()}
