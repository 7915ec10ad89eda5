"""
Message Dictionary: mapping worker-id -> value yang di-replicate by convention.

Setiap worker punya copy sendiri di namespace-nya dengan nama yang sama.
Copy-copy ini hanya konsisten lewat swap/collect, tidak ada shared memory.
"""

from typing import Dict, Generic, Iterable, Iterator, Mapping, Optional, Tuple, TypeVar

V = TypeVar("V")

# Value types yang bisa dikirim lewat wire (nama -> type)
VALUE_TYPES = {
    'int': int,
    'float': float,
    'str': str,
    'bool': bool,
    'list': list,
    'dict': dict,
}


class MessageDictionary(Generic[V]):
    """
    Named mapping dari WorkerId ke value.

    Jika `value_type` diberikan, setiap assignment dicek terhadap type tersebut.
    Worker seharusnya hanya mengubah entry miliknya sendiri.
    """

    def __init__(self,
                 name: str,
                 entries: Optional[Mapping[int, V]] = None,
                 value_type: Optional[type] = None):
        self.name = name
        self.value_type = value_type
        self._entries: Dict[int, V] = {}

        for key, value in (entries or {}).items():
            self[key] = value

    @classmethod
    def zeros(cls,
              name: str,
              worker_ids: Iterable[int],
              fill: V = 0,
              value_type: Optional[type] = None) -> 'MessageDictionary[V]':
        """Create dictionary dengan semua entry berisi `fill`"""
        return cls(name, {int(w): fill for w in worker_ids}, value_type=value_type)

    def _check(self, value: V):
        if self.value_type is None:
            return
        if isinstance(value, self.value_type):
            return
        # int boleh masuk ke dictionary float
        if self.value_type is float and isinstance(value, int) and not isinstance(value, bool):
            return
        raise TypeError(
            f"MessageDictionary {self.name!r} holds {self.value_type.__name__}, "
            f"got {type(value).__name__}"
        )

    def __getitem__(self, worker_id: int) -> V:
        return self._entries[worker_id]

    def __setitem__(self, worker_id: int, value: V):
        if not isinstance(worker_id, int) or worker_id < 0:
            raise TypeError(f"worker id must be a non-negative int, got {worker_id!r}")
        self._check(value)
        self._entries[worker_id] = value

    def __contains__(self, worker_id) -> bool:
        return worker_id in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __eq__(self, other):
        if isinstance(other, MessageDictionary):
            return self.name == other.name and self._entries == other._entries
        if isinstance(other, dict):
            return self._entries == dict(other)
        return NotImplemented

    def get(self, worker_id: int, default: Optional[V] = None) -> Optional[V]:
        return self._entries.get(worker_id, default)

    def keys(self):
        return self._entries.keys()

    def values(self):
        return self._entries.values()

    def items(self) -> Iterable[Tuple[int, V]]:
        return self._entries.items()

    def update_entries(self, entries: Mapping[int, V]):
        """Fold beberapa entry sekaligus (dipakai oleh swap dan collect)"""
        for key, value in entries.items():
            self[key] = value

    def to_dict(self) -> Dict[int, V]:
        return dict(self._entries)

    def copy(self) -> 'MessageDictionary[V]':
        return MessageDictionary(self.name, self._entries, value_type=self.value_type)

    @property
    def value_type_name(self) -> Optional[str]:
        if self.value_type is None:
            return None
        for type_name, value_type in VALUE_TYPES.items():
            if value_type is self.value_type:
                return type_name
        return None

    def __repr__(self):
        return f"MessageDictionary({self.name!r}, {self._entries})"
