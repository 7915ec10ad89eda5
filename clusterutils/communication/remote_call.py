"""
Description of a remote operation.

Worker tidak pernah menerima code. Yang dikirim hanya nama function yang
sudah di-register di worker plus keyword arguments yang eksplisit.
"""

from typing import Any, Dict


class RemoteCall:
    """Panggil registered remote function `fn` dengan `kwargs` di target worker"""

    def __init__(self, fn: str, **kwargs: Any):
        self.fn = fn
        self.kwargs: Dict[str, Any] = kwargs

    def with_args(self, **kwargs: Any) -> 'RemoteCall':
        """Copy dengan tambahan/override arguments"""
        merged = dict(self.kwargs)
        merged.update(kwargs)
        return type(self)(self.fn, **merged)

    def __eq__(self, other):
        if not isinstance(other, RemoteCall):
            return NotImplemented
        return type(self) is type(other) and self.fn == other.fn and self.kwargs == other.kwargs

    def __repr__(self):
        args = ", ".join(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"{type(self).__name__}({self.fn}{', ' + args if args else ''})"


class Expr(RemoteCall):
    """
    Value yang di-evaluate di target worker sebelum di-bind.

    Contoh: Expr("scaled_id", factor=-1, offset=1000) menghasilkan
    1000 - worker_id di setiap target, dengan id milik target itu sendiri.
    """

