"""
Registry untuk remote-callable functions.

Setiap function menerima WorkerContext sebagai argument pertama,
lalu keyword arguments dari RemoteCall.
"""

from typing import Callable, Dict

REMOTE_FUNCTIONS: Dict[str, Callable] = {}


def remote_function(name: str) -> Callable[[Callable], Callable]:
    """
    Decorator untuk register function yang bisa dipanggil lewat RemoteCall.

    Contoh penggunaan:
        @remote_function("double_id")
        def double_id(ctx):
            return ctx.worker_id * 2
    """
    def decorator(fn: Callable) -> Callable:
        REMOTE_FUNCTIONS[name] = fn
        return fn
    return decorator


def get_remote_function(name: str) -> Callable:
    """Raise KeyError jika function belum di-register"""
    return REMOTE_FUNCTIONS[name]
