"""
Timing utility untuk benchmark exchange operations.
"""

from typing import Awaitable, Callable, Optional

from ..utils.metrics import measure_time


def _check_repetitions(repetitions: int):
    if isinstance(repetitions, bool) or not isinstance(repetitions, int) or repetitions < 1:
        raise ValueError(f"repetitions must be a positive integer, got {repetitions!r}")


def mean_duration(repetitions: int, operation: Callable[[], object], label: Optional[str] = None) -> float:
    """
    Jalankan `operation` sebanyak `repetitions` kali secara berurutan
    dan return rata-rata wall-clock time (seconds).
    """
    _check_repetitions(repetitions)

    total = 0.0
    for _ in range(repetitions):
        with measure_time(label) as timer:
            operation()
        total += timer.elapsed
    return total / repetitions


async def mean_duration_async(repetitions: int,
                              operation: Callable[[], Awaitable[object]],
                              label: Optional[str] = None) -> float:
    """
    Versi async: setiap run di-await sampai selesai sebelum run berikutnya,
    karena operation bisa berupa distributed barrier (misal swap).
    """
    _check_repetitions(repetitions)

    total = 0.0
    for _ in range(repetitions):
        with measure_time(label) as timer:
            await operation()
        total += timer.elapsed
    return total / repetitions
