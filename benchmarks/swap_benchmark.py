"""
Benchmark biaya swap terhadap jumlah participant.

swap melakukan O(P^2) fetch point-to-point, jadi durasi naik cepat
saat P bertambah. Benchmark ini memakai LocalPool supaya yang diukur
adalah protocol overhead, bukan network.

Cara menjalankan:
  python benchmarks/swap_benchmark.py --repetitions 20 --sizes 2 4 8 16
"""

import argparse
import asyncio
import logging

from clusterutils.communication.pool import LocalPool
from clusterutils.communication.remote_call import Expr, RemoteCall
from clusterutils.sync.exchange import collect, sow, swap
from clusterutils.sync.message_dict import MessageDictionary
from clusterutils.sync.timing import mean_duration_async


async def bench(size: int, repetitions: int):
    worker_ids = list(range(1, size + 1))
    pool = LocalPool.with_workers(worker_ids)

    await sow(pool, worker_ids, 'msgs', MessageDictionary.zeros('msgs', worker_ids))
    await pool.await_all(pool.submit_many(
        worker_ids, RemoteCall("set_entry", name='msgs', value=Expr("worker_id"))
    ))

    swap_mean = await mean_duration_async(
        repetitions, lambda: swap(pool, worker_ids, 'msgs'), label='swap'
    )
    collect_mean = await mean_duration_async(
        repetitions, lambda: collect(pool, 'msgs', worker_ids), label='collect'
    )
    return swap_mean, collect_mean


async def main(sizes, repetitions):
    print(f"{'workers':>8} {'swap (ms)':>12} {'collect (ms)':>14}")
    for size in sizes:
        swap_mean, collect_mean = await bench(size, repetitions)
        print(f"{size:>8} {swap_mean * 1000:>12.3f} {collect_mean * 1000:>14.3f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Swap/collect benchmark')
    parser.add_argument('--repetitions', type=int, default=10)
    parser.add_argument('--sizes', type=int, nargs='+', default=[2, 4, 8, 16])
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    asyncio.run(main(args.sizes, args.repetitions))
