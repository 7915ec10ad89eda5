"""
Main entry point untuk clusterutils.

Commands:
  worker      jalankan satu WorkerNode dari environment configuration
  topology    tampilkan worker yang dikelompokkan per host
  swap-bench  ukur rata-rata durasi swap untuk Message Dictionary
"""

import asyncio
import argparse
import logging
import os
import sys

from clusterutils.communication.pool import HttpPool
from clusterutils.communication.remote_call import Expr, RemoteCall
from clusterutils.nodes.worker_node import WorkerNode
from clusterutils.sync.errors import ClusterError
from clusterutils.sync.exchange import sow, swap
from clusterutils.sync.message_dict import MessageDictionary
from clusterutils.sync.timing import mean_duration_async
from clusterutils.sync.topology import Scope, describe_workers
from clusterutils.utils.config import Config


def setup_logging():
    """Setup logging configuration"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if Config.LOG_FILE:
        os.makedirs(os.path.dirname(Config.LOG_FILE) or '.', exist_ok=True)
        handlers.append(logging.FileHandler(Config.LOG_FILE))

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


async def run_worker():
    """Run satu worker node sampai di-interrupt"""
    node = WorkerNode.from_config()
    await node.start()

    print(f"\n{'='*60}")
    print(f"  WORKER {node.worker_id} STARTED")
    print(f"  Address: http://{node.host}:{node.port}")
    print(f"  Host identity: {node.worker.hostname}")
    print(f"  Workers: {node.workers}")
    print(f"{'='*60}\n")

    try:
        # Keep running
        while True:
            await asyncio.sleep(1)
    finally:
        await node.stop()


async def run_topology(scope: Scope):
    """Print topology dari worker table di config"""
    async with HttpPool(Config.get_workers(), sender_id=Config.CONTROLLER_ID,
                        default_timeout=Config.get_timeout()) as pool:
        topology = await describe_workers(pool, scope)

    print(f"{len(topology)} host(s)")
    for group in topology.groups:
        print(f"  {group.host}: representative={group.representative} members={group.members}")
    for failure in topology.failures:
        print(f"  unreachable: worker {failure.target} ({failure.reason})")


async def run_swap_bench(repetitions: int, name: str):
    """Install Message Dictionary di semua worker lalu ukur swap"""
    workers = Config.get_workers()
    participants = sorted(workers)

    async with HttpPool(workers, sender_id=Config.CONTROLLER_ID,
                        default_timeout=Config.get_timeout()) as pool:
        await sow(pool, participants, name, MessageDictionary.zeros(name, participants))
        await pool.await_all(pool.submit_many(
            participants,
            RemoteCall("set_entry", name=name, value=Expr("worker_id"))
        ))

        mean = await mean_duration_async(
            repetitions, lambda: swap(pool, participants, name), label="swap"
        )

    print(f"swap over {len(participants)} workers: {mean * 1000:.2f} ms (mean of {repetitions})")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Cluster coordination utilities')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('worker', help='Run a worker node')

    topology_parser = subparsers.add_parser('topology', help='Group workers by host')
    topology_parser.add_argument(
        '--scope',
        choices=[scope.name.lower() for scope in Scope],
        default='all',
        help='Which hosts to include'
    )

    bench_parser = subparsers.add_parser('swap-bench', help='Measure swap duration')
    bench_parser.add_argument('--repetitions', type=int, default=10)
    bench_parser.add_argument('--name', default='bench_msgs')

    args = parser.parse_args()

    # Setup logging
    setup_logging()

    # Display configuration
    Config.display()

    try:
        if args.command == 'worker':
            asyncio.run(run_worker())
        elif args.command == 'topology':
            asyncio.run(run_topology(Scope[args.scope.upper()]))
        else:
            asyncio.run(run_swap_bench(args.repetitions, args.name))
    except KeyboardInterrupt:
        print("\nExiting...")
    except ClusterError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
