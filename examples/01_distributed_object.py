"""
Distributed object example

Starts a local cluster with three workers, stores one list per worker and
walks through reading, replacing and releasing them.

Run:
  uv run python examples/01_distributed_object.py
"""

from __future__ import annotations

import logging

import anyio

from distobjects import Cluster, DistributedObject, NotFoundError, localpart


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    async with Cluster(workers=3) as cluster:
        print("processes:", cluster.procs())

        # One [pid, pid, pid] list per worker, built on the worker itself.
        obj = await DistributedObject.create(lambda pid: [pid, pid, pid], pids=[2, 3, 4])
        print(obj, "holds", obj.eltype.__name__)

        print("on 3:", await obj.get(3))
        print("4, 2, 3:", await obj.get_many(4, 2, 3))

        # Closures sent to a process can read their local part directly.
        print("sum on 2:", await cluster.remote_call(2, lambda: sum(localpart(obj))))

        await obj.put([30, 30, 30], 3)
        print("replaced on 3:", await obj.get(3))

        await obj.delete(3)
        print("after delete:", obj.locations())
        try:
            await obj.get(3)
        except NotFoundError as exc:
            print("expected:", exc)

        await obj.close()
        print("after close:", obj.locations())


if __name__ == "__main__":
    anyio.run(main)
