"""Tests for Cluster, the local RemoteInvoker."""

from __future__ import annotations

import anyio
import pytest

from distobjects import (
    Cluster,
    ClusterConfig,
    ReceiveTimeout,
    RemoteExecutionError,
    RemoteInvoker,
    UnknownProcessError,
    current_process,
    get_runtime,
    local_store,
    send,
)
from distobjects.runtime.invoker import gather
from distobjects.testing.helpers import wait_for


class TestClusterConfig:
    def test_defaults(self):
        config = ClusterConfig()
        assert config.workers == 2
        assert config.master == 1
        assert config.call_timeout is None
        assert config.worker_ids == [2, 3]

    @pytest.mark.parametrize(
        "kwargs",
        [{"workers": -1}, {"master": 0}, {"call_timeout": 0}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ClusterConfig(**kwargs)

    def test_overrides_apply_to_config(self):
        cluster = Cluster(ClusterConfig(workers=5), call_timeout=2.0)
        assert cluster.config.workers == 5
        assert cluster.config.call_timeout == 2.0


@pytest.mark.anyio
async def test_cluster_processes_and_runtime():
    async with Cluster(workers=3) as cluster:
        assert isinstance(cluster, RemoteInvoker)
        assert cluster.procs() == [1, 2, 3, 4]
        assert cluster.workers() == [2, 3, 4]
        assert cluster.current_process() == 1
        assert get_runtime() is cluster

    with pytest.raises(RuntimeError, match="No active cluster"):
        get_runtime()


@pytest.mark.anyio
async def test_cluster_without_workers_targets_master():
    async with Cluster(workers=0) as cluster:
        assert cluster.procs() == [1]
        assert cluster.workers() == [1]


@pytest.mark.anyio
async def test_remote_call_runs_on_target_process():
    async with Cluster(workers=2) as cluster:
        assert await cluster.remote_call(2, current_process) == 2
        assert await cluster.remote_call(3, lambda x, y: (current_process(), x + y), 1, 2) == (3, 3)

        async def async_fn():
            await anyio.sleep(0.01)
            return current_process()

        assert await cluster.remote_call(3, async_fn) == 3


@pytest.mark.anyio
async def test_remote_call_to_self_runs_inline():
    async with Cluster(workers=1) as cluster:
        assert await cluster.remote_call(1, current_process) == 1
        # A worker calling itself must not wait on its own mailbox.
        assert await cluster.remote_call(2, lambda: cluster.remote_call(2, current_process)) == 2


@pytest.mark.anyio
async def test_remote_failure_is_wrapped():
    async with Cluster(workers=1) as cluster:
        def boom():
            raise ValueError("bad value")

        with pytest.raises(RemoteExecutionError) as info:
            await cluster.remote_call(2, boom)
        assert info.value.pid == 2
        assert isinstance(info.value.original, ValueError)
        assert info.value.__cause__ is info.value.original

        with pytest.raises(RemoteExecutionError):
            await cluster.remote_call(1, boom)

        # The process keeps serving after a failed closure.
        assert await cluster.remote_call(2, current_process) == 2


@pytest.mark.anyio
async def test_unknown_process():
    async with Cluster(workers=1) as cluster:
        with pytest.raises(UnknownProcessError) as info:
            await cluster.remote_call(9, current_process)
        assert info.value.pid == 9
        with pytest.raises(UnknownProcessError):
            await cluster.remote_do(9, current_process)
        with pytest.raises(UnknownProcessError):
            cluster.store(9)


@pytest.mark.anyio
async def test_remote_do_does_not_wait_and_drops_failures():
    async with Cluster(workers=1) as cluster:
        seen: list[int] = []

        def record():
            seen.append(current_process())

        def boom():
            raise RuntimeError("ignored")

        await cluster.remote_do(2, boom)
        await cluster.remote_do(2, record)
        await wait_for(lambda: seen == [2], timeout=1.0)

        stats = await cluster.stats(2)
        assert stats["casts"] == 2


@pytest.mark.anyio
async def test_call_timeout_from_config():
    async with Cluster(workers=1, call_timeout=0.1) as cluster:
        async def hang():
            await anyio.sleep(5)

        with pytest.raises(ReceiveTimeout):
            await cluster.remote_call(2, hang)


@pytest.mark.anyio
async def test_each_process_has_its_own_store():
    async with Cluster(workers=2) as cluster:
        oid, _ = await cluster.remote_call(2, lambda: local_store().add("two"))

        assert oid in cluster.store(2)
        assert oid not in cluster.store(3)
        assert oid not in local_store()
        assert cluster.store(1) is local_store()


@pytest.mark.anyio
async def test_stores_are_cleared_on_shutdown():
    async with Cluster(workers=1) as cluster:
        store = cluster.store(2)
        await cluster.remote_call(2, lambda: local_store().add([1]))
        assert len(store) == 1

    assert len(store) == 0


@pytest.mark.anyio
async def test_errors_in_body_propagate_unwrapped():
    with pytest.raises(KeyError):
        async with Cluster(workers=1):
            raise KeyError("from body")


@pytest.mark.anyio
async def test_gather_keeps_task_order():
    async def after(delay, value):
        await anyio.sleep(delay)
        return value

    tasks = [
        lambda: after(0.03, "a"),
        lambda: after(0.0, "b"),
        lambda: after(0.01, "c"),
    ]
    assert await gather(tasks) == ["a", "b", "c"]
    assert await gather([]) == []


@pytest.mark.anyio
async def test_gather_raises_first_failure_unwrapped():
    async def fail():
        raise ValueError("first")

    async def slow():
        await anyio.sleep(5)

    with anyio.fail_after(1):
        with pytest.raises(ValueError, match="first"):
            await gather([slow, fail])


@pytest.mark.anyio
async def test_unexpected_messages_are_dropped():
    async with Cluster(workers=1) as cluster:
        await send(cluster._node(2), ("stray", "message"))
        await send(cluster._node(2), "another")

        stats = await cluster.stats(2)
        assert stats["dropped"] == 2
        assert await cluster.remote_call(2, current_process) == 2
