"""Tests for testing utilities."""

import anyio
import pytest

from distobjects import Cluster, DistributedObject
from distobjects.testing.helpers import CountingInvoker, wait_for, with_timeout


class TestTestingHelpers:
    """Test the testing helper utilities."""

    @pytest.mark.anyio
    async def test_with_timeout_success(self):
        async def quick_task():
            await anyio.sleep(0.01)
            return "done"

        assert await with_timeout(quick_task(), timeout=1.0) == "done"

    @pytest.mark.anyio
    async def test_with_timeout_fails(self):
        async def slow_task():
            await anyio.sleep(5.0)

        with pytest.raises(TimeoutError):
            await with_timeout(slow_task(), timeout=0.1)

    @pytest.mark.anyio
    async def test_wait_for_success(self):
        flag = {"value": False}

        async def set_flag():
            await anyio.sleep(0.05)
            flag["value"] = True

        async with anyio.create_task_group() as tg:
            tg.start_soon(set_flag)
            await wait_for(lambda: flag["value"], timeout=1.0, interval=0.01)

    @pytest.mark.anyio
    async def test_wait_for_timeout(self):
        with pytest.raises(TimeoutError):
            await wait_for(lambda: False, timeout=0.1, interval=0.01)

    @pytest.mark.anyio
    async def test_counting_invoker_counts_per_process(self):
        async with Cluster(workers=2) as cluster:
            probe = CountingInvoker(cluster)

            assert probe.workers() == [2, 3]
            assert probe.procs() == [1, 2, 3]
            assert probe.current_process() == 1

            obj = await DistributedObject.create(lambda pid: pid * 10, runtime=probe)
            assert probe.calls == {2: 1, 3: 1}

            assert await obj.get(3) == 30
            assert probe.calls[3] == 2

            await obj.close()
            assert probe.dos == {2: 1, 3: 1}
            assert probe.total == 5

            assert await probe.remote_call(2, lambda: "direct") == "direct"
            assert probe.calls[2] == 2
