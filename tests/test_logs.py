"""
Tests for the container log collector.
"""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeCluster
from kube_deployer.config import LogOutputLimits
from kube_deployer.errors import ResourceClientError
from kube_deployer.observation import ContainerStatus, LogCollector


@pytest.fixture
def collector(cluster: FakeCluster) -> LogCollector:
    return LogCollector(cluster, LogOutputLimits(since_seconds=7200, tail_lines=200))


def _containers(*specs: tuple[str, str]) -> list[ContainerStatus]:
    return [ContainerStatus(name=name, state=state) for name, state in specs]


class TestGetContainerLogs:
    @pytest.mark.asyncio
    async def test_one_block_per_container_in_order(self, cluster, collector):
        cluster.pods.log_output = {"a": "line a1\nline a2", "c": "line c1"}
        containers = _containers(("a", "running"), ("b", "terminated"), ("c", "running"))

        report = await collector.get_container_logs("svc-a-1", containers)

        assert report.count("Container ") == 3
        assert report.index("Container a") < report.index("Container b") < report.index("Container c")
        assert "line a1\nline a2" in report
        assert "(container is not running: terminated)" in report
        assert "line c1" in report

    @pytest.mark.asyncio
    async def test_only_running_containers_are_fetched(self, cluster, collector):
        containers = _containers(("a", "running"), ("b", "terminated"), ("c", "running"), ("d", "waiting"))

        await collector.get_container_logs("svc-a-1", containers)

        assert sorted(c["container_name"] for c in cluster.pods.log_calls) == ["a", "c"]
        assert all(c["pod_name"] == "svc-a-1" for c in cluster.pods.log_calls)

    @pytest.mark.asyncio
    async def test_limits_are_applied_and_announced(self, cluster, collector):
        report = await collector.get_container_logs("svc-a-1", _containers(("a", "running")))

        assert cluster.pods.log_calls == [
            {"pod_name": "svc-a-1", "container_name": "a", "since_seconds": 7200, "tail_lines": 200}
        ]
        assert report.startswith("Container a logs (last 2h, at most 200 lines):\n")

    @pytest.mark.asyncio
    async def test_empty_log_renders_dash(self, cluster, collector):
        cluster.pods.log_output = {"a": ""}

        report = await collector.get_container_logs("svc-a-1", _containers(("a", "running")))

        assert report.endswith("\n-")

    @pytest.mark.asyncio
    async def test_failed_fetch_is_isolated(self, cluster, collector):
        cluster.pods.log_output = {
            "a": ResourceClientError("pod", "logs", "container a is restarting", status=400),
            "b": "healthy output",
        }

        report = await collector.get_container_logs("svc-a-1", _containers(("a", "running"), ("b", "running")))

        assert "(failed to get logs: container a is restarting)" in report
        assert "healthy output" in report

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, cluster, collector):
        in_flight = 0
        peak = 0

        async def logs(pod_name, container_name, since_seconds=None, tail_lines=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return container_name

        cluster.pods.logs = logs

        await collector.get_container_logs("p", _containers(("a", "running"), ("b", "running"), ("c", "running")))

        assert peak == 3

    @pytest.mark.asyncio
    async def test_no_containers(self, cluster, collector):
        assert await collector.get_container_logs("p", []) == ""
        assert cluster.pods.log_calls == []
