"""Fetch the logs of every running container of a pod and render one report."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from kube_deployer.config import LogOutputLimits
from kube_deployer.observation.models import ContainerStatus, LogFetchRequest
from kube_deployer.results import FetchResult, gather_results

if TYPE_CHECKING:
    from kube_deployer.cluster.client import ResourceClient

logger = logging.getLogger(__name__)

LOG_BLOCK_HEADER = "Container {name} logs (last {hours:g}h, at most {lines} lines):"
NOT_RUNNING_PLACEHOLDER = "(container is not running: {state})"
FETCH_FAILED_PLACEHOLDER = "(failed to get logs: {error})"
EMPTY_LOG_PLACEHOLDER = "-"


class LogCollector:
    """Collects recent logs for the containers of one pod."""

    def __init__(self, client: ResourceClient, limits: LogOutputLimits | None = None) -> None:
        self.client = client
        self.limits = limits or LogOutputLimits()

    async def _fetch(self, request: LogFetchRequest) -> str:
        return await self.client.pods.logs(
            request.pod_name,
            request.container_name,
            since_seconds=self.limits.since_seconds,
            tail_lines=self.limits.tail_lines,
        )

    def _render_block(self, container: ContainerStatus, result: FetchResult[str] | None) -> str:
        header = LOG_BLOCK_HEADER.format(
            name=container.name,
            hours=self.limits.since_seconds / 3600,
            lines=self.limits.tail_lines,
        )
        if result is None:
            body = NOT_RUNNING_PLACEHOLDER.format(state=container.state)
        elif not result.ok:
            body = FETCH_FAILED_PLACEHOLDER.format(error=result.error)
        else:
            body = result.value or EMPTY_LOG_PLACEHOLDER
        return f"{header}\n{body}"

    async def get_container_logs(self, pod_name: str, containers: Sequence[ContainerStatus]) -> str:
        """
        Return one block per container, in the order given.

        Only running containers are fetched, concurrently. A container that is
        not running, or whose fetch fails, gets a placeholder block; a failed
        fetch does not affect the others.
        """
        running = [i for i, c in enumerate(containers) if c.running]
        requests = [LogFetchRequest(pod_name=pod_name, container_name=containers[i].name) for i in running]
        fetched = await gather_results(*(self._fetch(r) for r in requests))

        by_index: dict[int, FetchResult[str]] = dict(zip(running, fetched))
        for i, result in by_index.items():
            if not result.ok:
                logger.warning("Failed to get logs for %s/%s: %s", pod_name, containers[i].name, result.error)

        return "\n".join(self._render_block(c, by_index.get(i)) for i, c in enumerate(containers))
