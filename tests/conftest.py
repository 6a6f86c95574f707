"""
Pytest fixtures: an in-memory cluster standing in for ResourceClient, and
builders for kubernetes API model objects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from kubernetes import client

from kube_deployer.cluster.client import ResourceList
from kube_deployer.errors import ResourceClientError


class FakeKind:
    """One resource kind of the fake cluster; records every call in order."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.objects: dict[str, Any] = {}
        self.calls: list[tuple[str, str]] = []
        self.create_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.info_result: ResourceList | Exception = ResourceList(status_code=200)
        self.info_filters: list[Any] = []

    async def create(self, manifest: Any) -> Any:
        name = manifest.metadata.name
        self.calls.append(("create", name))
        if self.create_error is not None:
            raise self.create_error
        if name in self.objects:
            raise ResourceClientError(self.kind, "create", f'{self.kind}s "{name}" already exists', status=409)
        self.objects[name] = manifest
        return manifest

    async def delete(self, name: str) -> None:
        self.calls.append(("delete", name))
        if self.delete_error is not None:
            raise self.delete_error
        if name not in self.objects:
            raise ResourceClientError(self.kind, "delete", f'{self.kind}s "{name}" not found', status=404)
        del self.objects[name]

    async def info(self, list_filter: Any = None) -> ResourceList:
        self.calls.append(("info", ""))
        self.info_filters.append(list_filter)
        if isinstance(self.info_result, Exception):
            raise self.info_result
        return self.info_result


class FakePods(FakeKind):
    def __init__(self) -> None:
        super().__init__("pod")
        self.log_output: dict[str, str | Exception] = {}
        self.log_calls: list[dict[str, Any]] = []

    async def logs(
        self,
        pod_name: str,
        container_name: str,
        since_seconds: int | None = None,
        tail_lines: int | None = None,
    ) -> str:
        self.log_calls.append(
            {
                "pod_name": pod_name,
                "container_name": container_name,
                "since_seconds": since_seconds,
                "tail_lines": tail_lines,
            }
        )
        out = self.log_output.get(container_name, "")
        if isinstance(out, Exception):
            raise out
        return out


class FakeCluster:
    """Duck-typed ResourceClient backed by dictionaries."""

    def __init__(self, namespace: str = "default") -> None:
        self.namespace = namespace
        self.pods = FakePods()
        self.deployments = FakeKind("deployment")
        self.services = FakeKind("service")


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


def api_error(kind: str, operation: str, message: str, status: int = 422) -> ResourceClientError:
    return ResourceClientError(kind, operation, message, status=status, reason="Unprocessable Entity")


def make_container_status(name: str, state: str = "running", **kwargs: Any) -> client.V1ContainerStatus:
    if state == "running":
        st = client.V1ContainerState(running=client.V1ContainerStateRunning(started_at=datetime(2024, 5, 1, 12, 0)))
    elif state == "terminated":
        st = client.V1ContainerState(
            terminated=client.V1ContainerStateTerminated(exit_code=1, reason="Error", message="boom")
        )
    else:
        st = client.V1ContainerState(
            waiting=client.V1ContainerStateWaiting(reason="ImagePullBackOff", message="pull failed")
        )
    return client.V1ContainerStatus(
        name=name,
        image=kwargs.get("image", f"repo/{name}:1.0"),
        image_id="",
        ready=kwargs.get("ready", state == "running"),
        restart_count=kwargs.get("restart_count", 0),
        state=st,
    )


def make_pod(
    name: str,
    app: str | None,
    phase: str = "Running",
    containers: list[client.V1ContainerStatus] | None = None,
    conditions: list[tuple[str, str]] | None = None,
) -> client.V1Pod:
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, labels={"app": app} if app else None),
        status=client.V1PodStatus(
            phase=phase,
            conditions=[client.V1PodCondition(type=t, status=s) for t, s in (conditions or [])] or None,
            container_statuses=containers,
        ),
    )


def deployment_spec(app: str, replicas: int = 1) -> client.V1DeploymentSpec:
    return client.V1DeploymentSpec(
        replicas=replicas,
        selector=client.V1LabelSelector(match_labels={"app": app}),
        template=client.V1PodTemplateSpec(metadata=client.V1ObjectMeta(labels={"app": app})),
    )


def make_deployment(
    name: str | None,
    replicas: int = 1,
    available: int | None = 1,
    conditions: list[tuple[str, str]] | None = None,
) -> client.V1Deployment:
    return client.V1Deployment(
        metadata=client.V1ObjectMeta(name=name, creation_timestamp=datetime(2024, 5, 1, 12, 0)),
        spec=deployment_spec(name or "unnamed", replicas),
        status=client.V1DeploymentStatus(
            replicas=replicas,
            available_replicas=available,
            conditions=[client.V1DeploymentCondition(type=t, status=s) for t, s in (conditions or [])] or None,
        ),
    )


def make_service(name: str, node_ports: list[int | None]) -> client.V1Service:
    return client.V1Service(
        metadata=client.V1ObjectMeta(name=name),
        spec=client.V1ServiceSpec(
            type="NodePort",
            ports=[client.V1ServicePort(port=8080, node_port=p) for p in node_ports],
        ),
    )
