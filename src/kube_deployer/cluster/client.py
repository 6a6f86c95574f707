"""Async access to the Kubernetes API, one handle per resource kind."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kube_deployer.errors import ResourceClientError
from kube_deployer.observation.models import ListFilter

logger = logging.getLogger(__name__)


def _load_kube_config(kubeconfig_path: str | None, context: str | None) -> client.Configuration:
    """Load in-cluster or kubeconfig-based configuration."""
    try:
        config.load_incluster_config()
        return client.Configuration.get_default_copy()
    except config.ConfigException:
        pass
    kwargs: dict[str, Any] = {}
    if kubeconfig_path:
        kwargs["config_file"] = str(kubeconfig_path)
    if context:
        kwargs["context"] = context
    config.load_kube_config(**kwargs)
    return client.Configuration.get_default_copy()


def _api_error_message(e: ApiException) -> str:
    """Prefer the message of the Kubernetes Status body over the bare HTTP reason."""
    if e.body:
        try:
            body = json.loads(e.body)
        except (TypeError, ValueError):
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return e.reason or f"HTTP {e.status}"


@dataclass
class ResourceList:
    """Outcome of a list call. Non-2xx responses are reported here instead of raised."""

    status_code: int
    items: list[Any] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class _Resource:
    kind = ""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace

    async def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ApiException as e:
            # TLS and connection failures surface as status 0; they are not HTTP responses.
            raise ResourceClientError(
                self.kind, operation, _api_error_message(e), status=e.status or None, reason=e.reason
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise ResourceClientError(self.kind, operation, f"{self.kind} {operation} failed: {e}") from e

    async def _list(self, fn: Callable[..., Any], list_filter: ListFilter | None) -> ResourceList:
        kwargs = (list_filter or ListFilter()).as_kwargs()
        try:
            data, status, _headers = await self._call("info", fn, namespace=self.namespace, **kwargs)
        except ResourceClientError as e:
            if e.status is None:
                raise
            logger.debug("List %s returned HTTP %s: %s", self.kind, e.status, e.message)
            return ResourceList(status_code=e.status, reason=e.message)
        return ResourceList(status_code=status, items=list(data.items or []))


class DeploymentResource(_Resource):
    kind = "deployment"

    def __init__(self, apps: client.AppsV1Api, namespace: str) -> None:
        super().__init__(namespace)
        self._apps = apps

    async def create(self, manifest: client.V1Deployment) -> client.V1Deployment:
        return await self._call(
            "create", self._apps.create_namespaced_deployment, namespace=self.namespace, body=manifest
        )

    async def delete(self, name: str) -> None:
        await self._call(
            "delete",
            self._apps.delete_namespaced_deployment,
            name=name,
            namespace=self.namespace,
            body=client.V1DeleteOptions(propagation_policy="Foreground"),
        )

    async def info(self, list_filter: ListFilter | None = None) -> ResourceList:
        return await self._list(self._apps.list_namespaced_deployment_with_http_info, list_filter)


class ServiceResource(_Resource):
    kind = "service"

    def __init__(self, core: client.CoreV1Api, namespace: str) -> None:
        super().__init__(namespace)
        self._core = core

    async def create(self, manifest: client.V1Service) -> client.V1Service:
        return await self._call(
            "create", self._core.create_namespaced_service, namespace=self.namespace, body=manifest
        )

    async def delete(self, name: str) -> None:
        await self._call("delete", self._core.delete_namespaced_service, name=name, namespace=self.namespace)

    async def info(self, list_filter: ListFilter | None = None) -> ResourceList:
        return await self._list(self._core.list_namespaced_service_with_http_info, list_filter)


class PodResource(_Resource):
    kind = "pod"

    def __init__(self, core: client.CoreV1Api, namespace: str) -> None:
        super().__init__(namespace)
        self._core = core

    async def info(self, list_filter: ListFilter | None = None) -> ResourceList:
        return await self._list(self._core.list_namespaced_pod_with_http_info, list_filter)

    async def logs(
        self,
        pod_name: str,
        container_name: str,
        since_seconds: int | None = None,
        tail_lines: int | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {}
        if since_seconds:
            kwargs["since_seconds"] = since_seconds
        if tail_lines:
            kwargs["tail_lines"] = tail_lines
        return await self._call(
            "logs",
            self._core.read_namespaced_pod_log,
            name=pod_name,
            namespace=self.namespace,
            container=container_name,
            timestamps=False,
            **kwargs,
        )


class ResourceClient:
    """Pods, deployments and services of one namespace behind awaitable calls.

    The underlying ``kubernetes`` client is synchronous; every call runs in a
    worker thread so callers can fan out with ``asyncio.gather``.
    """

    def __init__(
        self,
        namespace: str = "default",
        kubeconfig: str | None = None,
        context: str | None = None,
        api_client: client.ApiClient | None = None,
    ) -> None:
        self.namespace = namespace
        if api_client is None:
            cfg = _load_kube_config(kubeconfig, context)
            api_client = client.ApiClient(cfg)
        core = client.CoreV1Api(api_client)
        apps = client.AppsV1Api(api_client)
        self.pods = PodResource(core, namespace)
        self.deployments = DeploymentResource(apps, namespace)
        self.services = ServiceResource(core, namespace)
