"""Merge pod, deployment and service state into one application-keyed view."""

from __future__ import annotations

import logging
from datetime import timezone
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from kube_deployer.errors import AggregationError
from kube_deployer.observation.models import (
    AggregatedStatus,
    ContainerStatus,
    ExposureStatusRecord,
    ListFilter,
    PodPhase,
    PodStatusRecord,
    ResourceCondition,
    StatusFilters,
    WorkloadStatusRecord,
    WorkloadSummary,
)
from kube_deployer.results import gather_results

if TYPE_CHECKING:
    from kube_deployer.cluster.client import ResourceClient, ResourceList

logger = logging.getLogger(__name__)

R = TypeVar("R")


class MalformedResource(ValueError):
    """A listed object lacks a field needed to build its status entry."""


def _utc(ts: Any) -> Any:
    return ts.replace(tzinfo=timezone.utc) if ts is not None and ts.tzinfo is None else ts


def _parse_condition(c: Any) -> ResourceCondition:
    return ResourceCondition(
        type=c.type or "",
        status=c.status or "",
        reason=getattr(c, "reason", None),
        message=getattr(c, "message", None),
        last_transition=_utc(getattr(c, "last_transition_time", None)),
    )


def _parse_container_status(cs: Any) -> ContainerStatus:
    """Extract container state from V1ContainerStatus."""
    state = "unknown"
    reason = None
    message = None
    started_at = None
    if cs.state and cs.state.waiting:
        state = "waiting"
        reason = getattr(cs.state.waiting, "reason", None)
        message = getattr(cs.state.waiting, "message", None)
    elif cs.state and cs.state.running:
        state = "running"
        started_at = _utc(getattr(cs.state.running, "started_at", None))
    elif cs.state and cs.state.terminated:
        state = "terminated"
        reason = getattr(cs.state.terminated, "reason", None)
        message = getattr(cs.state.terminated, "message", None)
    return ContainerStatus(
        name=cs.name,
        image=getattr(cs, "image", None),
        state=state,
        reason=reason,
        message=message,
        ready=bool(getattr(cs, "ready", False)),
        restart_count=cs.restart_count or 0,
        started_at=started_at,
    )


def _name(item: Any) -> str:
    name = getattr(getattr(item, "metadata", None), "name", None)
    if not name:
        raise MalformedResource("missing metadata.name")
    return name


def _phase(value: str | None) -> PodPhase:
    try:
        return PodPhase(value or "Unknown")
    except ValueError:
        return PodPhase.UNKNOWN


def _project_all(kind: str, items: list[Any], project: Callable[[Any], R]) -> list[R]:
    """Apply ``project`` to every item; items it rejects are logged and left out."""
    out: list[R] = []
    for item in items:
        try:
            out.append(project(item))
        except (MalformedResource, AttributeError, TypeError) as e:
            name = getattr(getattr(item, "metadata", None), "name", "?")
            logger.warning("Skipping malformed %s %s: %s", kind, name, e)
    return out


def _reduce(kind: str, items: list[Any], project: Callable[[Any], tuple[str, R]]) -> dict[str, R]:
    """Key every well-formed item with ``project``."""
    return dict(_project_all(kind, items, project))


class StatusAggregator:
    """Reads current cluster state for deployed applications."""

    def __init__(self, client: ResourceClient, app_label: str = "app") -> None:
        self.client = client
        self.app_label = app_label

    def _project_pod(self, pod: Any) -> tuple[str, PodStatusRecord]:
        name = _name(pod)
        app = (pod.metadata.labels or {}).get(self.app_label)
        if not app:
            raise MalformedResource(f"missing label {self.app_label!r}")
        status = pod.status
        return app, PodStatusRecord(
            pod_name=name,
            phase=_phase(getattr(status, "phase", None)),
            conditions=[_parse_condition(c) for c in getattr(status, "conditions", None) or []],
            containers=[_parse_container_status(cs) for cs in getattr(status, "container_statuses", None) or []],
        )

    @staticmethod
    def _project_deployment(d: Any) -> tuple[str, WorkloadStatusRecord]:
        name = _name(d)
        conditions = getattr(d.status, "conditions", None) if d.status else None
        return name, WorkloadStatusRecord(
            workload_name=name,
            conditions=[_parse_condition(c) for c in conditions or []],
        )

    @staticmethod
    def _project_service(svc: Any) -> tuple[str, ExposureStatusRecord]:
        name = _name(svc)
        ports = getattr(svc.spec, "ports", None) if svc.spec else None
        if not ports:
            raise MalformedResource("service declares no ports")
        return name, ExposureStatusRecord(exposed_port=ports[0].node_port)

    @staticmethod
    def _project_summary(d: Any) -> WorkloadSummary:
        status = d.status
        return WorkloadSummary(
            name=_name(d),
            creation_timestamp=_utc(d.metadata.creation_timestamp),
            replicas=(status.replicas if status else None) or 0,
            available_replicas=(status.available_replicas if status else None) or 0,
        )

    async def get_all_status(self, filters: StatusFilters | None = None) -> AggregatedStatus:
        """
        Query pods, deployments and services concurrently and key each listing.

        Raises AggregationError if any of the three queries fails; there is no
        partial result.
        """
        f = filters or StatusFilters()
        kinds = ("pods", "deployments", "services")
        results = await gather_results(
            self.client.pods.info(f.pods),
            self.client.deployments.info(f.deployments),
            self.client.services.info(f.services),
        )

        failures: dict[str, str] = {}
        listings: dict[str, ResourceList] = {}
        for kind, result in zip(kinds, results):
            if not result.ok:
                failures[kind] = str(result.error)
                continue
            listing = result.unwrap()
            if not listing.ok:
                failures[kind] = f"HTTP {listing.status_code}: {listing.reason or ''}".strip()
                continue
            listings[kind] = listing
        if failures:
            logger.warning("Status query failed: %s", failures)
            raise AggregationError(failures)

        return AggregatedStatus(
            pod_status_map=_reduce("pod", listings["pods"].items, self._project_pod),
            workload_status_map=_reduce("deployment", listings["deployments"].items, self._project_deployment),
            exposure_status_map=_reduce("service", listings["services"].items, self._project_service),
        )

    async def get_deployments(self, filters: ListFilter | None = None) -> list[WorkloadSummary]:
        """List deployments; a non-success response is logged and yields an empty list."""
        listing = await self.client.deployments.info(filters)
        if not listing.ok:
            logger.warning("Deployment listing returned HTTP %s: %s", listing.status_code, listing.reason)
            return []
        return _project_all("deployment", listing.items, self._project_summary)
