"""Structured models for Kubernetes cluster state returned to callers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PodPhase(str, Enum):
    """Pod lifecycle phase as reported by the kubelet."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ResourceCondition(BaseModel):
    """Pod or deployment condition summary."""

    type: str
    status: str
    reason: str | None = None
    message: str | None = None
    last_transition: datetime | None = None


class ContainerStatus(BaseModel):
    """Container state summary (waiting, running, terminated)."""

    name: str
    image: str | None = None
    state: str = "unknown"  # waiting | running | terminated | unknown
    reason: str | None = None
    message: str | None = None
    ready: bool = False
    restart_count: int = 0
    started_at: datetime | None = None

    @property
    def running(self) -> bool:
        return self.state == "running"


class PodStatusRecord(BaseModel):
    """Current state of the pod backing one application."""

    pod_name: str
    phase: PodPhase = PodPhase.UNKNOWN
    conditions: list[ResourceCondition] = Field(default_factory=list)
    containers: list[ContainerStatus] = Field(default_factory=list)


class WorkloadStatusRecord(BaseModel):
    """Rollout conditions of one deployment."""

    workload_name: str
    conditions: list[ResourceCondition] = Field(default_factory=list)


class ExposureStatusRecord(BaseModel):
    """External port published by one service (None when the cluster has not assigned one)."""

    exposed_port: int | None = None


class AggregatedStatus(BaseModel):
    """Pods keyed by application label; deployments and services keyed by name."""

    pod_status_map: dict[str, PodStatusRecord] = Field(default_factory=dict)
    workload_status_map: dict[str, WorkloadStatusRecord] = Field(default_factory=dict)
    exposure_status_map: dict[str, ExposureStatusRecord] = Field(default_factory=dict)


class ListFilter(BaseModel):
    """Server-side filter for a list call on one resource kind."""

    label_selector: str | None = None
    field_selector: str | None = None
    limit: int | None = Field(default=None, ge=1)

    def as_kwargs(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class StatusFilters(BaseModel):
    """Per-kind filters for a status read."""

    pods: ListFilter = Field(default_factory=ListFilter)
    deployments: ListFilter = Field(default_factory=ListFilter)
    services: ListFilter = Field(default_factory=ListFilter)


class WorkloadSummary(BaseModel):
    """Deployment listing entry."""

    name: str
    creation_timestamp: datetime | None = None
    replicas: int = 0
    available_replicas: int = 0


class LogFetchRequest(BaseModel):
    """One container whose logs should be fetched."""

    pod_name: str
    container_name: str
