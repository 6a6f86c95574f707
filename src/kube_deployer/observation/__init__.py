"""Observation layer: aggregated status and container logs of deployed applications."""

from kube_deployer.observation.aggregator import StatusAggregator
from kube_deployer.observation.logs import LogCollector
from kube_deployer.observation.models import (
    AggregatedStatus,
    ContainerStatus,
    ExposureStatusRecord,
    ListFilter,
    PodPhase,
    PodStatusRecord,
    StatusFilters,
    WorkloadStatusRecord,
    WorkloadSummary,
)

__all__ = [
    "AggregatedStatus",
    "ContainerStatus",
    "ExposureStatusRecord",
    "ListFilter",
    "LogCollector",
    "PodPhase",
    "PodStatusRecord",
    "StatusAggregator",
    "StatusFilters",
    "WorkloadStatusRecord",
    "WorkloadSummary",
]
