"""Cluster access: async per-kind handles over the Kubernetes API."""

from kube_deployer.cluster.client import (
    DeploymentResource,
    PodResource,
    ResourceClient,
    ResourceList,
    ServiceResource,
)

__all__ = [
    "DeploymentResource",
    "PodResource",
    "ResourceClient",
    "ResourceList",
    "ServiceResource",
]
