"""Deployment layer: manifest templating and the create/rollback saga."""

from kube_deployer.deployment.manifests import ManifestPair, build_manifests
from kube_deployer.deployment.models import (
    DeploymentOutcome,
    DeploymentRequest,
    DeployMode,
    HealthCheck,
    ImagePullPolicy,
)
from kube_deployer.deployment.orchestrator import DeploymentOrchestrator

__all__ = [
    "DeploymentOrchestrator",
    "DeploymentOutcome",
    "DeploymentRequest",
    "DeployMode",
    "HealthCheck",
    "ImagePullPolicy",
    "ManifestPair",
    "build_manifests",
]
