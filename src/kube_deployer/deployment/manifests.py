"""Turn a deployment request plus cluster defaults into Kubernetes manifests."""

from __future__ import annotations

from dataclasses import dataclass

from kubernetes import client

from kube_deployer.config import DeployDefaults
from kube_deployer.deployment.models import DeploymentRequest, HealthCheck
from kube_deployer.errors import ManifestError

DEPLOY_MODE_ANNOTATION = "kube-deployer/deploy-mode"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


@dataclass(frozen=True)
class ManifestPair:
    """Workload and exposure manifests for one application."""

    workload: client.V1Deployment
    exposure: client.V1Service


def _resources(defaults: DeployDefaults) -> client.V1ResourceRequirements | None:
    requests = {k: v for k, v in (("cpu", defaults.cpu_request), ("memory", defaults.memory_request)) if v}
    limits = {k: v for k, v in (("cpu", defaults.cpu_limit), ("memory", defaults.memory_limit)) if v}
    if not requests and not limits:
        return None
    return client.V1ResourceRequirements(requests=requests or None, limits=limits or None)


def _probe(check: HealthCheck, port: int) -> client.V1Probe:
    target = check.port or port
    probe = client.V1Probe(
        initial_delay_seconds=check.initial_delay_seconds,
        period_seconds=check.period_seconds,
        timeout_seconds=check.timeout_seconds,
        failure_threshold=check.failure_threshold,
    )
    if check.type == "tcp":
        probe.tcp_socket = client.V1TCPSocketAction(port=target)
    else:
        probe.http_get = client.V1HTTPGetAction(path=check.path, port=target)
    return probe


def build_manifests(request: DeploymentRequest, defaults: DeployDefaults) -> ManifestPair:
    """Build the Deployment and the Service that publishes it.

    Both resources are named after the application code and share its label,
    so the Service selects exactly the pods of this Deployment. The Service
    declares no node port; the cluster assigns one on creation.
    """
    name = request.application_code
    if defaults.app_label in defaults.extra_labels:
        raise ManifestError(f"extra_labels must not override the application label {defaults.app_label!r}")

    selector = {defaults.app_label: name}
    labels = {**defaults.extra_labels, MANAGED_BY_LABEL: "kube-deployer", **selector}
    annotations = {DEPLOY_MODE_ANNOTATION: request.deploy_mode.value}

    container = client.V1Container(
        name=name,
        image=request.image,
        image_pull_policy=request.image_pull_policy.value,
        ports=[
            client.V1ContainerPort(
                name=defaults.port_name,
                container_port=request.port,
                protocol=defaults.protocol,
            )
        ],
        env=[client.V1EnvVar(name=k, value=v) for k, v in sorted(request.env.items())] or None,
        resources=_resources(defaults),
    )
    if request.health_check is not None:
        container.liveness_probe = _probe(request.health_check, request.port)
        container.readiness_probe = _probe(request.health_check, request.port)

    pod_spec = client.V1PodSpec(
        containers=[container],
        image_pull_secrets=[client.V1LocalObjectReference(name=s) for s in defaults.image_pull_secrets] or None,
    )

    workload = client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(name=name, labels=labels, annotations=annotations),
        spec=client.V1DeploymentSpec(
            replicas=request.replicas if request.replicas is not None else defaults.replicas,
            revision_history_limit=defaults.revision_history_limit,
            selector=client.V1LabelSelector(match_labels=selector),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=labels, annotations=annotations),
                spec=pod_spec,
            ),
        ),
    )

    exposure = client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=client.V1ObjectMeta(name=name, labels=labels, annotations=annotations),
        spec=client.V1ServiceSpec(
            type=defaults.service_type,
            selector=selector,
            ports=[
                client.V1ServicePort(
                    name=defaults.port_name,
                    port=request.port,
                    target_port=request.port,
                    protocol=defaults.protocol,
                )
            ],
        ),
    )
    return ManifestPair(workload=workload, exposure=exposure)
