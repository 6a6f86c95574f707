"""Configuration and environment for the deployer."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeployDefaults(BaseModel):
    """Cluster-wide defaults used to materialize manifests from a deployment request."""

    app_label: str = Field(
        default="app",
        description="Label key carrying the application code on pods, deployments and services",
    )
    replicas: int = Field(default=1, ge=0, description="Replica count when the request does not set one")
    service_type: Literal["NodePort", "LoadBalancer"] = Field(
        default="NodePort",
        description="Service type used to publish the workload outside the cluster",
    )
    protocol: Literal["TCP", "UDP"] = Field(default="TCP")
    port_name: str = Field(default="http", description="Name of the container and service port")
    revision_history_limit: int = Field(default=3, ge=0)
    cpu_request: str | None = Field(default="100m")
    memory_request: str | None = Field(default="128Mi")
    cpu_limit: str | None = Field(default="1")
    memory_limit: str | None = Field(default="512Mi")
    image_pull_secrets: list[str] = Field(
        default_factory=list,
        description="Names of docker-registry secrets attached to every pod",
    )
    extra_labels: dict[str, str] = Field(
        default_factory=dict,
        description="Labels added to every resource created by the deployer",
    )


class LogOutputLimits(BaseModel):
    """Bounds applied to every container log fetch."""

    since_seconds: int = Field(default=3600, ge=1, description="Only return logs newer than this")
    tail_lines: int = Field(default=1000, ge=1, description="Maximum number of lines per container")


class Settings(BaseSettings):
    """Deployer settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_prefix="KUBE_DEPLOYER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Kubernetes
    kubeconfig: Path | None = Field(
        default=None,
        description="Path to kubeconfig; uses KUBECONFIG env or default location if unset",
    )
    context: str | None = Field(default=None, description="Kubernetes context to use")
    namespace: str = Field(default="default", description="Namespace to operate in")

    deploy: DeployDefaults = Field(default_factory=DeployDefaults)
    log_output: LogOutputLimits = Field(default_factory=LogOutputLimits)


def get_settings() -> Settings:
    """Return validated settings instance."""
    return Settings()
