"""Inputs and outputs of the deployment saga."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ImagePullPolicy(str, Enum):
    """Container image pull policy."""

    ALWAYS = "Always"
    IF_NOT_PRESENT = "IfNotPresent"
    NEVER = "Never"


class DeployMode(str, Enum):
    """How the deployment was triggered; recorded on the created resources."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"


class HealthCheck(BaseModel):
    """Probe configuration applied as both liveness and readiness probe."""

    model_config = ConfigDict(frozen=True)

    type: Literal["http", "tcp"] = "http"
    path: str = Field(default="/health", description="HTTP path, ignored for tcp probes")
    port: int | None = Field(default=None, ge=1, le=65535, description="Defaults to the request port")
    initial_delay_seconds: int = Field(default=30, ge=0)
    period_seconds: int = Field(default=10, ge=1)
    timeout_seconds: int = Field(default=1, ge=1)
    failure_threshold: int = Field(default=3, ge=1)


class DeploymentRequest(BaseModel):
    """Everything needed to deploy one application."""

    model_config = ConfigDict(frozen=True)

    application_code: str = Field(
        ...,
        min_length=1,
        max_length=63,
        pattern=r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$",
        description="Unique application identifier; names the deployment and the service",
    )
    image: str = Field(..., min_length=1, description="Container image reference, e.g. repo/app:1.0")
    port: int = Field(..., ge=1, le=65535, description="Port the container listens on")
    image_pull_policy: ImagePullPolicy = ImagePullPolicy.IF_NOT_PRESENT
    health_check: HealthCheck | None = None
    deploy_mode: DeployMode = DeployMode.AUTOMATIC
    env: dict[str, str] = Field(default_factory=dict)
    replicas: int | None = Field(default=None, ge=0, description="Defaults to the cluster-wide setting")


class DeploymentOutcome(BaseModel):
    """Result of one deploy or delete call; ``message`` is only set on failure."""

    success: bool
    message: str = ""

    @classmethod
    def ok(cls) -> DeploymentOutcome:
        return cls(success=True)

    @classmethod
    def failed(cls, message: str) -> DeploymentOutcome:
        return cls(success=False, message=message)
