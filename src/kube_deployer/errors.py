"""Exceptions raised by the deployer."""

from __future__ import annotations


class KubeDeployerError(Exception):
    """Base class for all deployer errors."""


class ManifestError(KubeDeployerError):
    """A deployment request could not be turned into resource manifests."""


class ResourceClientError(KubeDeployerError):
    """A remote call against the cluster API failed.

    ``status`` is the HTTP status reported by the API server, or ``None`` when
    the request never got a response (connection refused, TLS failure, ...).
    """

    def __init__(
        self,
        kind: str,
        operation: str,
        message: str,
        status: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.operation = operation
        self.message = message
        self.status = status
        self.reason = reason

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        return self.message


class CompensationFailure(KubeDeployerError):
    """Rolling back a partially applied deployment failed."""

    def __init__(self, application_code: str, cause: BaseException) -> None:
        super().__init__(f"rollback of {application_code} failed: {cause}")
        self.application_code = application_code
        self.cause = cause


class AggregationError(KubeDeployerError):
    """One of the concurrent status queries failed, so no status can be returned."""

    def __init__(self, failures: dict[str, str]) -> None:
        detail = ", ".join(f"{kind}: {msg}" for kind, msg in failures.items())
        super().__init__(f"status query failed ({detail})")
        self.failures = failures
