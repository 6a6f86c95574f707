"""Deployment saga: create workload → create exposure, rolling back the workload on failure."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kube_deployer.config import DeployDefaults
from kube_deployer.deployment.manifests import build_manifests
from kube_deployer.deployment.models import DeploymentOutcome, DeploymentRequest
from kube_deployer.errors import CompensationFailure, ManifestError, ResourceClientError

if TYPE_CHECKING:
    from kube_deployer.cluster.client import ResourceClient

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """Deploys and tears down applications as a Deployment plus a NodePort Service."""

    def __init__(self, client: ResourceClient, defaults: DeployDefaults | None = None) -> None:
        self.client = client
        self.defaults = defaults or DeployDefaults()

    async def deploy(self, request: DeploymentRequest) -> DeploymentOutcome:
        """
        Create the workload, then the service exposing it.

        If the service cannot be created the workload is deleted again, so a
        failed deploy never leaves a half-exposed application behind. Nothing
        is retried.
        """
        app_code = request.application_code
        try:
            manifests = build_manifests(request, self.defaults)
        except ManifestError as e:
            logger.error("Cannot build manifests for %s: %s", app_code, e)
            return DeploymentOutcome.failed(str(e))

        logger.info("Creating deployment %s (image=%s)", app_code, request.image)
        try:
            await self.client.deployments.create(manifests.workload)
        except ResourceClientError as e:
            logger.error("Create deployment %s failed: %s", app_code, e)
            return DeploymentOutcome.failed(e.message)
        except Exception as e:
            logger.exception("Create deployment %s failed", app_code)
            return DeploymentOutcome.failed(str(e))
        logger.info("Created deployment %s", app_code)

        # From here on the deployment exists; every failure path must delete it.
        logger.info("Creating service %s", app_code)
        try:
            await self.client.services.create(manifests.exposure)
        except ResourceClientError as e:
            logger.error("Create service %s failed: %s", app_code, e)
            await self._rollback(app_code)
            return DeploymentOutcome.failed(e.message)
        except Exception as e:
            logger.exception("Create service %s failed", app_code)
            await self._rollback(app_code)
            return DeploymentOutcome.failed(str(e))
        except BaseException:
            logger.warning("Deploy of %s interrupted; rolling back", app_code)
            await self._rollback(app_code)
            raise
        logger.info("Created service %s; deploy of %s done", app_code, app_code)
        return DeploymentOutcome.ok()

    async def _rollback(self, app_code: str) -> None:
        """Delete the deployment created by a failed deploy. Errors are logged, not raised."""
        try:
            await self.client.deployments.delete(app_code)
        except Exception as e:
            logger.error("%s", CompensationFailure(app_code, e))
        else:
            logger.info("Rolled back deployment %s", app_code)

    async def delete(self, application_code: str) -> DeploymentOutcome:
        """Remove the service, then the deployment. Resources that are already gone count as deleted."""
        errors: list[str] = []
        for resource in (self.client.services, self.client.deployments):
            try:
                await resource.delete(application_code)
            except ResourceClientError as e:
                if e.not_found:
                    logger.info("%s %s already absent", resource.kind, application_code)
                    continue
                logger.error("Delete %s %s failed: %s", resource.kind, application_code, e)
                errors.append(e.message)
            else:
                logger.info("Deleted %s %s", resource.kind, application_code)
        if errors:
            return DeploymentOutcome.failed("; ".join(errors))
        return DeploymentOutcome.ok()
