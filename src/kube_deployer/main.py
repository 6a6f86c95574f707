"""CLI entrypoint for kube-deployer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from kube_deployer import __version__
from kube_deployer.cluster import ResourceClient
from kube_deployer.config import Settings, get_settings
from kube_deployer.deployment import (
    DeploymentOrchestrator,
    DeploymentRequest,
    DeployMode,
    HealthCheck,
    ImagePullPolicy,
)
from kube_deployer.errors import KubeDeployerError
from kube_deployer.observation import ListFilter, LogCollector, StatusAggregator, StatusFilters
from kube_deployer.report import print_deployments, print_logs, print_outcome, print_status


def _env_pair(value: str) -> tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    key, val = value.split("=", 1)
    return key, val


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deploy and monitor containerized applications on Kubernetes.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="Kubernetes namespace to operate in (default: from env or 'default')",
    )
    parser.add_argument(
        "--kubeconfig",
        type=Path,
        default=None,
        help="Path to kubeconfig (default: KUBECONFIG env or ~/.kube/config)",
    )
    parser.add_argument("--context", default=None, help="Kubernetes context to use")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    deploy = sub.add_parser("deploy", help="Create the deployment and the service exposing it")
    deploy.add_argument("application_code")
    deploy.add_argument("--image", required=True)
    deploy.add_argument("--port", type=int, required=True)
    deploy.add_argument(
        "--image-pull-policy",
        choices=[p.value for p in ImagePullPolicy],
        default=ImagePullPolicy.IF_NOT_PRESENT.value,
    )
    deploy.add_argument("--health-path", default=None, help="Enable an HTTP health check on this path")
    deploy.add_argument("--manual", action="store_true", help="Mark the deployment as manually triggered")
    deploy.add_argument("--replicas", type=int, default=None)
    deploy.add_argument("--env", "-e", type=_env_pair, action="append", default=[], metavar="KEY=VALUE")

    delete = sub.add_parser("delete", help="Remove the service and the deployment of an application")
    delete.add_argument("application_code")

    status = sub.add_parser("status", help="Show pods, deployments and services per application")
    status.add_argument("--selector", "-l", default=None, help="Label selector applied to all kinds")

    listing = sub.add_parser("list", help="List deployments")
    listing.add_argument("--selector", "-l", default=None)

    logs = sub.add_parser("logs", help="Show recent logs of the running containers of a pod")
    logs.add_argument("application_code", help="Application whose pod logs to show")

    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    client = ResourceClient(
        namespace=args.namespace or settings.namespace,
        kubeconfig=str(settings.kubeconfig) if settings.kubeconfig else None,
        context=args.context or settings.context,
    )

    if args.command in ("deploy", "delete"):
        orchestrator = DeploymentOrchestrator(client, settings.deploy)
        if args.command == "deploy":
            request = DeploymentRequest(
                application_code=args.application_code,
                image=args.image,
                port=args.port,
                image_pull_policy=ImagePullPolicy(args.image_pull_policy),
                health_check=HealthCheck(path=args.health_path) if args.health_path else None,
                deploy_mode=DeployMode.MANUAL if args.manual else DeployMode.AUTOMATIC,
                env=dict(args.env),
                replicas=args.replicas,
            )
            outcome = await orchestrator.deploy(request)
        else:
            outcome = await orchestrator.delete(args.application_code)
        print_outcome(args.command, args.application_code, outcome, console)
        return 0 if outcome.success else 1

    aggregator = StatusAggregator(client, app_label=settings.deploy.app_label)
    if args.command == "status":
        selector = ListFilter(label_selector=args.selector)
        status = await aggregator.get_all_status(
            StatusFilters(pods=selector, deployments=selector, services=selector)
        )
        print_status(status, console)
        return 0

    if args.command == "list":
        print_deployments(await aggregator.get_deployments(ListFilter(label_selector=args.selector)), console)
        return 0

    # logs
    status = await aggregator.get_all_status(
        StatusFilters(pods=ListFilter(label_selector=f"{settings.deploy.app_label}={args.application_code}"))
    )
    pod = status.pod_status_map.get(args.application_code)
    if pod is None:
        console.print(f"No pod found for {args.application_code}")
        return 1
    report = await LogCollector(client, settings.log_output).get_container_logs(pod.pod_name, pod.containers)
    print_logs(pod.pod_name, report, console)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for kube-deployer CLI."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    logger = logging.getLogger("kube_deployer")
    if not args.verbose:
        logger.setLevel(logging.WARNING)

    try:
        settings = get_settings()
        if args.kubeconfig:
            settings.kubeconfig = args.kubeconfig
        return asyncio.run(_run(args, settings, Console()))
    except (KubeDeployerError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logging.exception("kube-deployer failed")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
