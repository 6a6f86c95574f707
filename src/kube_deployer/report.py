"""Rich rendering of deploy outcomes, status views and log reports."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kube_deployer.deployment.models import DeploymentOutcome
from kube_deployer.observation.models import AggregatedStatus, WorkloadSummary


def print_outcome(action: str, target: str, outcome: DeploymentOutcome, console: Console | None = None) -> None:
    c = console or Console()
    if outcome.success:
        c.print(f"[green]✔[/green] {action} [bold]{target}[/bold] succeeded")
    else:
        c.print(f"[red]✘[/red] {action} [bold]{target}[/bold] failed: {outcome.message}")


def _conditions_text(conditions: list) -> str:
    return ", ".join(f"{c.type}={c.status}" for c in conditions) or "—"


def print_status(status: AggregatedStatus, console: Console | None = None) -> None:
    """Print one row per application, joining pod, deployment and service state."""
    c = console or Console()
    table = Table(title="Applications")
    table.add_column("Application", style="bold")
    table.add_column("Pod")
    table.add_column("Phase")
    table.add_column("Containers")
    table.add_column("Deployment conditions")
    table.add_column("Node port", justify="right")

    apps = sorted(
        set(status.pod_status_map) | set(status.workload_status_map) | set(status.exposure_status_map)
    )
    for app in apps:
        pod = status.pod_status_map.get(app)
        workload = status.workload_status_map.get(app)
        exposure = status.exposure_status_map.get(app)
        containers = (
            ", ".join(f"{cs.name}:{cs.state}" + (f"({cs.reason})" if cs.reason else "") for cs in pod.containers)
            if pod
            else ""
        )
        table.add_row(
            app,
            pod.pod_name if pod else "—",
            pod.phase.value if pod else "—",
            containers or "—",
            _conditions_text(workload.conditions) if workload else "—",
            str(exposure.exposed_port) if exposure and exposure.exposed_port else "—",
        )
    c.print(table)


def print_deployments(deployments: list[WorkloadSummary], console: Console | None = None) -> None:
    c = console or Console()
    table = Table(title="Deployments")
    table.add_column("Name", style="bold")
    table.add_column("Created")
    table.add_column("Available", justify="right")
    for d in deployments:
        created = d.creation_timestamp.isoformat() if d.creation_timestamp else "—"
        table.add_row(d.name, created, f"{d.available_replicas}/{d.replicas}")
    c.print(table)


def print_logs(pod_name: str, report: str, console: Console | None = None) -> None:
    c = console or Console()
    c.print(Panel(report, title=f"Logs: {pod_name}", border_style="blue"))
