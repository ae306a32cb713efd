"""Deployment inspection and management commands.

This module provides ``list``, ``status``, ``logs`` and ``delete`` for
deployments that already exist on the platform.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import typer
from rich.markup import escape
from rich.table import Table

from coderun.cli.context import get_cli_context
from coderun.cli.shared.console import with_error_handling
from coderun.core.errors import CodeRunError

if TYPE_CHECKING:
    from coderun.api.client import PlatformClient
    from coderun.api.models import DeploymentResponse, DeploymentStatus
    from coderun.cli.shared.console import CLIConsole

LIST_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def connection_string(deployment: DeploymentResponse) -> str:
    """Describe how to reach a deployment.

    Prefers the URL or TCP connection string reported by the platform and
    falls back to the exposed port while those are still being provisioned.
    """
    if deployment.url:
        return deployment.url
    if deployment.http_port is not None:
        return f"HTTP :{deployment.http_port} (URL pending)"
    if deployment.tcp_connection:
        return deployment.tcp_connection
    if deployment.tcp_port is not None and deployment.tcp_node_port is not None:
        return f"NodePort {deployment.tcp_node_port}"
    return "Internal only"


def build_deployments_table(deployments: list[DeploymentResponse]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    for column in ("ID", "App Name", "Image", "Replicas", "Status", "Connection", "Created"):
        table.add_column(column, no_wrap=True, overflow="fold")

    for deployment in deployments:
        created = (
            deployment.created_at.strftime(LIST_TIMESTAMP_FORMAT)
            if deployment.created_at
            else "-"
        )
        table.add_row(
            deployment.id,
            deployment.app_name,
            deployment.image,
            str(deployment.replicas),
            deployment.status,
            connection_string(deployment),
            created,
        )
    return table


def render_status(console: CLIConsole, status: DeploymentStatus) -> None:
    console.print(f"\n📊 Deployment Status for '{status.app_name}'")
    console.print("─" * 33)
    console.print(f"Status: {status.status}")
    console.print(f"Replicas Ready: {status.replicas_ready}/{status.replicas_desired}")

    if status.url:
        console.print(f"URL: {status.url}")
        cert = status.tls_certificate
        if cert is not None:
            if cert.ready:
                console.print("🔐 TLS Certificate: ✅ Ready")
            else:
                console.print(f"🔐 TLS Certificate: ⏳ {escape(cert.status)}")
                if cert.message:
                    console.print(f"    📝 {escape(cert.message)}")
        if status.url_note:
            console.print(f"    {escape(status.url_note)}")

    if status.tcp_connection:
        console.print(f"TCP Connection: {status.tcp_connection}")

    if status.persistent_volume_size and status.persistent_volume_mount_path:
        console.print("💾 Persistent Storage:")
        console.print(f"    Size: {status.persistent_volume_size}")
        console.print(f"    Mount Path: {status.persistent_volume_mount_path}")

    if status.pods:
        console.print("\n📦 Pods:")
        for index, pod in enumerate(status.pods, 1):
            console.print(f"  Pod {index}:")
            for key, value in pod.items():
                console.print(f"    {key}: {value}")


def resolve_deployment_id(client: PlatformClient, app_name: str) -> str:
    """Find the deployment ID of ``app_name``.

    Raises:
        CodeRunError: If no deployment has that app name
    """
    for deployment in client.list_deployments().deployments:
        if deployment.app_name == app_name:
            return deployment.id
    raise CodeRunError(f"No deployment found with app name: {app_name}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@with_error_handling
def list_deployments(ctx: typer.Context) -> None:
    """📋 List all deployments in your account."""
    cli = get_cli_context(ctx)

    with cli.client() as client:
        with cli.console.status("Fetching deployments..."):
            deployment_list = client.list_deployments()

    if not deployment_list.deployments:
        cli.console.print("No deployments found.")
        return

    cli.console.print(build_deployments_table(deployment_list.deployments))


@with_error_handling
def status(
    ctx: typer.Context,
    deployment_id: Annotated[str, typer.Argument(help="Deployment ID")],
) -> None:
    """📊 Show the status of a deployment."""
    cli = get_cli_context(ctx)

    cli.console.info(f"Getting status for deployment '{deployment_id}'...")
    with cli.client() as client:
        deployment_status = client.get_deployment_status(deployment_id)

    render_status(cli.console, deployment_status)


@with_error_handling
def logs(
    ctx: typer.Context,
    deployment_id: Annotated[str, typer.Argument(help="Deployment ID")],
    lines: Annotated[
        int,
        typer.Option(
            "--lines",
            "-n",
            min=1,
            help="Number of lines to show from the end of the logs",
        ),
    ] = 100,
) -> None:
    """📜 Show recent logs from all pods of a deployment."""
    cli = get_cli_context(ctx)
    console = cli.console

    console.info(f"Fetching logs for deployment {deployment_id}...")
    with cli.client() as client:
        response = client.get_deployment_logs(deployment_id, lines)

    console.print(f"📦 Deployment: {response.app_name} ({response.deployment_id})")
    console.print(f"🐳 Image: {response.image}")
    console.print(f"📊 Status: {response.status}")
    console.print(f"🔢 Total Pods: {response.total_pods}")
    console.print(f"📝 Lines: {lines}")
    if response.error:
        console.warn(escape(response.error))

    if not response.logs:
        console.info("No pods found or no logs available")
        return

    for pod_name, pod in response.logs.items():
        body = "\n".join(
            f"   {line}" for line in pod.logs.splitlines() if line.strip()
        )
        console.block(
            f"🚀 Pod: {pod_name} (Status: {pod.status}, Restarts: {pod.restart_count})",
            body,
            empty="(No logs available)",
        )


@with_error_handling
def delete(
    ctx: typer.Context,
    identifier: Annotated[
        str, typer.Argument(help="Deployment ID, or app name with --by-name")
    ],
    by_name: Annotated[
        bool,
        typer.Option("--by-name", help="Delete by app name instead of ID"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt"),
    ] = False,
) -> None:
    """🗑️  Delete a deployment by ID or app name."""
    cli = get_cli_context(ctx)
    console = cli.console

    with cli.client() as client:
        if by_name:
            console.info(f"Looking up deployment for app '{identifier}'...")
            deployment_id = resolve_deployment_id(client, identifier)
        else:
            deployment_id = identifier

        if not console.confirm_action(
            f"Delete deployment {deployment_id}",
            details="The application and its resources will be removed.",
            force=force,
        ):
            console.print("[dim]Deletion cancelled.[/dim]")
            raise typer.Exit(1)

        console.info(f"Deleting deployment {deployment_id}...")
        client.delete_deployment(deployment_id)

    console.ok(f"Deployment {deployment_id} deleted successfully!")
