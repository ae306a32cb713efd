"""``coderun deploy``: deploy an image or build one from source.

Examples:
    coderun deploy nginx:latest --name my-nginx
    coderun deploy redis:latest --name my-redis --tcp-port 6379
    coderun deploy --build . --name my-app --dockerfile Dockerfile.prod
    coderun deploy postgres:15 --name my-postgres --tcp-port 5432 \\
        --storage-size 5Gi --storage-path /var/lib/postgresql/data
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from coderun.cli.context import get_cli_context
from coderun.cli.shared.console import CLIConsole, with_error_handling
from coderun.core.orchestrator import BuildOrchestrator
from coderun.core.pipeline import DeployPipeline
from coderun.core.request import (
    DEFAULT_DOCKERFILE,
    DeploymentFlags,
    DeploymentRequestValidator,
)

if TYPE_CHECKING:
    from coderun.api.models import DeploymentResponse

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def render_deployment(console: CLIConsole, deployment: DeploymentResponse) -> None:
    """Print the summary of a freshly created deployment."""
    console.ok("Deployment created successfully!")
    console.print(f"Deployment ID: {deployment.id}")
    console.print(f"App Name: {deployment.app_name}")
    console.print(f"Image: {deployment.image}")
    console.print(f"Replicas: {deployment.replicas}")

    if deployment.cpu_limit:
        console.print(f"CPU: {deployment.cpu_limit}")
    if deployment.memory_limit:
        console.print(f"Memory: {deployment.memory_limit}")
    if deployment.http_port is not None:
        console.print(f"HTTP Port: {deployment.http_port}")
    if deployment.tcp_port is not None:
        console.print(f"TCP Port: {deployment.tcp_port}")
    if deployment.tcp_node_port is not None:
        console.print(f"TCP NodePort: {deployment.tcp_node_port}")
    if deployment.tcp_connection:
        console.print(f"TCP Connection: {deployment.tcp_connection}")
    if deployment.url:
        console.print(f"HTTP URL: {deployment.url}")
    if deployment.persistent_volume_size and deployment.persistent_volume_mount_path:
        console.print(
            f"Storage: {deployment.persistent_volume_size} at "
            f"{deployment.persistent_volume_mount_path}"
        )
    if deployment.environment_vars:
        console.print(f"Environment Variables: {len(deployment.environment_vars)}")

    console.print(f"Status: {deployment.status}")
    if deployment.created_at is not None:
        console.print(f"Created: {deployment.created_at.strftime(TIMESTAMP_FORMAT)}")


@with_error_handling
def deploy(
    ctx: typer.Context,
    image: Annotated[
        str | None,
        typer.Argument(help="Image to deploy (omit when using --build)"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            help="Application name (required, 3-30 chars, lowercase "
            "letters/numbers/hyphens only)",
        ),
    ] = None,
    replicas: Annotated[
        int, typer.Option("--replicas", help="Number of replicas")
    ] = 1,
    cpu: Annotated[
        str | None,
        typer.Option("--cpu", help="CPU resource limit (e.g., 100m, 0.5)"),
    ] = None,
    memory: Annotated[
        str | None,
        typer.Option("--memory", help="Memory resource limit (e.g., 128Mi, 1Gi)"),
    ] = None,
    http_port: Annotated[
        int | None, typer.Option("--http-port", help="HTTP port to expose")
    ] = None,
    tcp_port: Annotated[
        int | None, typer.Option("--tcp-port", help="TCP port to expose")
    ] = None,
    env_file: Annotated[
        Path | None,
        typer.Option("--env-file", help="Path to environment file"),
    ] = None,
    storage_size: Annotated[
        str | None,
        typer.Option(
            "--storage-size",
            help="Size of persistent volume (e.g., '1Gi', '500Mi', '10Gi')",
        ),
    ] = None,
    storage_path: Annotated[
        str | None,
        typer.Option(
            "--storage-path",
            help="Path where to mount the volume (e.g., '/data', '/var/lib/mysql')",
        ),
    ] = None,
    build: Annotated[
        Path | None,
        typer.Option(
            "--build",
            help="Build from source. Specify the build context directory "
            "(e.g., './my-app' or '.')",
        ),
    ] = None,
    dockerfile: Annotated[
        str,
        typer.Option(
            "--dockerfile",
            help="Path to Dockerfile relative to build context",
        ),
    ] = DEFAULT_DOCKERFILE,
) -> None:
    """🚀 Deploy a container image or build one from source.

    Persistent storage (--storage-size with --storage-path) forces the
    deployment to a single replica.
    """
    cli = get_cli_context(ctx)
    console = cli.console

    flags = DeploymentFlags(
        name=name,
        image=image,
        replicas=replicas,
        cpu=cpu,
        memory=memory,
        http_port=http_port,
        tcp_port=tcp_port,
        env_file=env_file,
        storage_size=storage_size,
        storage_path=storage_path,
        build=build,
        dockerfile=dockerfile,
    )

    plan = DeploymentRequestValidator().build(flags)
    for warning in plan.warnings:
        console.warn(warning)
    if plan.env_file is not None:
        count = len(plan.spec.environment_vars or {})
        console.info(f"Loaded {count} environment variables from {plan.env_file}")

    with cli.client() as client:
        orchestrator = BuildOrchestrator(
            client,
            console,
            poll_interval=cli.settings.build_poll_interval,
            timeout=cli.settings.build_timeout,
        )
        deployment = DeployPipeline(client, console, orchestrator).run(plan)

    render_deployment(console, deployment)
    if plan.is_build:
        console.print("\n🚀 Successfully built and deployed from source!")
