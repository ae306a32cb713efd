"""Local configuration commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from coderun.cli.context import get_cli_context
from coderun.cli.shared.console import with_error_handling

config_app = typer.Typer(
    name="config",
    help="⚙️  Local CLI configuration.",
    no_args_is_help=True,
)


def _mask(token: str | None) -> str:
    if not token:
        return "[dim]not set[/dim]"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}…{token[-4:]}"


@config_app.command()
@with_error_handling
def show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    cli = get_cli_context(ctx)
    settings = cli.settings

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Config file", str(cli.store.path))
    table.add_row("Base URL", settings.base_url)
    table.add_row("Access token", _mask(settings.access_token))
    table.add_row("Build poll interval", f"{settings.build_poll_interval:g}s")
    table.add_row(
        "Build timeout",
        f"{settings.build_timeout:g}s" if settings.build_timeout else "unbounded",
    )
    cli.console.print(table)


@config_app.command("set-url")
@with_error_handling
def set_url(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="Platform base URL")],
) -> None:
    """Point the CLI at a different platform URL."""
    cli = get_cli_context(ctx)
    updated = cli.store.update(base_url=url)
    cli.console.ok(f"Base URL set to {updated.base_url}")


@config_app.command("set-build-timeout")
@with_error_handling
def set_build_timeout(
    ctx: typer.Context,
    seconds: Annotated[
        float,
        typer.Argument(help="Seconds to wait for a build; 0 waits indefinitely"),
    ],
) -> None:
    """Limit how long ``deploy --build`` waits for a remote build."""
    cli = get_cli_context(ctx)
    updated = cli.store.update(build_timeout=seconds if seconds > 0 else None)
    if updated.build_timeout is None:
        cli.console.ok("Build polling is unbounded")
    else:
        cli.console.ok(f"Build timeout set to {updated.build_timeout:g}s")
