"""Account commands: ``login``, ``logout`` and ``whoami``."""

from __future__ import annotations

from typing import Annotated

import typer

from coderun.cli.context import get_cli_context
from coderun.cli.shared.console import with_error_handling


@with_error_handling
def login(
    ctx: typer.Context,
    email: Annotated[
        str | None,
        typer.Option("--email", "-e", help="Account email (prompted if omitted)"),
    ] = None,
) -> None:
    """🔑 Log in with your email and password and store the access token."""
    cli = get_cli_context(ctx)

    if not email:
        email = typer.prompt("Email")
    password = typer.prompt("Password", hide_input=True)

    cli.console.info("Logging in...")
    with cli.client(authenticated=False) as client:
        response = client.login(email, password)

    cli.store.update(access_token=response.access_token)
    cli.console.ok("Successfully logged in!")
    cli.console.print(f"[dim]Token saved to {cli.store.path}[/dim]")


@with_error_handling
def logout(ctx: typer.Context) -> None:
    """🚪 Forget the stored access token."""
    cli = get_cli_context(ctx)
    cli.store.update(access_token=None)
    cli.console.ok("Logged out. Access token removed from config file.")


@with_error_handling
def whoami(ctx: typer.Context) -> None:
    """👤 Show the account the stored token belongs to."""
    cli = get_cli_context(ctx)

    with cli.client() as client:
        user = client.get_user_info()

    cli.console.print(f"Email: {user.email}")
    cli.console.print(f"User ID: {user.id}")
    if user.namespace:
        cli.console.print(f"Namespace: {user.namespace}")
    cli.console.print(f"Active: {'yes' if user.is_active else 'no'}")
    cli.console.print(f"Platform: {cli.settings.base_url}")
