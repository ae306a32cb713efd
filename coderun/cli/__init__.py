"""Main CLI application module.

This module provides the ``coderun`` entry point. Commands map one-to-one
to platform operations:

- login / logout / whoami: account and token management
- deploy: deploy an image or build one from local source
- list / status / logs / delete: manage existing deployments
- config: local settings (platform URL, build timeout)
"""

import sys
from typing import Annotated

import typer
from loguru import logger

from coderun import __version__

from .commands import (
    config_app,
    delete,
    deploy,
    list_deployments,
    login,
    logout,
    logs,
    status,
    whoami,
)

# Create the main CLI application
app = typer.Typer(
    help="🚢 CodeRun CLI - deploy and manage containers on the CodeRun platform",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def configure_logging(verbose: bool) -> None:
    """Route diagnostic logs to stderr; DEBUG with --verbose, else warnings."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}",
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"coderun {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on stderr"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = False,
) -> None:
    """CodeRun Container-as-a-Service CLI."""
    configure_logging(verbose)


# Account commands
app.command("login")(login)
app.command("logout")(logout)
app.command("whoami")(whoami)

# Deployment commands
app.command("deploy")(deploy)
app.command("list")(list_deployments)
app.command("status")(status)
app.command("logs")(logs)
app.command("delete")(delete)

# Configuration
app.add_typer(config_app, name="config")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
