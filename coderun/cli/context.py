"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass

import click
import typer

from coderun.api.client import PlatformClient
from coderun.cli.shared.console import CLIConsole, console
from coderun.config.settings import CLISettings, SettingsStore
from coderun.core.errors import NotAuthenticated


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    store: SettingsStore
    settings: CLISettings

    def client(self, authenticated: bool = True) -> PlatformClient:
        """Create an API client for the configured platform.

        Args:
            authenticated: Require and attach the stored access token

        Raises:
            NotAuthenticated: If a token is required but none is stored
        """
        if authenticated and not self.settings.is_authenticated:
            raise NotAuthenticated()
        token = self.settings.access_token if authenticated else None
        return PlatformClient(self.settings.base_url, token=token)


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext."""
    store = SettingsStore()
    return CLIContext(console=console, store=store, settings=store.load())


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
