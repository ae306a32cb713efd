"""Persisted CLI settings.

Settings live in a small YAML file (``~/.coderun/config.yaml`` by default)::

    config:
      base_url: https://api.example.com
      access_token: eyJhbGciOi...
      build_poll_interval: 5
      build_timeout: null

Environment variables take precedence over the file:

- ``CODERUN_CONFIG_DIR``: directory holding ``config.yaml``
- ``CODERUN_BASE_URL``: platform URL
- ``CODERUN_ACCESS_TOKEN``: bearer token

A ``.env`` file in the working directory is loaded first (without
overriding variables that are already set).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from coderun.core.errors import ConfigError

CONFIG_FILE_NAME = "config.yaml"
DEFAULT_BASE_URL = "http://localhost:8000"

ENV_CONFIG_DIR = "CODERUN_CONFIG_DIR"
ENV_BASE_URL = "CODERUN_BASE_URL"
ENV_ACCESS_TOKEN = "CODERUN_ACCESS_TOKEN"


class CLISettings(BaseModel):
    """Settings the CLI needs to talk to the platform."""

    base_url: str = DEFAULT_BASE_URL
    access_token: str | None = None
    build_poll_interval: float = Field(default=5.0, gt=0)
    build_timeout: float | None = Field(default=None, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)


def default_config_dir() -> Path:
    override = os.getenv(ENV_CONFIG_DIR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".coderun"


class SettingsStore:
    """Reads and writes :class:`CLISettings` as YAML."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or default_config_dir()

    @property
    def path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def _read_file(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"No config file at {self.path}, using defaults")
            return {}

        try:
            loaded = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading {self.path}: {e}") from e

        if loaded is None:
            return {}
        if not isinstance(loaded, dict) or not isinstance(
            loaded.get("config", {}), dict
        ):
            raise ConfigError(
                f"Invalid config structure in {self.path}",
                details="Expected a top-level 'config:' mapping.",
            )
        return dict(loaded.get("config") or {})

    def load(self, apply_env: bool = True) -> CLISettings:
        """Load settings from disk, then apply environment overrides.

        Args:
            apply_env: Whether ``CODERUN_*`` variables override file values

        Raises:
            ConfigError: If the file is unreadable or holds invalid values
        """
        data = self._read_file()

        if apply_env:
            load_dotenv(Path.cwd() / ".env", override=False)
            overrides = {
                "base_url": os.getenv(ENV_BASE_URL),
                "access_token": os.getenv(ENV_ACCESS_TOKEN),
            }
            applied = {k: v for k, v in overrides.items() if v}
            if applied:
                logger.debug(f"Environment overrides: {sorted(applied)}")
            data.update(applied)

        try:
            return CLISettings.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid settings in {self.path}", details=str(e)) from e

    def save(self, settings: CLISettings) -> Path:
        """Write settings to disk, readable by the current user only."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            content = yaml.safe_dump(
                {"config": settings.model_dump()}, sort_keys=False
            )
            self.path.write_text(content, encoding="utf-8")
            self.path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Error saving config to {self.path}: {e}") from e

        logger.debug(f"Saved settings to {self.path}")
        return self.path

    def update(self, **changes: Any) -> CLISettings:
        """Apply ``changes`` to the stored file settings and save them.

        Environment overrides are not persisted.
        """
        current = self.load(apply_env=False)
        try:
            updated = CLISettings.model_validate(
                {**current.model_dump(), **changes}
            )
        except PydanticValidationError as e:
            raise ConfigError("Invalid settings value", details=str(e)) from e
        self.save(updated)
        return updated
