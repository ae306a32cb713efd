"""Validation and normalization of ``coderun deploy`` flags.

:class:`DeploymentRequestValidator` is the only place deployment input is
checked. It turns the raw :class:`DeploymentFlags` collected by the CLI into
a :class:`DeploymentPlan` holding a canonical :class:`DeploymentSpec`, the
optional build source and any normalization warnings. Rules run in a fixed
order so the first violated rule is always the one reported:

1. App name (presence, length, character class, hyphen placement)
2. HTTP/TCP port mutual exclusivity
3. Port range
4. Persistent storage pairing and formats
5. Replica count, forced to 1 when storage is requested
6. CPU and memory quantities
7. Image source (image argument or ``--build``)
8. Environment file
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .envfile import parse_env_file
from .errors import ValidationError
from .quantities import validate_quantity

APP_NAME_MIN_LENGTH = 3
APP_NAME_MAX_LENGTH = 30
APP_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
STORAGE_SIZE_PATTERN = re.compile(r"^\d+[MGT]i$", re.ASCII)
PORT_MIN = 1
PORT_MAX = 65535
DEFAULT_DOCKERFILE = "Dockerfile"


@dataclass(frozen=True)
class DeploymentFlags:
    """Raw ``deploy`` flags exactly as the user supplied them."""

    name: str | None = None
    image: str | None = None
    replicas: int = 1
    cpu: str | None = None
    memory: str | None = None
    http_port: int | None = None
    tcp_port: int | None = None
    env_file: Path | None = None
    storage_size: str | None = None
    storage_path: str | None = None
    build: Path | None = None
    dockerfile: str = DEFAULT_DOCKERFILE


class DeploymentSpec(BaseModel):
    """Canonical deployment request sent to ``POST /api/v1/deploy``."""

    model_config = ConfigDict(frozen=True)

    app_name: str
    image: str | None = None
    replicas: int = 1
    cpu_limit: str | None = None
    memory_limit: str | None = None
    http_port: int | None = None
    tcp_port: int | None = None
    environment_vars: dict[str, str] | None = None
    persistent_volume_size: str | None = None
    persistent_volume_mount_path: str | None = None

    @property
    def has_storage(self) -> bool:
        return self.persistent_volume_size is not None

    def with_image(self, image: str) -> DeploymentSpec:
        """Return a copy resolved to ``image`` (used after a source build)."""
        if not image:
            raise ValidationError("Image name cannot be empty")
        return self.model_copy(update={"image": image})

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the API, omitting unset optional fields."""
        if not self.image:
            raise ValidationError("Image name cannot be empty")
        payload = self.model_dump(exclude_none=True)
        if not payload.get("environment_vars"):
            payload.pop("environment_vars", None)
        return payload


@dataclass(frozen=True)
class BuildSource:
    """Local directory to build from, with its Dockerfile path."""

    context_dir: Path
    dockerfile: str = DEFAULT_DOCKERFILE


@dataclass
class DeploymentPlan:
    """Validated deploy request plus what is needed to fulfil it."""

    spec: DeploymentSpec
    build: BuildSource | None = None
    warnings: list[str] = field(default_factory=list)
    env_file: Path | None = None

    @property
    def is_build(self) -> bool:
        return self.build is not None


def validate_app_name(name: str | None) -> str:
    """Check an application name and return it unchanged.

    Raises:
        ValidationError: With a message naming the violated rule
    """
    if not name:
        raise ValidationError(
            "App name is required. Use --name to specify one (e.g., --name my-app)",
            details="App name must be 3-30 characters long and contain only "
            "lowercase letters, numbers, and hyphens",
        )
    if len(name) < APP_NAME_MIN_LENGTH:
        raise ValidationError(
            f"App name must be at least {APP_NAME_MIN_LENGTH} characters long"
        )
    if len(name) > APP_NAME_MAX_LENGTH:
        raise ValidationError(
            f"App name must be no more than {APP_NAME_MAX_LENGTH} characters long"
        )
    if not APP_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "App name must contain only lowercase letters, numbers, and hyphens"
        )
    if name.startswith("-") or name.endswith("-"):
        raise ValidationError("App name cannot start or end with a hyphen")
    return name


class DeploymentRequestValidator:
    """Single gate between raw CLI flags and the platform API."""

    def build(self, flags: DeploymentFlags) -> DeploymentPlan:
        """Validate ``flags`` and produce a deployment plan.

        Args:
            flags: Raw deploy flags

        Returns:
            DeploymentPlan with the canonical DeploymentSpec and normalization warnings

        Raises:
            ValidationError: For the first violated rule
            EnvFileError: If the env file cannot be parsed
        """
        warnings: list[str] = []

        app_name = validate_app_name(flags.name)
        self._check_ports(flags.http_port, flags.tcp_port)
        storage = self._check_storage(flags.storage_size, flags.storage_path)
        replicas = self._normalize_replicas(flags.replicas, storage, warnings)

        validate_quantity(flags.cpu, "cpu")
        validate_quantity(flags.memory, "memory")

        build = self._check_source(flags)

        env_vars: dict[str, str] | None = None
        if flags.env_file is not None:
            env_vars = parse_env_file(flags.env_file)

        spec = DeploymentSpec(
            app_name=app_name,
            image=flags.image if build is None else None,
            replicas=replicas,
            cpu_limit=flags.cpu or None,
            memory_limit=flags.memory or None,
            http_port=flags.http_port,
            tcp_port=flags.tcp_port,
            environment_vars=env_vars,
            persistent_volume_size=storage[0] if storage else None,
            persistent_volume_mount_path=storage[1] if storage else None,
        )
        logger.debug(f"Validated deployment request for {app_name}")
        return DeploymentPlan(
            spec=spec, build=build, warnings=warnings, env_file=flags.env_file
        )

    def _check_ports(self, http_port: int | None, tcp_port: int | None) -> None:
        if http_port is not None and tcp_port is not None:
            raise ValidationError("Cannot specify both --http-port and --tcp-port")

        for label, port in (("HTTP", http_port), ("TCP", tcp_port)):
            if port is not None and not PORT_MIN <= port <= PORT_MAX:
                raise ValidationError(
                    f"{label} port must be between {PORT_MIN} and {PORT_MAX}"
                )

    def _check_storage(
        self, size: str | None, path: str | None
    ) -> tuple[str, str] | None:
        if not size and not path:
            return None
        if not size or not path:
            raise ValidationError(
                "When using persistent storage, both --storage-size and "
                "--storage-path are required"
            )
        if not STORAGE_SIZE_PATTERN.fullmatch(size):
            raise ValidationError(
                "Storage size must be in format like '1Gi', '500Mi', '10Gi'"
            )
        if not path.startswith("/"):
            raise ValidationError(
                "Storage path must be an absolute path starting with '/' "
                "(e.g., '/data', '/var/lib/mysql')"
            )
        return size, path

    def _normalize_replicas(
        self,
        replicas: int,
        storage: tuple[str, str] | None,
        warnings: list[str],
    ) -> int:
        if replicas < 1:
            raise ValidationError("Replicas must be at least 1")
        if storage and replicas > 1:
            message = (
                f"Persistent storage requested, forcing replicas to 1 (was {replicas})"
            )
            logger.info(message)
            warnings.append(message)
            return 1
        return replicas

    def _check_source(self, flags: DeploymentFlags) -> BuildSource | None:
        if flags.build is not None:
            if flags.image:
                raise ValidationError(
                    "Cannot specify an IMAGE together with --build",
                    details="Either deploy an existing image or build from source.",
                )
            return BuildSource(
                context_dir=flags.build,
                dockerfile=flags.dockerfile or DEFAULT_DOCKERFILE,
            )
        if not flags.image:
            raise ValidationError(
                "Either specify an IMAGE to deploy or use --build to build from source"
            )
        return None
