"""Error taxonomy shared by the core, the API client and the CLI.

Every failure a command can hit derives from :class:`CodeRunError`, which
carries a short message and optional details. The CLI renders both and
exits non-zero; nothing below the command layer prints errors itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coderun.api.models import BuildJob


class CodeRunError(Exception):
    """Base class for all user-facing client errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(CodeRunError):
    """A deployment flag failed local pre-flight validation."""


class ConfigError(CodeRunError):
    """The local settings file could not be read or is invalid."""


class NotAuthenticated(CodeRunError):
    """No access token is stored for the configured platform."""

    def __init__(self) -> None:
        super().__init__("Please login first using 'coderun login'")


class BackendRejection(CodeRunError):
    """The platform answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}")


class TransportError(CodeRunError):
    """The platform could not be reached or returned an unreadable body."""


class BuildFailure(CodeRunError):
    """A remote build job reached the ``failed`` state."""

    def __init__(self, job: BuildJob, logs: str | None = None):
        self.job = job
        self.logs = logs
        super().__init__(f"Build {job.id} failed", details=logs or None)


class BuildTimeout(CodeRunError):
    """A remote build did not finish within the configured ceiling."""

    def __init__(self, build_id: str, timeout: float):
        self.build_id = build_id
        self.timeout = timeout
        super().__init__(
            f"Build {build_id} did not finish within {timeout:g} seconds",
            details="The build may still complete on the platform. "
            "Raise build_timeout in the config or unset it to wait indefinitely.",
        )


class FileSystemError(CodeRunError):
    """A local file needed by the command is missing or unreadable."""


class DockerfileNotFound(FileSystemError):
    """The Dockerfile does not exist inside the build context."""

    def __init__(self, dockerfile: str):
        self.dockerfile = dockerfile
        super().__init__(f"Dockerfile not found at {dockerfile}")


class EnvFileError(FileSystemError):
    """An environment file could not be parsed."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        super().__init__(message)
