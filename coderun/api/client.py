"""HTTP client for the CodeRun platform API.

A thin synchronous wrapper over :class:`httpx.Client`. Every method performs
one request, raises :class:`BackendRejection` for non-2xx answers and
:class:`TransportError` when the platform cannot be reached, and returns a
typed model from :mod:`coderun.api.models`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from coderun.core.errors import BackendRejection, FileSystemError, TransportError

from .models import (
    BuildJob,
    BuildLogs,
    DeploymentList,
    DeploymentLogs,
    DeploymentResponse,
    DeploymentStatus,
    LoginResponse,
    UserInfo,
)

DEFAULT_TIMEOUT = 600.0  # slow-starting apps and TLS issuance

ModelT = TypeVar("ModelT", bound=BaseModel)


def _error_detail(response: httpx.Response) -> str:
    """Extract the ``detail`` string of an error body, else the raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return response.text


class PlatformClient:
    """Authenticated client for the platform REST API.

    Attributes:
        base_url: Platform root URL (e.g. ``https://api.example.com``)
        token: Bearer token, or None before login
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    def __enter__(self) -> PlatformClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug(f"{method} {self.base_url}{path}")
        try:
            response = self._client.request(
                method, path, headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request to {self.base_url}{path} failed: {e}",
                details=type(e).__name__,
            ) from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        if not response.is_success:
            raise BackendRejection(response.status_code, _error_detail(response))
        return response

    def _decode(self, response: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise TransportError(
                f"Failed to decode {model.__name__} response",
                details=str(e),
            ) from e

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResponse:
        response = self._request(
            "POST", "/api/v1/auth/login", json={"email": email, "password": password}
        )
        return self._decode(response, LoginResponse)

    def get_user_info(self) -> UserInfo:
        return self._decode(self._request("GET", "/api/v1/users/me"), UserInfo)

    # ------------------------------------------------------------------
    # Builds
    # ------------------------------------------------------------------

    def create_build(
        self, archive_path: str | Path, app_name: str, dockerfile_path: str
    ) -> BuildJob:
        """Upload a build context archive and start a build.

        Args:
            archive_path: Path to the ``.tar.gz`` build context
            app_name: Application the image is built for
            dockerfile_path: Dockerfile location relative to the context root

        Returns:
            The newly created build job
        """
        archive = Path(archive_path)
        try:
            with open(archive, "rb") as context_file:
                response = self._request(
                    "POST",
                    "/api/v1/builds/upload",
                    files={
                        "context_file": (
                            archive.name,
                            context_file,
                            "application/gzip",
                        )
                    },
                    data={"app_name": app_name, "dockerfile_path": dockerfile_path},
                )
        except OSError as e:
            raise FileSystemError(f"failed to open context file: {e}") from e
        return self._decode(response, BuildJob)

    def get_build(self, build_id: str) -> BuildJob:
        return self._decode(self._request("GET", f"/api/v1/builds/{build_id}"), BuildJob)

    def get_build_logs(self, build_id: str) -> str:
        response = self._request("GET", f"/api/v1/builds/{build_id}/logs")
        return self._decode(response, BuildLogs).logs

    # ------------------------------------------------------------------
    # Deployments
    # ------------------------------------------------------------------

    def create_deployment(self, payload: dict[str, Any]) -> DeploymentResponse:
        response = self._request("POST", "/api/v1/deploy", json=payload)
        return self._decode(response, DeploymentResponse)

    def list_deployments(self) -> DeploymentList:
        return self._decode(
            self._request("GET", "/api/v1/deployments"), DeploymentList
        )

    def get_deployment_status(self, deployment_id: str) -> DeploymentStatus:
        response = self._request("GET", f"/api/v1/deployments/{deployment_id}/status")
        return self._decode(response, DeploymentStatus)

    def delete_deployment(self, deployment_id: str) -> None:
        self._request("DELETE", f"/api/v1/deployments/{deployment_id}")

    def get_deployment_logs(self, deployment_id: str, lines: int = 100) -> DeploymentLogs:
        response = self._request(
            "GET",
            f"/api/v1/deployments/{deployment_id}/logs",
            params={"lines": lines},
        )
        return self._decode(response, DeploymentLogs)
