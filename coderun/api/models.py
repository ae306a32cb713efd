"""Response shapes returned by the CodeRun platform API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

BUILD_COMPLETED = "completed"
BUILD_FAILED = "failed"
TERMINAL_BUILD_STATUSES: frozenset[str] = frozenset({BUILD_COMPLETED, BUILD_FAILED})


class APIModel(BaseModel):
    """Base for API payloads; unknown fields from newer servers are ignored."""

    model_config = ConfigDict(extra="ignore")


class LoginResponse(APIModel):
    access_token: str
    token_type: str = "bearer"


class UserInfo(APIModel):
    id: str
    email: str
    namespace: str = ""
    is_active: bool = True
    created_at: datetime | None = None


class BuildJob(APIModel):
    """Server-tracked build of a source archive into a container image."""

    id: str
    client_id: str = ""
    app_name: str = ""
    tag: str = ""
    status: str
    image_uri: str = ""
    dockerfile_path: str = ""
    k8s_job_name: str = ""
    created_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BUILD_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == BUILD_COMPLETED


class BuildLogs(APIModel):
    logs: str = ""


class DeploymentResponse(APIModel):
    id: str
    client_id: str = ""
    app_name: str
    image: str
    replicas: int = 1
    cpu_limit: str | None = None
    memory_limit: str | None = None
    cpu_request: str | None = None
    memory_request: str | None = None
    http_port: int | None = None
    tcp_port: int | None = None
    tcp_node_port: int | None = None
    environment_vars: dict[str, str] | None = None
    persistent_volume_size: str | None = None
    persistent_volume_mount_path: str | None = None
    status: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    url: str | None = None
    tcp_connection: str | None = None


class DeploymentList(APIModel):
    deployments: list[DeploymentResponse] = Field(default_factory=list)
    total: int = 0


class TLSCertificateInfo(APIModel):
    ready: bool = False
    status: str = ""
    message: str = ""


class DeploymentStatus(APIModel):
    app_name: str
    status: str
    replicas_ready: int = 0
    replicas_desired: int = 0
    pods: list[dict[str, Any]] = Field(default_factory=list)
    url: str | None = None
    tcp_connection: str | None = None
    url_note: str | None = None
    tls_certificate: TLSCertificateInfo | None = None
    persistent_volume_size: str | None = None
    persistent_volume_mount_path: str | None = None


class PodLogs(APIModel):
    status: str = ""
    logs: str = ""
    restart_count: int = 0


class DeploymentLogs(APIModel):
    deployment_id: str
    app_name: str = ""
    image: str = ""
    status: str = ""
    deployment: str = ""
    total_pods: int = 0
    error: str | None = None
    logs: dict[str, PodLogs] = Field(default_factory=dict)
