"""CodeRun platform API client and response models."""

from .client import PlatformClient
from .models import (
    BuildJob,
    DeploymentList,
    DeploymentLogs,
    DeploymentResponse,
    DeploymentStatus,
    LoginResponse,
    UserInfo,
)

__all__ = [
    "PlatformClient",
    "BuildJob",
    "DeploymentList",
    "DeploymentLogs",
    "DeploymentResponse",
    "DeploymentStatus",
    "LoginResponse",
    "UserInfo",
]
