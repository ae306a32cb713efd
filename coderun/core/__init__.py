"""Deployment request validation and source-build orchestration.

Public surface of the core package:
- request: DeploymentFlags -> DeploymentPlan validation
- packaging: build context archives
- orchestrator: remote build polling
- translator: backend error translation
- pipeline: build-then-deploy flow
"""

from .errors import (
    BackendRejection,
    BuildFailure,
    BuildTimeout,
    CodeRunError,
    DockerfileNotFound,
    EnvFileError,
    FileSystemError,
    TransportError,
    ValidationError,
)
from .orchestrator import BuildOrchestrator
from .pipeline import DeployPipeline
from .request import (
    BuildSource,
    DeploymentFlags,
    DeploymentPlan,
    DeploymentRequestValidator,
    DeploymentSpec,
)
from .translator import translate

__all__ = [
    "BackendRejection",
    "BuildFailure",
    "BuildTimeout",
    "CodeRunError",
    "DockerfileNotFound",
    "EnvFileError",
    "FileSystemError",
    "TransportError",
    "ValidationError",
    "BuildOrchestrator",
    "DeployPipeline",
    "BuildSource",
    "DeploymentFlags",
    "DeploymentPlan",
    "DeploymentRequestValidator",
    "DeploymentSpec",
    "translate",
]
