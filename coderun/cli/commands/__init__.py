"""CLI command modules.

Commands:
- auth: login, logout, whoami
- deploy: deploy an image or build from source
- deployments: list, status, logs, delete
- config: local configuration (command group)
"""

from .auth import login, logout, whoami
from .config import config_app
from .deploy import deploy
from .deployments import delete, list_deployments, logs, status

__all__ = [
    "login",
    "logout",
    "whoami",
    "deploy",
    "list_deployments",
    "status",
    "logs",
    "delete",
    "config_app",
]
