from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from coderun.api.models import BuildJob


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from the real ~/.coderun and CODERUN_* variables."""
    config_dir = tmp_path / "coderun-config"
    monkeypatch.setenv("CODERUN_CONFIG_DIR", str(config_dir))
    for name in ("CODERUN_BASE_URL", "CODERUN_ACCESS_TOKEN"):
        # set first so values loaded from a .env are undone at teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # .env lookups happen relative to the working directory
    monkeypatch.chdir(tmp_path)
    return config_dir


@pytest.fixture
def mock_console() -> MagicMock:
    """Console double recording every call."""
    return MagicMock()


@pytest.fixture
def make_job():
    """Factory for BuildJob instances."""

    def _make(status: str, image_uri: str = "", build_id: str = "b-1") -> BuildJob:
        return BuildJob(
            id=build_id, app_name="my-app", status=status, image_uri=image_uri
        )

    return _make


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A small build context with hidden entries and a Dockerfile."""
    root = tmp_path / "src"
    (root / ".git" / "objects").mkdir(parents=True)
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / ".git" / "objects" / "ab").write_text("blob")
    (root / ".dockerignore").write_text("*.pyc\n")
    (root / ".env").write_text("SECRET=1\n")
    (root / "app.py").write_text("print('hello')\n")
    (root / "Dockerfile").write_text("FROM python:3.12-slim\nCOPY . /app\n")
    (root / "pkg").mkdir()
    (root / "pkg" / "__init__.py").write_text("")
    (root / "pkg" / ".cache").mkdir()
    (root / "pkg" / ".cache" / "junk").write_text("x")
    return root
