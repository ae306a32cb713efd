"""Unit tests for CLI settings persistence."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest
import yaml

from coderun.config.settings import (
    DEFAULT_BASE_URL,
    CLISettings,
    SettingsStore,
    default_config_dir,
)
from coderun.core.errors import ConfigError


@pytest.fixture
def store(isolated_config: Path) -> SettingsStore:
    return SettingsStore(isolated_config)


class TestCLISettings:
    """Tests for the settings model."""

    def test_defaults(self) -> None:
        settings = CLISettings()

        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.is_authenticated is False
        assert settings.build_timeout is None

    def test_trailing_slash_stripped(self) -> None:
        assert CLISettings(base_url="https://api.example.com/").base_url == (
            "https://api.example.com"
        )

    def test_scheme_required(self) -> None:
        with pytest.raises(ValueError):
            CLISettings(base_url="api.example.com")

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            CLISettings(build_timeout=0)


class TestSettingsStore:
    """Tests for reading and writing the YAML file."""

    def test_config_dir_from_environment(self, isolated_config: Path) -> None:
        assert default_config_dir() == isolated_config

    def test_missing_file_gives_defaults(self, store: SettingsStore) -> None:
        settings = store.load()

        assert settings == CLISettings()

    def test_save_then_load(self, store: SettingsStore) -> None:
        store.save(CLISettings(base_url="https://api.example.com", access_token="t"))

        loaded = store.load()

        assert loaded.base_url == "https://api.example.com"
        assert loaded.access_token == "t"
        data = yaml.safe_load(store.path.read_text())
        assert data["config"]["access_token"] == "t"

    def test_file_is_private(self, store: SettingsStore) -> None:
        path = store.save(CLISettings(access_token="secret"))

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_environment_overrides_file(
        self, store: SettingsStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store.save(CLISettings(base_url="https://file.example.com", access_token="a"))
        monkeypatch.setenv("CODERUN_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("CODERUN_ACCESS_TOKEN", "from-env")

        settings = store.load()

        assert settings.base_url == "https://env.example.com"
        assert settings.access_token == "from-env"
        assert store.load(apply_env=False).access_token == "a"

    def test_dotenv_in_working_directory(self, store: SettingsStore) -> None:
        (Path.cwd() / ".env").write_text("CODERUN_BASE_URL=https://dotenv.example.com\n")

        assert store.load().base_url == "https://dotenv.example.com"

    def test_update_does_not_persist_environment(
        self, store: SettingsStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CODERUN_ACCESS_TOKEN", "from-env")

        store.update(base_url="https://new.example.com")

        data = yaml.safe_load(store.path.read_text())
        assert data["config"]["base_url"] == "https://new.example.com"
        assert data["config"]["access_token"] is None

    def test_update_rejects_invalid_value(self, store: SettingsStore) -> None:
        with pytest.raises(ConfigError):
            store.update(base_url="ftp://nope")

    def test_malformed_yaml(self, store: SettingsStore) -> None:
        store.config_dir.mkdir(parents=True)
        store.path.write_text("config: [unclosed\n")

        with pytest.raises(ConfigError, match="Error parsing"):
            store.load()

    def test_wrong_structure(self, store: SettingsStore) -> None:
        store.config_dir.mkdir(parents=True)
        store.path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="Invalid config structure"):
            store.load()

    def test_invalid_value_in_file(self, store: SettingsStore) -> None:
        store.config_dir.mkdir(parents=True)
        store.path.write_text("config:\n  build_poll_interval: -1\n")

        with pytest.raises(ConfigError, match="Invalid settings"):
            store.load()
