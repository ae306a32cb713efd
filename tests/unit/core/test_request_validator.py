"""Unit tests for DeploymentRequestValidator."""

from __future__ import annotations

from pathlib import Path

import pytest

from coderun.core.errors import EnvFileError, ValidationError
from coderun.core.request import (
    DeploymentFlags,
    DeploymentRequestValidator,
    DeploymentSpec,
    validate_app_name,
)


@pytest.fixture
def validator() -> DeploymentRequestValidator:
    return DeploymentRequestValidator()


def _flags(**overrides) -> DeploymentFlags:
    values = {"name": "my-app", "image": "nginx:latest"}
    values.update(overrides)
    return DeploymentFlags(**values)


class TestAppName:
    """Tests for app name rules."""

    def test_missing_name_mentions_flag(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_app_name(None)

        assert "--name" in exc_info.value.message
        assert exc_info.value.details is not None

    @pytest.mark.parametrize(
        ("name", "fragment"),
        [
            ("ab", "at least 3"),
            ("a" * 31, "no more than 30"),
            ("My-App", "lowercase"),
            ("my_app", "lowercase"),
            ("-app", "start or end with a hyphen"),
            ("app-", "start or end with a hyphen"),
        ],
    )
    def test_rejected_names(self, name: str, fragment: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_app_name(name)

        assert fragment in exc_info.value.message

    @pytest.mark.parametrize("name", ["abc", "a" * 30, "my-app-2", "123"])
    def test_accepted_names(self, name: str) -> None:
        assert validate_app_name(name) == name

    def test_trailing_newline_rejected(self) -> None:
        """The character class must cover the whole name."""
        with pytest.raises(ValidationError):
            validate_app_name("my-app\n")


class TestPorts:
    """Tests for port exclusivity and range."""

    def test_both_ports_rejected(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(http_port=80, tcp_port=5432))

        assert exc_info.value.message == "Cannot specify both --http-port and --tcp-port"

    def test_exclusivity_reported_before_range(
        self, validator: DeploymentRequestValidator
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(http_port=70000, tcp_port=70000))

        assert "both" in exc_info.value.message

    @pytest.mark.parametrize("field", ["http_port", "tcp_port"])
    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_out_of_range(
        self, validator: DeploymentRequestValidator, field: str, port: int
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(**{field: port}))

        assert "between 1 and 65535" in exc_info.value.message

    @pytest.mark.parametrize("port", [1, 8080, 65535])
    def test_boundaries_accepted(
        self, validator: DeploymentRequestValidator, port: int
    ) -> None:
        plan = validator.build(_flags(http_port=port))

        assert plan.spec.http_port == port
        assert plan.spec.tcp_port is None


class TestStorage:
    """Tests for persistent storage rules and replica forcing."""

    def test_size_without_path(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(storage_size="1Gi"))

        assert "both --storage-size and --storage-path" in exc_info.value.message

    def test_path_without_size(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError):
            validator.build(_flags(storage_path="/data"))

    @pytest.mark.parametrize("size", ["1G", "1Ki", "Gi", "1.5Gi", "10gi"])
    def test_bad_size_format(
        self, validator: DeploymentRequestValidator, size: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(storage_size=size, storage_path="/data"))

        assert "Storage size must be in format" in exc_info.value.message

    def test_relative_path(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(storage_size="1Gi", storage_path="data"))

        assert "absolute path" in exc_info.value.message

    def test_replicas_forced_to_one_with_warning(
        self, validator: DeploymentRequestValidator
    ) -> None:
        plan = validator.build(
            _flags(replicas=3, storage_size="1Gi", storage_path="/data")
        )

        assert plan.spec.replicas == 1
        assert plan.spec.persistent_volume_size == "1Gi"
        assert plan.spec.persistent_volume_mount_path == "/data"
        assert len(plan.warnings) == 1
        assert "was 3" in plan.warnings[0]

    def test_single_replica_no_warning(
        self, validator: DeploymentRequestValidator
    ) -> None:
        plan = validator.build(_flags(storage_size="500Mi", storage_path="/var/lib"))

        assert plan.warnings == []
        assert plan.spec.has_storage is True

    def test_replicas_kept_without_storage(
        self, validator: DeploymentRequestValidator
    ) -> None:
        plan = validator.build(_flags(replicas=4))

        assert plan.spec.replicas == 4
        assert plan.spec.has_storage is False

    def test_zero_replicas_rejected(
        self, validator: DeploymentRequestValidator
    ) -> None:
        with pytest.raises(ValidationError, match="at least 1"):
            validator.build(_flags(replicas=0))


class TestResourcesAndSource:
    """Tests for quantities, image source and env file handling."""

    def test_bad_cpu(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError, match="Invalid CPU value"):
            validator.build(_flags(cpu="lots"))

    def test_bad_memory(self, validator: DeploymentRequestValidator) -> None:
        with pytest.raises(ValidationError, match="Invalid memory value"):
            validator.build(_flags(memory="512M"))

    def test_no_image_and_no_build(
        self, validator: DeploymentRequestValidator
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.build(_flags(image=None))

        assert "--build" in exc_info.value.message

    def test_image_and_build_rejected(
        self, validator: DeploymentRequestValidator, tmp_path: Path
    ) -> None:
        with pytest.raises(ValidationError, match="together with --build"):
            validator.build(_flags(build=tmp_path))

    def test_build_plan_has_no_image(
        self, validator: DeploymentRequestValidator, tmp_path: Path
    ) -> None:
        plan = validator.build(
            _flags(image=None, build=tmp_path, dockerfile="docker/Dockerfile.prod")
        )

        assert plan.is_build is True
        assert plan.spec.image is None
        assert plan.build is not None
        assert plan.build.context_dir == tmp_path
        assert plan.build.dockerfile == "docker/Dockerfile.prod"

    def test_env_file_loaded(
        self, validator: DeploymentRequestValidator, tmp_path: Path
    ) -> None:
        env_file = tmp_path / "prod.env"
        env_file.write_text("DEBUG=false\nAPI_KEY='abc'\n")

        plan = validator.build(_flags(env_file=env_file))

        assert plan.spec.environment_vars == {"DEBUG": "false", "API_KEY": "abc"}
        assert plan.env_file == env_file

    def test_env_file_checked_last(
        self, validator: DeploymentRequestValidator, tmp_path: Path
    ) -> None:
        """A missing env file is only reported once everything else passes."""
        with pytest.raises(ValidationError):
            validator.build(
                _flags(cpu="bad", env_file=tmp_path / "nope.env")
            )

        with pytest.raises(EnvFileError):
            validator.build(_flags(env_file=tmp_path / "nope.env"))

    def test_empty_quantities_are_unset(
        self, validator: DeploymentRequestValidator
    ) -> None:
        plan = validator.build(_flags(cpu="", memory=""))

        assert plan.spec.cpu_limit is None
        assert plan.spec.memory_limit is None


class TestDeploymentSpec:
    """Tests for DeploymentSpec payload serialization."""

    def test_payload_omits_unset_fields(self) -> None:
        spec = DeploymentSpec(app_name="my-app", image="nginx", http_port=80)

        assert spec.to_payload() == {
            "app_name": "my-app",
            "image": "nginx",
            "replicas": 1,
            "http_port": 80,
        }

    def test_empty_env_vars_dropped(self) -> None:
        spec = DeploymentSpec(app_name="my-app", image="nginx", environment_vars={})

        assert "environment_vars" not in spec.to_payload()

    def test_payload_requires_image(self) -> None:
        spec = DeploymentSpec(app_name="my-app")

        with pytest.raises(ValidationError):
            spec.to_payload()

    def test_with_image_returns_copy(self) -> None:
        spec = DeploymentSpec(app_name="my-app")

        resolved = spec.with_image("registry.example.com/my-app:abc")

        assert resolved.image == "registry.example.com/my-app:abc"
        assert spec.image is None

    def test_with_empty_image_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DeploymentSpec(app_name="my-app").with_image("")
