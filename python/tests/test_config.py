"""Tests for partcopy configuration loading."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from partcopy.config import CopySettings, PartCopyConfig, load_config
from partcopy.planner import DEFAULT_PART_SIZE
from partcopy.storage import create_storage_service
from partcopy.storage.aws import AWSStorageService
from partcopy.storage.memory import MemoryStorageService


def _load(data: dict) -> PartCopyConfig:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        f.flush()
        return load_config(Path(f.name))


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_example_config(self):
        """Loading the example config file populates all fields."""
        config = load_config(
            Path(__file__).resolve().parent.parent.parent / "partcopy.example.yaml"
        )
        assert config.client.backend == "aws"
        assert config.client.region == "us-east-1"
        assert config.client.endpoint_url == ""
        assert config.copy_settings.part_size == 50_000_000
        assert config.copy_settings.max_concurrency == 0
        assert config.copy_settings.default_acl == "private"
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"
        assert config.observability.metrics is False

    def test_load_minimal_config(self):
        """Loading an empty YAML uses defaults for all fields."""
        config = _load({})
        assert config.client.backend == "aws"
        assert config.copy_settings.part_size == DEFAULT_PART_SIZE
        assert config.logging.level == "INFO"

    def test_copy_section(self):
        config = _load({"copy": {"part_size": 100_000_000, "max_concurrency": 8}})
        assert config.copy_settings.part_size == 100_000_000
        assert config.copy_settings.max_concurrency == 8
        assert config.copy_settings.default_acl == "private"

    def test_nested_client_credentials(self):
        """client.credentials.* is flattened onto ClientConfig."""
        config = _load(
            {
                "client": {
                    "endpoint_url": "http://localhost:9000",
                    "use_path_style": True,
                    "credentials": {"access_key_id": "AKIA", "secret_access_key": "s3cr3t"},
                }
            }
        )
        assert config.client.endpoint_url == "http://localhost:9000"
        assert config.client.use_path_style is True
        assert config.client.access_key_id == "AKIA"
        assert config.client.secret_access_key == "s3cr3t"

    def test_logging_and_observability(self):
        config = _load(
            {"logging": {"level": "DEBUG", "format": "json"}, "observability": {"metrics": True}}
        )
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.observability.metrics is True

    def test_negative_concurrency_rejected(self):
        with pytest.raises(ValidationError):
            CopySettings(max_concurrency=-1)

    def test_negative_concurrency_rejected_on_assignment(self):
        settings = CopySettings()
        with pytest.raises(ValidationError):
            settings.max_concurrency = -1
        assert settings.max_concurrency == 0

    def test_pushgateway_url(self):
        config = _load({"observability": {"metrics": True, "pushgateway_url": "localhost:9091"}})
        assert config.observability.pushgateway_url == "localhost:9091"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestCreateStorageService:
    """Tests for create_storage_service()."""

    def test_aws_backend(self):
        config = _load({"client": {"region": "eu-central-1", "endpoint_url": "http://minio:9000"}})
        service = create_storage_service(config.client)
        assert isinstance(service, AWSStorageService)
        assert service.region == "eu-central-1"
        assert service.endpoint_url == "http://minio:9000"

    def test_memory_backend(self):
        config = _load({"client": {"backend": "memory"}})
        assert isinstance(create_storage_service(config.client), MemoryStorageService)

    def test_unknown_backend(self):
        config = _load({"client": {"backend": "ftp"}})
        with pytest.raises(ValueError, match="Unknown storage backend"):
            create_storage_service(config.client)
