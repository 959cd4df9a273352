"""Configuration loading and Pydantic models for partcopy."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from partcopy.models import DEFAULT_ACL
from partcopy.planner import DEFAULT_PART_SIZE


class ClientConfig(BaseModel):
    """Storage service client configuration."""

    backend: str = "aws"
    region: str = "us-east-1"
    endpoint_url: str = ""
    use_path_style: bool = False
    access_key_id: str = ""
    secret_access_key: str = ""


class CopySettings(BaseModel):
    """Multipart copy tuning.

    ``max_concurrency`` caps in-flight part copies; 0 means every part is
    dispatched at once.
    """

    model_config = ConfigDict(validate_assignment=True)

    part_size: int = DEFAULT_PART_SIZE
    max_concurrency: int = Field(default=0, ge=0)
    default_acl: str = DEFAULT_ACL


class LoggingConfig(BaseModel):
    """Log output configuration."""

    level: str = "INFO"
    format: str = "text"


class ObservabilityConfig(BaseModel):
    """Metrics configuration.

    The CLI is a one-shot process, so collected metrics are pushed to
    ``pushgateway_url`` when it is set. Library callers expose the default
    registry themselves.
    """

    metrics: bool = False
    pushgateway_url: str = ""


class PartCopyConfig(BaseModel):
    """Top-level partcopy configuration."""

    client: ClientConfig = Field(default_factory=ClientConfig)
    copy_settings: CopySettings = Field(default_factory=CopySettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def _parse_client(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the client section from YAML data.

    Handles nested credentials: client.credentials.access_key_id -> access_key_id
    """
    if data is None:
        return {}
    result: dict[str, Any] = {
        "backend": data.get("backend", "aws"),
        "region": data.get("region", "us-east-1"),
        "endpoint_url": data.get("endpoint_url", ""),
        "use_path_style": data.get("use_path_style", False),
    }
    credentials = data.get("credentials")
    if isinstance(credentials, dict):
        result["access_key_id"] = credentials.get("access_key_id", "")
        result["secret_access_key"] = credentials.get("secret_access_key", "")
    return result


def _parse_copy(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the copy section from YAML data."""
    if data is None:
        return {}
    return {
        "part_size": data.get("part_size", DEFAULT_PART_SIZE),
        "max_concurrency": data.get("max_concurrency", 0),
        "default_acl": data.get("default_acl", DEFAULT_ACL),
    }


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def _parse_observability(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the observability section from YAML data."""
    if data is None:
        return {}
    return {
        "metrics": data.get("metrics", False),
        "pushgateway_url": data.get("pushgateway_url", ""),
    }


def load_config(path: Path) -> PartCopyConfig:
    """Load a PartCopyConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated PartCopyConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return PartCopyConfig(
        client=ClientConfig(**_parse_client(raw.get("client"))),
        copy_settings=CopySettings(**_parse_copy(raw.get("copy"))),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
        observability=ObservabilityConfig(**_parse_observability(raw.get("observability"))),
    )
