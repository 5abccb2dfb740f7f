"""Project configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .yaml_types import YAMLValue

DEFAULT_OUTPUT_DIR = "src/lib/api/generated"


class ConfigLoadError(RuntimeError):
    """Raised when a project configuration file cannot be loaded."""


class ProjectConfig(BaseModel):
    """Settings shared by the ``wrappers`` and ``buf-gen`` commands."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = DEFAULT_OUTPUT_DIR
    services_dir: Optional[str] = None
    module_name: Optional[str] = None
    rpc_service_dir: Optional[str] = None
    additional_modules: list[str] = []
    include_services: Optional[list[str]] = None
    exclude_services: Optional[list[str]] = None
    go_package_prefix: Optional[str] = None


def load_project_config(path: Path) -> ProjectConfig:
    """Load and validate a project configuration from YAML."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Failed to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    payload_value: YAMLValue = payload
    if payload_value is None:
        return ProjectConfig()
    if not isinstance(payload_value, dict):
        raise ConfigLoadError(
            f"Config file must deserialize to a mapping, got {type(payload_value)!r}"
        )

    try:
        return ProjectConfig.model_validate(payload_value)
    except ValidationError as exc:
        raise ConfigLoadError(f"Config validation failed for {path}: {exc}") from exc
