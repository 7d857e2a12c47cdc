from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import ServiceInsightsError
from ..models.config_models import (
    ColumnMapping,
    InsightsConfig,
    StorageSettings,
    ValidationSettings,
    VariabilitySettings,
)

"""Config loader.

Responsibilities:
- Load YAML config (default: config/insights.yml)
- Validate against the JSON schema shipped next to this module
- Apply defaults for absent sections
- Apply environment overrides (SERVICE_INSIGHTS_*), typically from .env
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "default_config",
    "apply_env_overrides",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/insights.yml")

ENV_STORE_DIR = "SERVICE_INSIGHTS_STORE_DIR"
ENV_MAX_FILE_MB = "SERVICE_INSIGHTS_MAX_FILE_MB"


class ConfigError(ServiceInsightsError):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or data violates it.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> InsightsConfig:
    return InsightsConfig()


def _build_config(data: dict[str, Any]) -> InsightsConfig:
    variability = VariabilitySettings(**data.get("variability", {}))
    if variability.medium_cv > variability.high_cv:
        raise ConfigError(
            f"config validation failed: medium_cv ({variability.medium_cv}) "
            f"exceeds high_cv ({variability.high_cv})"
        )
    cfg = InsightsConfig(
        columns=ColumnMapping(**data.get("columns", {})),
        validation=ValidationSettings(**data.get("validation", {})),
        variability=variability,
        storage=StorageSettings(**data.get("storage", {})),
    )
    if "max_file_size_mb" in data:
        cfg = replace(cfg, max_file_size_mb=float(data["max_file_size_mb"]))
    return cfg


def apply_env_overrides(cfg: InsightsConfig, environ: Mapping[str, str] | None = None) -> InsightsConfig:
    """Environment wins over the YAML file."""
    env = os.environ if environ is None else environ
    store_dir = env.get(ENV_STORE_DIR)
    if store_dir:
        cfg = replace(cfg, storage=StorageSettings(directory=store_dir))
    max_mb = env.get(ENV_MAX_FILE_MB)
    if max_mb:
        try:
            value = float(max_mb)
        except ValueError as e:
            raise ConfigError(f"{ENV_MAX_FILE_MB} is not a number: {max_mb!r}") from e
        if value <= 0:
            raise ConfigError(f"{ENV_MAX_FILE_MB} must be positive: {max_mb!r}")
        cfg = replace(cfg, max_file_size_mb=value)
    return cfg


def load_config(path: Path) -> InsightsConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return _build_config(data)
