from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..parsing.scalars import PERCENT_SCALE_THRESHOLD, TIMESTAMP_MS_THRESHOLD

"""Engine configuration loader.

Responsibilities:
- Load an optional YAML file with heuristic tuning knobs
- Validate it against the packaged JSON schema (unknown keys rejected)
- Apply defaults for every missing key

The thresholds are the behavioral contract of the normalizer; changing one
changes which types/scales get inferred.
"""

SCHEMA_PATH = Path(__file__).with_name("engine_schema.json")
CONFIG_ENV_VAR = "FUNNEL_ENGINE_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class EngineConfig:
    type_sample_size: int = 10  # rows sampled for value-based type detection
    percent_scale_threshold: float = PERCENT_SCALE_THRESHOLD
    timestamp_ms_threshold: float = TIMESTAMP_MS_THRESHOLD
    high_null_rate: float = 0.5  # quality report: HIGH_NULL_RATE above this
    min_time_parse_rate: float = 0.7  # quality report: degraded below this
    log_level: str = "INFO"


DEFAULT_CONFIG = EngineConfig()


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or data violating it
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


def config_from_mapping(data: dict[str, Any]) -> EngineConfig:
    _validate_config_schema(data)
    known = {f.name for f in fields(EngineConfig)}
    return EngineConfig(**{k: v for k, v in data.items() if k in known})


def load_config(path: Path) -> EngineConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return config_from_mapping(data)


def resolve_config(path: Path | None = None) -> EngineConfig:
    """Explicit path > $FUNNEL_ENGINE_CONFIG > defaults."""
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            return DEFAULT_CONFIG
        path = Path(env_path)
    return load_config(path)
