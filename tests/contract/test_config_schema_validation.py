from __future__ import annotations

import json

import jsonschema
import pytest

from funnel_engine.config.loader import SCHEMA_PATH, ConfigError, config_from_mapping


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_file_is_valid_draft7():
    jsonschema.Draft7Validator.check_schema(_schema())


def test_schema_accepts_full_config():
    jsonschema.validate(
        {
            "type_sample_size": 20,
            "percent_scale_threshold": 1.2,
            "timestamp_ms_threshold": 1e11,
            "high_null_rate": 0.5,
            "min_time_parse_rate": 0.7,
            "log_level": "DEBUG",
        },
        _schema(),
    )


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_key": 1},
        {"type_sample_size": 0},
        {"high_null_rate": 1.5},
        {"percent_scale_threshold": 0},
        {"log_level": "TRACE"},
    ],
)
def test_schema_rejects(data):
    with pytest.raises(ConfigError, match="config validation failed"):
        config_from_mapping(data)
