from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from service_insights.config.loader import SCHEMA_PATH

"""Config schema contract test."""


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_accepts_sample(schema, sample_config_yaml):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)


def test_config_schema_accepts_empty_document(schema):
    jsonschema.validate({}, schema)


@pytest.mark.parametrize(
    "config",
    [
        {"columns": {"score": ""}},
        {"columns": {"rating": "x"}},
        {"validation": {"cost_outlier_margin": -1}},
        {"variability": {"high_cv": "high"}},
        {"storage": {"directory": 3}},
        {"max_file_size_mb": 0},
        {"sheet_mappings": {}},
    ],
)
def test_config_schema_rejects(schema, config):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, schema)
