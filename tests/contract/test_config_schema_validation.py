from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from roster_split.config.loader import SCHEMA_PATH

"""Config schema contract test (config/schema.json)."""


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example(schema):
    config = {
        "semester": 2,
        "academic_year": 2567,
        "term_label": "กลางภาค",
        "group_number": 5,
        "subject_names": {"MATH101": "คณิตศาสตร์"},
        "read_timeout_seconds": 30,
        "score": {"default_value": 0, "min_value": 0, "max_value": 100, "decimal_places": 2},
    }
    jsonschema.validate(config, schema)


def test_config_schema_missing_required_key(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"semester": 1}, schema)


def test_config_schema_rejects_unknown_key(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"semester": 1, "academic_year": 2567, "database": {}}, schema)


@pytest.mark.parametrize("semester", [0, 4])
def test_config_schema_semester_range(schema, semester):
    with pytest.raises(ValidationError):
        jsonschema.validate({"semester": semester, "academic_year": 2567}, schema)
