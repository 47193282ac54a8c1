from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_DOCUMENT_LABEL,
    DEFAULT_INSTITUTION_NAME,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DEFAULT_TERM_LABEL,
    GenerationConfig,
    ScoreOptions,
)

"""Config loader.

Responsibilities:
- Load a YAML generation config (semester, year, labels, subject names, ...)
- Validate it against the bundled JSON schema (config/schema.json)
- Apply defaults for optional keys
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
    "config_from_mapping",
]

SCHEMA_PATH = Path(__file__).parent / "schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Mapping[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(dict(data), schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _score_options(raw: Mapping[str, Any] | None) -> ScoreOptions:
    raw = raw or {}
    defaults = ScoreOptions()
    options = ScoreOptions(
        default_value=float(raw.get("default_value", defaults.default_value)),
        min_value=float(raw.get("min_value", defaults.min_value)),
        max_value=float(raw.get("max_value", defaults.max_value)),
        decimal_places=int(raw.get("decimal_places", defaults.decimal_places)),
        allow_negative=bool(raw.get("allow_negative", defaults.allow_negative)),
    )
    if options.min_value > options.max_value:
        raise ConfigError(
            f"config validation failed: score.min_value ({options.min_value}) > "
            f"score.max_value ({options.max_value})"
        )
    return options


def config_from_mapping(data: Mapping[str, Any]) -> GenerationConfig:
    """Validate a mapping and build a GenerationConfig."""
    _validate_config_schema(data)
    return GenerationConfig(
        semester=data["semester"],
        academic_year=data["academic_year"],
        term_label=data.get("term_label", DEFAULT_TERM_LABEL),
        group_number=str(data.get("group_number", "")),
        subject_names={str(k): v for k, v in (data.get("subject_names") or {}).items()},
        document_label=data.get("document_label", DEFAULT_DOCUMENT_LABEL),
        institution_name=data.get("institution_name", DEFAULT_INSTITUTION_NAME),
        read_timeout_seconds=float(data.get("read_timeout_seconds", DEFAULT_READ_TIMEOUT_SECONDS)),
        score=_score_options(data.get("score")),
    )


def load_config(path: Path) -> GenerationConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top-level must be a mapping, got {type(data).__name__}")
    return config_from_mapping(data)
