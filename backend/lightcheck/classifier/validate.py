"""Schema validation: jsonschema first, then Pydantic parsing."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import ValidationError

from lightcheck.classifier.types import LightJudgmentV1
from lightcheck.domain.errors import SchemaValidationError

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
LIGHT_JUDGMENT_SCHEMA = "light_judgment.v1.json"


@lru_cache(maxsize=4)
def load_schema(name: str) -> dict:
    path = _SCHEMA_DIR / name
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _validate_json_schema(data: Any, schema_name: str) -> None:
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise SchemaValidationError(
            f"JSON Schema validation failed ({schema_name}): {exc.message}"
        ) from exc


def validate_light_judgment(data: Any) -> LightJudgmentV1:
    """Validate data against light_judgment.v1.json then parse into Pydantic."""
    _validate_json_schema(data, LIGHT_JUDGMENT_SCHEMA)
    try:
        return LightJudgmentV1.model_validate(data)
    except ValidationError as exc:
        raise SchemaValidationError(
            f"Pydantic validation failed (LightJudgmentV1): {exc}"
        ) from exc
