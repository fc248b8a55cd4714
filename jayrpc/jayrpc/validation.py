"""Request parameter validation against a procedure's JSON schema."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator


def check_schema(schema: dict[str, Any]) -> None:
    """Raise ``jsonschema.SchemaError`` if *schema* is not a valid draft-07 schema."""
    Draft7Validator.check_schema(schema)


def validate_params(schema: dict[str, Any], params: Any) -> list[str]:
    """Return the validation error messages for *params* (empty when valid)."""
    validator = Draft7Validator(schema)
    return [error.message for error in validator.iter_errors(params)]
