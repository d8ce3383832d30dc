"""
Schema Validation Utilities

Validates assignment definitions and submission backups before they are
turned into model objects.

Two layers:
- Structural checks that jsonschema cannot express (a problem either has
  subsections or its own submission elements, element kinds are known)
- Full JSON Schema validation against the shipped ``*.schema.json`` files
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..models.assignment import SubmissionKind


_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _schema_validate(data: dict[str, Any], schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def validate_assignment(data: dict[str, Any], *, strict: bool = True) -> None:
    """
    Validate an assignment definition dictionary.

    Args:
        data: Parsed assignment JSON
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Assignment must be a JSON object")

    required = ["assignment_title", "course_code", "total_points", "problems"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    problems = data.get("problems")
    if not isinstance(problems, list):
        raise ValidationError("problems must be a list", path="problems")

    for i, problem in enumerate(problems):
        _validate_problem(problem, f"problems[{i}]")

    if strict:
        _schema_validate(data, "assignment")


def _validate_problem(data: Any, path: str) -> None:
    """Validate one problem node and its subsections."""
    if not isinstance(data, dict):
        raise ValidationError("problem must be an object", path=path)

    subsections = data.get("subsections") or []
    elements = data.get("submission_elements") or []
    if subsections and elements:
        raise ValidationError(
            "Problem cannot have both subsections and submission_elements",
            path=path,
        )

    _validate_elements(elements, f"{path}.submission_elements")
    for j, sub in enumerate(subsections):
        if not isinstance(sub, dict):
            raise ValidationError("subsection must be an object", path=f"{path}.subsections[{j}]")
        _validate_elements(
            sub.get("submission_elements") or [],
            f"{path}.subsections[{j}].submission_elements",
        )


def _validate_elements(elements: Any, path: str) -> None:
    if not isinstance(elements, list):
        raise ValidationError("submission_elements must be a list", path=path)
    for k, raw in enumerate(elements):
        if not isinstance(raw, str):
            raise ValidationError(f"Invalid element kind: {raw!r}", path=f"{path}[{k}]")
        try:
            SubmissionKind.parse(raw)
        except ValueError as e:
            raise ValidationError(str(e), path=f"{path}[{k}]") from e


def validate_backup(data: dict[str, Any], *, strict: bool = True) -> None:
    """
    Validate an exported submission backup.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Backup must be a JSON object")
    if "submission_data" not in data:
        raise ValidationError(
            "Missing required fields: ['submission_data']",
            errors=["Missing field: submission_data"],
        )
    if not isinstance(data["submission_data"], dict):
        raise ValidationError("submission_data must be an object", path="submission_data")

    if strict:
        _schema_validate(data, "backup")
