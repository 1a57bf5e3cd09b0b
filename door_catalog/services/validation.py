# COMPONENT: DOOR INPUT VALIDATION
# REQUIREMENTS SATISFIED: identifier format checks, required-field checks, update body rules
"""
door_catalog/services/validation.py

Pure validation helpers used by the door service before any store access.

Key responsibilities:
    - Check identifiers against the catalog's UUID-with-suffix pattern
    - Normalise the `_id` alias to the canonical `id` field
    - Enforce required fields (name, material, dimensions) on creation
    - Keep updates from emptying a required field or touching the id
    - Reject Mongo-style `$` operators in criteria and update bodies

None of these functions perform I/O; they either return a cleaned copy
of their input or raise an InvalidInput/InvalidIdentifier error.
"""
from __future__ import annotations
import numbers
import re
import uuid
from typing import Any, Dict, List, Mapping, Optional

from door_catalog.errors import InvalidIdentifier, InvalidInput, MissingFields

ID_FIELD = "id"
ID_ALIASES = ("id", "_id")
STORE_OWNED_FIELDS = ("createdAt", "updatedAt")
REQUIRED_FIELDS = ("name", "material", "dimensions.height", "dimensions.width")
DIMENSION_FIELDS = ("height", "width")
SCALAR_FIELDS = ("name", "material", "finish", "dimensions.height", "dimensions.width")

_ID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}-[0-9a-f]{8}",
    re.IGNORECASE,
)


def validate_identifier(raw: Any) -> bool:
    return isinstance(raw, str) and _ID_PATTERN.fullmatch(raw) is not None


def require_identifier(raw: Any) -> str:
    if not validate_identifier(raw):
        raise InvalidIdentifier(raw)
    return raw


def new_identifier() -> str:
    """Random UUID4 plus an 8-hex suffix group."""
    return f"{uuid.uuid4()}-{uuid.uuid4().hex[:8]}"


def extract_identifier(payload: Mapping[str, Any]) -> Optional[Any]:
    """Identifier under either alias, `_id` first. None when neither is set."""
    for alias in ("_id", "id"):
        value = payload.get(alias)
        if value not in (None, ""):
            return value
    return None


def _is_positive_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and value > 0
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_new_record(payload: Any) -> Dict[str, Any]:
    """
    Validate a creation payload and return the record to insert.

    The identifier is optional; when present it must match the id
    pattern and is stored under `id`. Required fields are checked either
    way. The returned dict has no identifier when none was supplied; the
    caller generates one.
    """
    if not isinstance(payload, Mapping):
        raise InvalidInput("Door payload must be a JSON object")

    record = {k: v for k, v in payload.items() if k not in ID_ALIASES and k not in STORE_OWNED_FIELDS}

    door_id = extract_identifier(payload)
    if door_id is not None:
        record[ID_FIELD] = require_identifier(door_id)

    missing: List[str] = [f for f in ("name", "material") if _is_blank(record.get(f))]
    dimensions = record.get("dimensions")
    if not isinstance(dimensions, Mapping):
        dimensions = {}
    for dim in DIMENSION_FIELDS:
        if dimensions.get(dim) is None:
            missing.append(f"dimensions.{dim}")
    if missing:
        raise MissingFields(missing, REQUIRED_FIELDS)

    for key in ("name", "material"):
        if not isinstance(record[key], str):
            raise InvalidInput(f"{key} must be a string", field=key)
    if record.get("finish") is not None and not isinstance(record["finish"], str):
        raise InvalidInput("finish must be a string", field="finish")
    for dim in DIMENSION_FIELDS:
        if not _is_positive_number(dimensions[dim]):
            raise InvalidInput(
                f"dimensions.{dim} must be a positive number",
                field=f"dimensions.{dim}",
            )
    return record


def _check_keys(mapping: Mapping[str, Any], what: str) -> None:
    for key in mapping:
        if not isinstance(key, str) or not key or key.startswith("$"):
            raise InvalidInput(f"Unsupported {what} field: {key!r}")


def _check_update_path(path: str) -> None:
    parts = path.split(".")
    if not all(parts):
        raise InvalidInput(f"Unsupported update field: {path!r}", field=path)
    if len(parts) > 1 and (parts[0] in ID_ALIASES or parts[0] in STORE_OWNED_FIELDS):
        raise InvalidInput(f"{parts[0]} cannot be updated", field=path)
    for scalar in SCALAR_FIELDS:
        if path.startswith(scalar + "."):
            raise InvalidInput(f"{scalar} has no nested fields", field=path)


def validate_update_body(payload: Any) -> Dict[str, Any]:
    """
    Strip identifier aliases and store-owned timestamps from an update
    payload. Raises InvalidInput when nothing is left to write, when a
    value would clear a required field, or when a dotted path reaches into
    the id, a timestamp or a scalar field.
    """
    if not isinstance(payload, Mapping):
        raise InvalidInput("Update data must be a JSON object")

    body = {
        k: v for k, v in payload.items()
        if k not in ID_ALIASES and k not in STORE_OWNED_FIELDS
    }
    if not body:
        raise InvalidInput(
            "No update data provided. Please provide fields to update "
            "(e.g., finish, material, etc.)"
        )
    _check_keys(body, "update")

    for key, value in body.items():
        _check_update_path(key)
        if key in ("name", "material") and (_is_blank(value) or not isinstance(value, str)):
            raise InvalidInput(f"{key} must be a non-empty string", field=key)
        if key == "finish" and value is not None and not isinstance(value, str):
            raise InvalidInput("finish must be a string", field=key)
        if key == "dimensions":
            if not isinstance(value, Mapping):
                raise InvalidInput("dimensions must be an object", field=key)
            for dim in DIMENSION_FIELDS:
                if not _is_positive_number(value.get(dim)):
                    raise InvalidInput(
                        f"dimensions.{dim} must be a positive number",
                        field=f"dimensions.{dim}",
                    )
        if key in ("dimensions.height", "dimensions.width") and not _is_positive_number(value):
            raise InvalidInput(f"{key} must be a positive number", field=key)
    return body


def validate_criteria(criteria: Any) -> Dict[str, Any]:
    """Equality criteria on field paths. `{}` is allowed and matches every door."""
    if not isinstance(criteria, Mapping):
        raise InvalidInput("criteria must be a JSON object")
    _check_keys(criteria, "criteria")
    cleaned = dict(criteria)
    if "_id" in cleaned:
        cleaned[ID_FIELD] = cleaned.pop("_id")
    return cleaned
