"""
door_catalog/utils/documents.py

Small helpers for treating door records as nested JSON documents.

Field paths use dot notation ("dimensions.height") to reach into nested
objects. These helpers back criteria matching and field-level merges in
the stores so every store applies the same semantics.

Values compare as JSON values: `true` is not equal to `1`, even though
Python's `==` says otherwise.
"""
from __future__ import annotations
import copy
import datetime as dt
from typing import Any, Dict, Mapping, Tuple

from door_catalog.errors import InvalidInput

_MISSING = object()


def utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_path(doc: Mapping[str, Any], path: str, default: Any = None) -> Any:
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    """Set `path`, creating missing objects. Refuses to descend into a non-object value."""
    parts = path.split(".")
    current = doc
    for depth, part in enumerate(parts[:-1]):
        child = current.get(part, _MISSING)
        if child is _MISSING:
            child = {}
            current[part] = child
        elif not isinstance(child, dict):
            parent = ".".join(parts[:depth + 1])
            raise InvalidInput(f"Cannot set {path}: {parent} is not an object", field=path)
        current = child
    current[parts[-1]] = value


def same_value(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    return a == b


def matches(doc: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """Equality on every criteria path. Empty criteria match everything."""
    for path, expected in criteria.items():
        actual = get_path(doc, path, _MISSING)
        if actual is _MISSING or not same_value(actual, expected):
            return False
    return True


def merge_update(doc: Mapping[str, Any], body: Mapping[str, Any]) -> Tuple[Dict[str, Any], bool]:
    """
    Apply `body` to a copy of `doc` as a field-level set.

    Returns the new document and whether any field value changed. Raises
    InvalidInput when a path runs through a value that is not an object.
    """
    updated = copy.deepcopy(dict(doc))
    changed = False
    for path, value in body.items():
        current = get_path(updated, path, _MISSING)
        if current is _MISSING or not same_value(current, value):
            set_path(updated, path, copy.deepcopy(value))
            changed = True
    return updated, changed
