# COMPONENT: ERROR TAXONOMY
# REQUIREMENTS SATISFIED: consistent client/store/upstream failure classification
"""
door_catalog/errors.py

Defines the exception hierarchy shared by the stores, services and API.

Every exception carries the HTTP status it maps to and a short,
machine-stable error code. Services raise these; the exception handler
installed in main.py turns them into JSON bodies via api/responses.py.

    DoorCatalogError
    ├── InvalidInput          400  invalid_input
    │   ├── MissingFields     400  missing_fields
    │   └── DuplicateIdentifier 400 duplicate_id
    ├── InvalidIdentifier     400  invalid_id
    ├── NotFound              404  not_found
    ├── StoreUnavailable      503  database_unavailable
    ├── StoreOperationFailed  500  database_error
    └── UpstreamError         502  upstream_error

ConfigError is raised at startup only and is never mapped to a response.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional


class DoorCatalogError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra: Dict[str, Any] = extra


class InvalidInput(DoorCatalogError):
    status_code = 400
    code = "invalid_input"


class MissingFields(InvalidInput):
    code = "missing_fields"

    def __init__(self, missing: Iterable[str], required: Iterable[str]):
        missing = list(missing)
        super().__init__(
            "Missing required fields: " + ", ".join(missing),
            missing=missing,
            required=list(required),
        )
        self.missing = missing


class DuplicateIdentifier(InvalidInput):
    code = "duplicate_id"

    def __init__(self, door_id: str):
        super().__init__(f"A door with ID {door_id} already exists", receivedId=door_id)
        self.door_id = door_id


class InvalidIdentifier(DoorCatalogError):
    status_code = 400
    code = "invalid_id"

    def __init__(self, raw: Any):
        super().__init__(
            "ID must be a valid UUID format "
            "(e.g., xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx-xxxxxxxx)",
            receivedId=raw,
        )
        self.raw = raw


class NotFound(DoorCatalogError):
    status_code = 404
    code = "not_found"


class StoreUnavailable(DoorCatalogError):
    status_code = 503
    code = "database_unavailable"


class StoreOperationFailed(DoorCatalogError):
    status_code = 500
    code = "database_error"


class UpstreamError(DoorCatalogError):
    status_code = 502
    code = "upstream_error"


class ConfigError(Exception):
    """Raised when the process environment cannot produce a usable configuration."""
