# COMPONENT: RESPONSE COMPOSER
# REQUIREMENTS SATISFIED: uniform success/error payloads across the door endpoints
"""
door_catalog/api/responses.py

Shapes every response body the API returns.

Errors always carry a machine-stable `error` code and a human-readable
`message`, plus any context the raising code attached (`receivedId`,
`missing`, `criteria`, ...). Store failures add `details` with the driver
message. A `stack` key is added only when the service runs with
APP_ENV=development.
"""
from __future__ import annotations
import traceback
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from door_catalog.errors import DoorCatalogError
from door_catalog.services.doors import BulkOutcome, PropagationOutcome


def error_body(
    code: str,
    message: str,
    *,
    details: Optional[str] = None,
    exc: Optional[BaseException] = None,
    debug: bool = False,
    **extra: Any,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": code, "message": message}
    if details is not None:
        body["details"] = details
    body.update(extra)
    if debug and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def error_response(exc: DoorCatalogError, debug: bool = False) -> JSONResponse:
    body = error_body(
        exc.code,
        exc.message,
        details=exc.details,
        exc=exc,
        debug=debug,
        **exc.extra,
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body))


def propagation_body(outcome: PropagationOutcome) -> Dict[str, Any]:
    return {
        "message": "Door update completed successfully - all doors with the same material updated",
        "door": outcome.door,
        "updatedFields": outcome.updated_fields,
        "bulkUpdateResult": {
            "groupingKey": outcome.grouping_key,
            "totalUpdated": outcome.matched_count,
            "modifiedCount": outcome.modified_count,
            "message": (
                f"Updated all {outcome.matched_count} doors with material: {outcome.grouping_key}"
            ),
        },
    }


def bulk_body(outcome: BulkOutcome) -> Dict[str, Any]:
    return {
        "message": "Bulk update completed successfully",
        "matchedCount": outcome.matched_count,
        "modifiedCount": outcome.modified_count,
        "criteria": outcome.criteria,
        "updatedFields": outcome.updated_fields,
    }
