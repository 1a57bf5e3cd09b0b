# COMPONENT: DOOR API ROUTES
# REQUIREMENTS SATISFIED: door listing, creation, propagation update, bulk update, deletion
"""
door_catalog/api/routers/doors.py

HTTP routes for the door catalog, mounted under /api.

Endpoints:
    - GET    /api/doors              : all doors, newest first
    - POST   /api/doors/add          : create one door
    - POST   /api/doors/batch        : create many doors
    - PATCH  /api/doors/update       : update one door and its material group
    - PATCH  /api/doors/bulk-update  : update every door matching criteria
    - DELETE /api/doors/delete       : delete one door

Every route first checks store connectivity and answers 503 before doing
anything else. Route functions stay thin: errors raised by the door
service are turned into responses by the handler registered in main.py.
"""
from __future__ import annotations
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Request

from door_catalog.api.responses import bulk_body, propagation_body
from door_catalog.errors import InvalidInput, StoreUnavailable
from door_catalog.schemas.doors import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    Door,
    MessageOut,
    PropagationResponse,
)
from door_catalog.services.doors import DoorService
from door_catalog.services.validation import extract_identifier
from door_catalog.utils.logging import get_logger

logger = get_logger("doors_router")

router = APIRouter(prefix="/doors", tags=["doors"])


def get_door_service(request: Request) -> DoorService:
    return request.app.state.door_service


def connected_door_service(service: DoorService = Depends(get_door_service)) -> DoorService:
    if not service.repo.is_connected():
        logger.warning("Rejecting request: door store not connected")
        raise StoreUnavailable(
            "Database not connected. Please try again later or check database connection"
        )
    return service


def _require_id(payload: Dict[str, Any]) -> Any:
    door_id = extract_identifier(payload)
    if door_id is None:
        raise InvalidInput(
            "Door ID is required. Please provide either 'id' or '_id' field in your request body",
            received=list(payload),
        )
    return door_id


@router.get("", response_model=List[Door])
def list_doors(service: DoorService = Depends(connected_door_service)):
    doors = service.list_doors()
    logger.info("GET /api/doors: count=%d", len(doors))
    return doors


@router.post("/add", status_code=201, response_model=Door)
def add_door(
    payload: Dict[str, Any] = Body(...),
    service: DoorService = Depends(connected_door_service),
):
    return service.create_door(payload)


@router.post("/batch", status_code=201, response_model=List[Door])
def batch_add_doors(
    payload: Any = Body(None),
    service: DoorService = Depends(connected_door_service),
):
    return service.create_doors(payload)


@router.patch("/update", response_model=PropagationResponse)
def update_door(
    payload: Dict[str, Any] = Body(...),
    service: DoorService = Depends(connected_door_service),
):
    door_id = _require_id(payload)
    outcome = service.propagate_update(door_id, payload)
    return propagation_body(outcome)


@router.patch("/bulk-update", response_model=BulkUpdateResponse)
def bulk_update_doors(
    body: BulkUpdateRequest,
    service: DoorService = Depends(connected_door_service),
):
    outcome = service.bulk_update(body.criteria, body.updateData)
    return bulk_body(outcome)


@router.delete("/delete", response_model=MessageOut)
def delete_door(
    payload: Dict[str, Any] = Body(...),
    service: DoorService = Depends(connected_door_service),
):
    door_id = _require_id(payload)
    service.delete_door(door_id)
    return {"message": "Door deleted successfully"}
