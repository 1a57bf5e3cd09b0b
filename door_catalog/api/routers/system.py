"""
door_catalog/api/routers/system.py

Liveness routes. These never fail on store problems; they report the
connectivity flag instead.
"""
import time

from fastapi import APIRouter, Depends

from door_catalog.api.routers.doors import get_door_service
from door_catalog.schemas.doors import HealthOut
from door_catalog.services.doors import DoorService
from door_catalog.utils.documents import utc_now
from door_catalog.utils.logging import get_logger

logger = get_logger("system_router")

_START_TIME = time.time()

router = APIRouter(tags=["system"])


def _database_state(service: DoorService) -> str:
    return "connected" if service.repo.is_connected() else "disconnected"


@router.get("/")
def root(service: DoorService = Depends(get_door_service)):
    return {
        "message": "Welcome to the Door Catalog service",
        "status": "running",
        "timestamp": utc_now(),
        "database": _database_state(service),
    }


@router.get("/health", response_model=HealthOut)
def health(service: DoorService = Depends(get_door_service)):
    uptime = round(time.time() - _START_TIME, 3)
    database = _database_state(service)
    logger.info("HEALTH: uptime_s=%s database=%s", uptime, database)
    return {
        "status": "healthy",
        "uptime": uptime,
        "timestamp": utc_now(),
        "database": database,
    }
