# COMPONENT: STORAGE SERVICE
# REQUIREMENTS SATISFIED: door store selection, DynamoDB or local in-memory fallback
"""
door_catalog/services/storage.py

Selects the door record store for the running process.

The storage mode is chosen at runtime from Settings.door_store:

    memory    - InMemoryDoorRepo, process-local (default; local dev, tests)
    dynamodb  - DynamoDoorRepo on the DOORS_TABLE table

The selected store is created once and shared, so every request in a
process (or every invocation of a warm Lambda) sees the same store.
"""
from typing import Optional

from door_catalog.config import Settings
from door_catalog.repositories.doors_repo import DoorRepo, InMemoryDoorRepo
from door_catalog.repositories.dynamo_repo import DynamoDoorRepo
from door_catalog.utils.logging import get_logger

logger = get_logger("storage")

_repo_instance: Optional[DoorRepo] = None


def build_door_repo(settings: Settings) -> DoorRepo:
    if settings.door_store == "dynamodb":
        logger.info(
            "Using DynamoDB door store: table=%s region=%s",
            settings.doors_table, settings.aws_region,
        )
        return DynamoDoorRepo(settings.doors_table, region=settings.aws_region)
    logger.info("Using in-memory door store")
    return InMemoryDoorRepo()


def get_door_repo(settings: Settings) -> DoorRepo:
    global _repo_instance
    if _repo_instance is None:
        _repo_instance = build_door_repo(settings)
    return _repo_instance
