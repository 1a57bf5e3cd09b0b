# COMPONENT: DOOR SERVICE
# REQUIREMENTS SATISFIED: door CRUD, material-group propagation updates, criteria bulk updates
"""
door_catalog/services/doors.py

Defines the door service, the business layer between the API routers
and the record store.

Propagation updates are the central operation. Updating one door applies
the same update to every door that shares its material. The operation is
split into two phases so the race-prone boundary stays visible:

    resolve_group(target_id) -> DoorGroup     read only, captures material
    apply_to_group(group, body) -> UpdateResult   one group-wide write

The grouping key is captured once, before any write. If the update body
itself changes `material`, the write still targets the group as it was
when the key was captured. No lock is held between the two phases:
concurrent propagation updates on one group are last-writer-wins.

Key responsibilities:
    - Validate ids and payloads before any store access
    - Create single doors and batches, generating ids where absent
    - Propagate single-door updates across the material group
    - Apply criteria-based bulk updates (`{}` criteria = every door)
    - Delete doors by id
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from door_catalog.errors import InvalidIdentifier, InvalidInput, NotFound, StoreOperationFailed
from door_catalog.repositories.doors_repo import DoorRepo, UpdateResult
from door_catalog.services.validation import (
    ID_FIELD,
    new_identifier,
    require_identifier,
    validate_criteria,
    validate_new_record,
    validate_update_body,
)
from door_catalog.utils.logging import get_logger

logger = get_logger("services.doors")

GROUPING_FIELD = "material"


@dataclass(frozen=True)
class DoorGroup:
    """Grouping key snapshot taken before a propagation write."""
    target_id: str
    material: Any
    target: Mapping[str, Any]

    @property
    def criteria(self) -> Dict[str, Any]:
        return {GROUPING_FIELD: self.material}


@dataclass(frozen=True)
class PropagationOutcome:
    door: Dict[str, Any]
    updated_fields: List[str]
    grouping_key: Any
    matched_count: int
    modified_count: int


@dataclass(frozen=True)
class BulkOutcome:
    criteria: Dict[str, Any]
    updated_fields: List[str]
    matched_count: int
    modified_count: int


class DoorService:
    def __init__(self, repo: DoorRepo):
        self._repo = repo

    @property
    def repo(self) -> DoorRepo:
        return self._repo

    # -----------------------------
    # Reads
    # -----------------------------
    def list_doors(self) -> List[Dict[str, Any]]:
        return self._repo.find_all()

    # -----------------------------
    # Creation
    # -----------------------------
    def create_door(self, payload: Any) -> Dict[str, Any]:
        record = validate_new_record(payload)
        record.setdefault(ID_FIELD, new_identifier())
        door = self._repo.insert(record)
        logger.info("Created door id=%s material=%s", door[ID_FIELD], door.get(GROUPING_FIELD))
        return door

    def create_doors(self, payload: Any) -> List[Dict[str, Any]]:
        if not isinstance(payload, list) or not payload:
            raise InvalidInput("Request body must be a non-empty array of doors")

        records = []
        for index, item in enumerate(payload):
            try:
                record = validate_new_record(item)
            except (InvalidInput, InvalidIdentifier) as e:
                e.extra["index"] = index
                e.message = f"Door at index {index}: {e.message}"
                raise
            record.setdefault(ID_FIELD, new_identifier())
            records.append(record)

        doors = self._repo.insert_many(records)
        logger.info("Batch created %d doors", len(doors))
        return doors

    # -----------------------------
    # Propagation update
    # -----------------------------
    def resolve_group(self, target_id: str) -> DoorGroup:
        door = self._repo.find_by_id(target_id)
        if door is None:
            logger.info("Propagation target not found: id=%s", target_id)
            raise NotFound(f"No door found with ID: {target_id}", searchedId=target_id)
        return DoorGroup(target_id=target_id, material=door.get(GROUPING_FIELD), target=door)

    def apply_to_group(self, group: DoorGroup, body: Mapping[str, Any]) -> UpdateResult:
        return self._repo.update_many(group.criteria, body)

    def propagate_update(self, target_id: Any, payload: Mapping[str, Any]) -> PropagationOutcome:
        body = validate_update_body(payload)
        require_identifier(target_id)

        logger.info("Updating door %s with fields=%s", target_id, list(body))
        group = self.resolve_group(target_id)
        logger.info("Door %s grouping key: %s=%s", target_id, GROUPING_FIELD, group.material)

        result = self.apply_to_group(group, body)
        logger.info(
            "Propagated update to %s=%s: matched=%d modified=%d",
            GROUPING_FIELD, group.material, result.matched_count, result.modified_count,
        )

        try:
            door = self._repo.find_by_id(target_id)
        except StoreOperationFailed as e:
            logger.warning("Re-read of door %s failed after update, returning pre-update copy: %s", target_id, e)
            door = None

        return PropagationOutcome(
            door=dict(door if door is not None else group.target),
            updated_fields=list(body),
            grouping_key=group.material,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    # -----------------------------
    # Criteria bulk update
    # -----------------------------
    def bulk_update(self, criteria: Any, payload: Any) -> BulkOutcome:
        if criteria is None or payload is None:
            raise InvalidInput(
                "Provide criteria to find doors and data to update them with",
                required=["criteria", "updateData"],
            )
        criteria = validate_criteria(criteria)
        body = validate_update_body(payload)

        if not criteria:
            logger.warning("Bulk update with empty criteria applies to every door: fields=%s", list(body))

        matched = self._repo.count(criteria)
        if matched == 0:
            raise NotFound(f"No doors match the criteria: {criteria}", criteria=criteria)

        result = self._repo.update_many(criteria, body)
        logger.info(
            "Bulk update criteria=%s matched=%d modified=%d",
            criteria, result.matched_count, result.modified_count,
        )
        return BulkOutcome(
            criteria=criteria,
            updated_fields=list(body),
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    # -----------------------------
    # Deletion
    # -----------------------------
    def delete_door(self, door_id: Any) -> None:
        require_identifier(door_id)
        if not self._repo.delete_by_id(door_id):
            raise NotFound(f"No door found with ID: {door_id}", searchedId=door_id)
        logger.info("Deleted door id=%s", door_id)
