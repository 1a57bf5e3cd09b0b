# COMPONENT: DOOR RECORD STORE (IN-MEMORY)
# REQUIREMENTS SATISFIED: door persistence abstraction for local runs and tests
"""
door_catalog/repositories/doors_repo.py

Defines the record store contract used by the door service and an
in-memory implementation of it.

The in-memory store keeps door documents in a dict keyed by `id`. It is
selected with DOOR_STORE=memory (the default) for local development and
is what the test suite runs against. It applies the same document
semantics as the DynamoDB store (utils/documents.py), so both stores
agree on matching and merging.

Key responsibilities:
    - Find one door by id, list all doors
    - Insert one or many doors, rejecting duplicate ids
    - Count and update every door matching equality criteria
    - Delete a door by id
    - Report connectivity for the 503 gate
    - Stamp createdAt / updatedAt on insert and on change
"""
from __future__ import annotations
import copy
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from door_catalog.errors import DuplicateIdentifier
from door_catalog.utils.documents import matches, merge_update, utc_now


@dataclass(frozen=True)
class UpdateResult:
    matched_count: int
    modified_count: int


class DoorRepo:
    """Interface every door store implements."""

    def is_connected(self) -> bool:
        raise NotImplementedError

    def find_by_id(self, door_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def find_all(self) -> List[Dict[str, Any]]:
        """All doors, newest first."""
        raise NotImplementedError

    def insert(self, door: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def insert_many(self, doors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def count(self, criteria: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def update_many(self, criteria: Mapping[str, Any], body: Mapping[str, Any]) -> UpdateResult:
        raise NotImplementedError

    def delete_by_id(self, door_id: str) -> bool:
        raise NotImplementedError


def newest_first(doors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(doors, key=lambda d: str(d.get("createdAt") or ""), reverse=True)


class InMemoryDoorRepo(DoorRepo):
    def __init__(self):
        self._store: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def is_connected(self) -> bool:
        return True

    def find_by_id(self, door_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            door = self._store.get(door_id)
            return copy.deepcopy(door) if door is not None else None

    def find_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            doors = [copy.deepcopy(d) for d in self._store.values()]
        return newest_first(doors)

    def _stamp_new(self, door: Dict[str, Any]) -> Dict[str, Any]:
        item = copy.deepcopy(door)
        now = utc_now()
        item["createdAt"] = now
        item["updatedAt"] = now
        return item

    def insert(self, door: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            if door["id"] in self._store:
                raise DuplicateIdentifier(door["id"])
            item = self._stamp_new(door)
            self._store[item["id"]] = item
            return copy.deepcopy(item)

    def insert_many(self, doors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        with self._lock:
            # all-or-nothing: check every id before writing any
            seen = set()
            for door in doors:
                if door["id"] in self._store or door["id"] in seen:
                    raise DuplicateIdentifier(door["id"])
                seen.add(door["id"])
            items = [self._stamp_new(d) for d in doors]
            for item in items:
                self._store[item["id"]] = item
            return copy.deepcopy(items)

    def count(self, criteria: Mapping[str, Any]) -> int:
        with self._lock:
            return sum(1 for d in self._store.values() if matches(d, criteria))

    def update_many(self, criteria: Mapping[str, Any], body: Mapping[str, Any]) -> UpdateResult:
        with self._lock:
            # select first, then write: the match set is the pre-update state
            targets = [d for d in self._store.values() if matches(d, criteria)]
            # merge every target before writing so a rejected path writes nothing
            merged = [merge_update(d, body) for d in targets]
            modified = 0
            now = utc_now()
            for updated, changed in merged:
                if changed:
                    updated["updatedAt"] = now
                    self._store[updated["id"]] = updated
                    modified += 1
            return UpdateResult(matched_count=len(targets), modified_count=modified)

    def delete_by_id(self, door_id: str) -> bool:
        with self._lock:
            return self._store.pop(door_id, None) is not None

