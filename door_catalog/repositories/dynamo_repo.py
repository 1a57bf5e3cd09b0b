# COMPONENT: DOOR RECORD STORE (DYNAMODB)
# REQUIREMENTS SATISFIED: durable door persistence for deployed environments
"""
door_catalog/repositories/dynamo_repo.py

DynamoDB-backed door store, selected with DOOR_STORE=dynamodb.

Doors are stored one item per door in a table whose partition key is
`id`. DynamoDB has no update-many, so criteria updates are a paginated
scan followed by one conditional put per matched item. Those writes are
not atomic across items: a failure part way through leaves the earlier
items written. Store errors are raised as StoreOperationFailed.

Numbers round-trip through Decimal, since the boto3 resource layer
rejects floats and returns every number as Decimal.

A successful connectivity check is reused for CONNECTIVITY_TTL seconds so
the per-request availability gate does not call DescribeTable every time.
"""
from __future__ import annotations
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from door_catalog.errors import DuplicateIdentifier, StoreOperationFailed
from door_catalog.repositories.doors_repo import DoorRepo, UpdateResult, newest_first
from door_catalog.utils.documents import matches, merge_update, utc_now
from door_catalog.utils.logging import get_logger

logger = get_logger("dynamo_repo")

# seconds a successful DescribeTable check is trusted
CONNECTIVITY_TTL = 30.0


def to_dynamo(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def _filter_expression(criteria: Mapping[str, Any]):
    """Attr("a.b").eq(v) & ... for every criteria path, or None for {}."""
    expression = None
    for path, value in criteria.items():
        condition = Attr(path).eq(to_dynamo(value))
        expression = condition if expression is None else expression & condition
    return expression


class DynamoDoorRepo(DoorRepo):
    def __init__(
        self,
        table_name: str,
        region: Optional[str] = None,
        resource=None,
        connectivity_ttl: float = CONNECTIVITY_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.table_name = table_name
        self._connectivity_ttl = connectivity_ttl
        self._clock = clock
        self._connected_until: Optional[float] = None
        if resource is None:
            resource = boto3.resource("dynamodb", region_name=region) if region else boto3.resource("dynamodb")
        self._table = resource.Table(table_name)

    def _fail(self, op: str, err: Exception) -> StoreOperationFailed:
        logger.error("DynamoDB %s failed on table=%s error=%s", op, self.table_name, err)
        return StoreOperationFailed(f"Database {op} failed", details=str(err))

    def is_connected(self) -> bool:
        now = self._clock()
        if self._connected_until is not None and now < self._connected_until:
            return True
        try:
            self._table.load()
        except (ClientError, BotoCoreError) as e:
            # failures are never cached
            self._connected_until = None
            logger.warning("DynamoDB table %s not reachable: %s", self.table_name, e)
            return False
        self._connected_until = now + self._connectivity_ttl
        return True

    def find_by_id(self, door_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = self._table.get_item(Key={"id": door_id}, ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            raise self._fail("find", e) from e
        item = resp.get("Item")
        return from_dynamo(item) if item is not None else None

    def _scan(self, criteria: Mapping[str, Any]) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {"ConsistentRead": True}
        expression = _filter_expression(criteria)
        if expression is not None:
            kwargs["FilterExpression"] = expression

        items: List[Dict[str, Any]] = []
        try:
            while True:
                resp = self._table.scan(**kwargs)
                items.extend(from_dynamo(i) for i in resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise self._fail("scan", e) from e
        # Attr paths cannot express "equal to an object"; re-check locally
        return [i for i in items if matches(i, criteria)]

    def find_all(self) -> List[Dict[str, Any]]:
        return newest_first(self._scan({}))

    def _put(self, item: Dict[str, Any], condition) -> None:
        self._table.put_item(Item=to_dynamo(item), ConditionExpression=condition)

    def insert(self, door: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(door)
        now = utc_now()
        item["createdAt"] = now
        item["updatedAt"] = now
        try:
            self._put(item, Attr("id").not_exists())
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise DuplicateIdentifier(door["id"]) from e
            raise self._fail("insert", e) from e
        except BotoCoreError as e:
            raise self._fail("insert", e) from e
        return item

    def insert_many(self, doors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # no multi-item transaction; earlier inserts stand if a later one fails
        return [self.insert(d) for d in doors]

    def count(self, criteria: Mapping[str, Any]) -> int:
        return len(self._scan(criteria))

    def update_many(self, criteria: Mapping[str, Any], body: Mapping[str, Any]) -> UpdateResult:
        targets = self._scan(criteria)
        merged = [merge_update(d, body) for d in targets]
        modified = 0
        now = utc_now()
        for door, (updated, changed) in zip(targets, merged):
            if not changed:
                continue
            updated["updatedAt"] = now
            try:
                self._put(updated, Attr("id").exists())
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                    # deleted between scan and write
                    logger.info("Skipping door %s removed during update", door["id"])
                    continue
                raise self._fail("bulk update", e) from e
            except BotoCoreError as e:
                raise self._fail("bulk update", e) from e
            modified += 1
        logger.info(
            "DynamoDB update_many: criteria=%s matched=%d modified=%d",
            dict(criteria), len(targets), modified,
        )
        return UpdateResult(matched_count=len(targets), modified_count=modified)

    def delete_by_id(self, door_id: str) -> bool:
        try:
            resp = self._table.delete_item(Key={"id": door_id}, ReturnValues="ALL_OLD")
        except (ClientError, BotoCoreError) as e:
            raise self._fail("delete", e) from e
        return bool(resp.get("Attributes"))
