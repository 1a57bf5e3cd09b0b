# tests/unit/test_storage.py
#
# Unit tests for door store selection from Settings.
from door_catalog.config import Settings
from door_catalog.repositories.doors_repo import InMemoryDoorRepo
from door_catalog.repositories.dynamo_repo import DynamoDoorRepo
from door_catalog.services.storage import build_door_repo


def test_memory_store_is_default():
    assert isinstance(build_door_repo(Settings()), InMemoryDoorRepo)


def test_dynamodb_store_uses_configured_table(mocker):
    resource = mocker.patch("door_catalog.repositories.dynamo_repo.boto3.resource")

    repo = build_door_repo(Settings(door_store="dynamodb", doors_table="doors-dev", aws_region="us-east-2"))

    assert isinstance(repo, DynamoDoorRepo)
    resource.assert_called_once_with("dynamodb", region_name="us-east-2")
    resource.return_value.Table.assert_called_once_with("doors-dev")
