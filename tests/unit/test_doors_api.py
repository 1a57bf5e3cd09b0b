# ---------------------------------------------------------------------------
# Unit Tests: Door HTTP API
#
# Drives the FastAPI app end to end through TestClient with an in-memory
# store:
#   - Status codes and body shapes for every door endpoint
#   - The 503 connectivity gate on every store-backed route
#   - Invalid ids rejected with 400 before any store lookup
#   - Error bodies: machine code, message, stack only in development
#   - Health / root / unknown routes
# ---------------------------------------------------------------------------
import pytest
from fastapi.testclient import TestClient

from door_catalog.config import Settings
from door_catalog.main import create_app
from door_catalog.repositories.doors_repo import InMemoryDoorRepo

WOOD_1 = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa-00000001"
WOOD_2 = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa-00000002"
STEEL_1 = "bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb-00000001"
MISSING = "cccccccc-cccc-4ccc-8ccc-cccccccccccc-00000001"


def door(door_id, name, material, finish="Varnish", height=80, width=36):
    return {
        "id": door_id,
        "name": name,
        "material": material,
        "dimensions": {"height": height, "width": width},
        "finish": finish,
    }


@pytest.fixture
def repo():
    return InMemoryDoorRepo()


@pytest.fixture(autouse=True)
def no_auth_env(monkeypatch):
    for key in ("AUTH_URL", "AUTH_CLIENT_ID", "AUTH_CLIENT_SECRET", "AUTH_SCOPE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def client(repo):
    app = create_app(settings=Settings(), repo=repo)
    return TestClient(app)


@pytest.fixture
def seeded(client):
    resp = client.post("/api/doors/batch", json=[
        door(WOOD_1, "Front Door", "Wood"),
        door(WOOD_2, "Back Door", "Wood", width=32),
        door(STEEL_1, "Garage Door", "Steel", finish="Powder Coat", height=84, width=120),
    ])
    assert resp.status_code == 201
    return client


def delete(client, body):
    return client.request("DELETE", "/api/doors/delete", json=body)


# -----------------------------
# Create / list
# -----------------------------
def test_add_door_with_generated_id(client):
    resp = client.post("/api/doors/add", json={
        "name": "Pantry", "material": "Pine", "dimensions": {"height": 80, "width": 24},
    })
    assert resp.status_code == 201
    body = resp.json()
    assert len(body["id"]) == 45
    assert body["createdAt"] and body["updatedAt"]


def test_add_door_with_alias_id(client):
    resp = client.post("/api/doors/add", json={**door(WOOD_1, "Front Door", "Wood"), "id": None, "_id": WOOD_1})
    assert resp.status_code == 201
    assert resp.json()["id"] == WOOD_1


def test_add_door_missing_fields(client):
    resp = client.post("/api/doors/add", json={"id": WOOD_1, "name": "Front Door"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "missing_fields"
    assert body["missing"] == ["material", "dimensions.height", "dimensions.width"]


def test_add_door_invalid_id(client):
    resp = client.post("/api/doors/add", json=door("wood-door-1", "Front Door", "Wood"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_id"
    assert resp.json()["receivedId"] == "wood-door-1"


def test_add_door_duplicate_id(seeded):
    resp = seeded.post("/api/doors/add", json=door(WOOD_1, "Copy", "Wood"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "duplicate_id"


def test_add_door_keeps_extra_fields(client):
    resp = client.post("/api/doors/add", json={**door(WOOD_1, "Front Door", "Wood"), "fireRating": "90min"})
    assert resp.status_code == 201
    assert client.get("/api/doors").json()[0]["fireRating"] == "90min"


@pytest.mark.parametrize("payload", [[], {"name": "x"}, None])
def test_batch_requires_non_empty_array(client, payload):
    resp = client.post("/api/doors/batch", json=payload)
    assert resp.status_code == 400


def test_batch_reports_failing_index_and_writes_nothing(client, repo):
    resp = client.post("/api/doors/batch", json=[
        door(WOOD_1, "Front Door", "Wood"),
        {"id": WOOD_2, "name": "Back Door"},
    ])
    assert resp.status_code == 400
    assert resp.json()["index"] == 1
    assert repo.find_all() == []


def test_list_newest_first(client, mocker):
    stamps = iter(["2026-01-01T00:00:00.000Z", "2026-01-02T00:00:00.000Z"])
    mocker.patch("door_catalog.repositories.doors_repo.utc_now", side_effect=lambda: next(stamps))
    client.post("/api/doors/add", json=door(WOOD_1, "Older", "Wood"))
    client.post("/api/doors/add", json=door(WOOD_2, "Newer", "Wood"))

    resp = client.get("/api/doors")
    assert resp.status_code == 200
    assert [d["name"] for d in resp.json()] == ["Newer", "Older"]


# -----------------------------
# Propagation update
# -----------------------------
def test_update_propagates_across_material(seeded):
    resp = seeded.patch("/api/doors/update", json={"id": WOOD_1, "finish": "Gloss"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["door"]["id"] == WOOD_1
    assert body["door"]["finish"] == "Gloss"
    assert body["updatedFields"] == ["finish"]
    assert body["bulkUpdateResult"]["groupingKey"] == "Wood"
    assert body["bulkUpdateResult"]["totalUpdated"] == 2

    finishes = {d["id"]: d["finish"] for d in seeded.get("/api/doors").json()}
    assert finishes == {WOOD_1: "Gloss", WOOD_2: "Gloss", STEEL_1: "Powder Coat"}


def test_update_accepts_underscore_id(seeded):
    resp = seeded.patch("/api/doors/update", json={"_id": STEEL_1, "finish": "Matte"})
    assert resp.status_code == 200
    assert resp.json()["bulkUpdateResult"]["totalUpdated"] == 1


def test_update_without_id(seeded):
    resp = seeded.patch("/api/doors/update", json={"finish": "Gloss"})
    assert resp.status_code == 400
    assert resp.json()["received"] == ["finish"]


def test_update_with_only_id(seeded):
    resp = seeded.patch("/api/doors/update", json={"id": WOOD_1})
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"


def test_update_unknown_id(seeded):
    before = seeded.get("/api/doors").json()
    resp = seeded.patch("/api/doors/update", json={"id": MISSING, "finish": "Gloss"})
    assert resp.status_code == 404
    assert resp.json()["searchedId"] == MISSING
    assert seeded.get("/api/doors").json() == before


@pytest.mark.parametrize("method,path", [
    ("PATCH", "/api/doors/update"),
    ("DELETE", "/api/doors/delete"),
])
def test_invalid_id_never_touches_store(seeded, repo, mocker, method, path):
    spies = [mocker.spy(repo, name) for name in ("find_by_id", "update_many", "delete_by_id", "count")]

    resp = seeded.request(method, path, json={"id": "not-a-uuid", "finish": "Gloss"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_id"
    assert resp.json()["receivedId"] == "not-a-uuid"
    assert all(spy.call_count == 0 for spy in spies)


# -----------------------------
# Criteria bulk update
# -----------------------------
def test_bulk_update(seeded):
    resp = seeded.patch("/api/doors/bulk-update", json={
        "criteria": {"material": "Steel"}, "updateData": {"finish": "Galvanized"},
    })
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Bulk update completed successfully",
        "matchedCount": 1,
        "modifiedCount": 1,
        "criteria": {"material": "Steel"},
        "updatedFields": ["finish"],
    }


def test_bulk_update_empty_criteria_hits_every_door(seeded):
    resp = seeded.patch("/api/doors/bulk-update", json={"criteria": {}, "updateData": {"quality": "Premium"}})
    assert resp.status_code == 200
    assert resp.json()["matchedCount"] == 3
    assert all(d["quality"] == "Premium" for d in seeded.get("/api/doors").json())


@pytest.mark.parametrize("payload", [
    {"updateData": {"finish": "Gloss"}},
    {"criteria": {"material": "Wood"}},
    {"criteria": {"material": "Wood"}, "updateData": {}},
    {"criteria": "Wood", "updateData": {"finish": "Gloss"}},
])
def test_bulk_update_bad_requests(seeded, payload):
    resp = seeded.patch("/api/doors/bulk-update", json=payload)
    assert resp.status_code == 400


@pytest.mark.parametrize("method,path,body", [
    ("PATCH", "/api/doors/bulk-update", {"criteria": {}, "updateData": {"id.x": 1}}),
    ("PATCH", "/api/doors/update", {"id": WOOD_1, "name.first": "x"}),
    ("PATCH", "/api/doors/update", {"id": WOOD_1, "dimensions.height.cm": 5}),
])
def test_dotted_update_paths_rejected_and_listing_still_works(seeded, method, path, body):
    before = seeded.get("/api/doors").json()

    resp = seeded.request(method, path, json=body)

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"
    listing = seeded.get("/api/doors")
    assert listing.status_code == 200
    assert listing.json() == before


def test_bulk_update_no_match(seeded):
    resp = seeded.patch("/api/doors/bulk-update", json={
        "criteria": {"material": "Bronze"}, "updateData": {"finish": "Patina"},
    })
    assert resp.status_code == 404
    assert resp.json()["criteria"] == {"material": "Bronze"}


# -----------------------------
# Delete
# -----------------------------
def test_delete_door(seeded, repo):
    resp = delete(seeded, {"id": STEEL_1})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Door deleted successfully"}
    assert repo.find_by_id(STEEL_1) is None


def test_delete_missing_door(seeded):
    resp = delete(seeded, {"_id": MISSING})
    assert resp.status_code == 404


def test_delete_without_id(seeded):
    resp = delete(seeded, {})
    assert resp.status_code == 400


# -----------------------------
# Store failures / connectivity
# -----------------------------
@pytest.mark.parametrize("method,path,body", [
    ("GET", "/api/doors", None),
    ("POST", "/api/doors/add", door(WOOD_1, "Front Door", "Wood")),
    ("POST", "/api/doors/batch", [door(WOOD_1, "Front Door", "Wood")]),
    ("PATCH", "/api/doors/update", {"id": WOOD_1, "finish": "Gloss"}),
    ("PATCH", "/api/doors/bulk-update", {"criteria": {}, "updateData": {"finish": "Gloss"}}),
    ("DELETE", "/api/doors/delete", {"id": WOOD_1}),
])
def test_disconnected_store_returns_503(client, repo, mocker, method, path, body):
    mocker.patch.object(repo, "is_connected", return_value=False)
    find = mocker.spy(repo, "find_by_id")

    resp = client.request(method, path, json=body)

    assert resp.status_code == 503
    assert resp.json()["error"] == "database_unavailable"
    assert find.call_count == 0


def test_store_error_is_500_without_stack_in_production(seeded, repo, mocker):
    from door_catalog.errors import StoreOperationFailed

    mocker.patch.object(
        repo, "update_many",
        side_effect=StoreOperationFailed("Database bulk update failed", details="connection reset"),
    )
    resp = seeded.patch("/api/doors/update", json={"id": WOOD_1, "finish": "Gloss"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "database_error"
    assert body["details"] == "connection reset"
    assert "stack" not in body


def test_unexpected_error_hides_details_in_production(repo, mocker):
    mocker.patch.object(repo, "find_all", side_effect=RuntimeError("dsn=secret-host:27017"))
    client = TestClient(create_app(settings=Settings(), repo=repo), raise_server_exceptions=False)

    resp = client.get("/api/doors")

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "internal_error"
    assert "details" not in body
    assert "stack" not in body
    assert "secret-host" not in resp.text


def test_unexpected_error_details_in_development(repo, mocker):
    mocker.patch.object(repo, "find_all", side_effect=RuntimeError("dsn=secret-host:27017"))
    app = create_app(settings=Settings(app_env="development"), repo=repo)
    client = TestClient(app, raise_server_exceptions=False)

    body = client.get("/api/doors").json()

    assert body["details"] == "dsn=secret-host:27017"
    assert "stack" in body


def test_development_mode_includes_stack(repo):
    app = create_app(settings=Settings(app_env="development"), repo=repo)
    client = TestClient(app)

    resp = client.patch("/api/doors/update", json={"id": MISSING, "finish": "Gloss"})

    assert resp.status_code == 404
    assert "stack" in resp.json()


# -----------------------------
# System routes
# -----------------------------
def test_health_reports_database_state(client, repo, mocker):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"

    mocker.patch.object(repo, "is_connected", return_value=False)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "disconnected"


def test_root(client):
    body = client.get("/").json()
    assert body["status"] == "running"
    assert body["database"] == "connected"


def test_unknown_route(client):
    resp = client.get("/api/windows")
    assert resp.status_code == 404
    assert resp.json()["error"] == "route_not_found"


def test_token_route_absent_without_auth_config(client):
    assert client.get("/token").status_code == 404


def test_responses_carry_request_id(client):
    assert client.get("/health").headers.get("x-request-id")
