# Showcase test scripts
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sc_platform.catalog import Catalog
from sc_platform.config_base import DEFAULT_CFG
from sc_platform.storage import MemoryStorage

ALICE = "user_1_alice0000"
BOB = "user_2_bob000000"
Q = {"itemId": "dev-1", "itemType": "project"}


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def client(config_base, storage: MemoryStorage) -> TestClient:
    from showcase import create_app

    app = create_app(DEFAULT_CFG, storage=storage, catalog=Catalog())
    return TestClient(app)


def test_health(client: TestClient) -> None:
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


# ratings
def test_rating_upsert_over_http(client: TestClient) -> None:
    r = client.post("/api/ratings", json={**Q, "userId": ALICE, "rating": 5})
    assert r.status_code == 200
    first = r.json()
    assert first["rating"] == 5
    assert (first["average"], first["count"]) == (5.0, 1)

    r = client.post("/api/ratings", json={**Q, "userId": ALICE, "rating": 3})
    again = r.json()
    assert again["id"] == first["id"]
    assert (again["average"], again["count"]) == (3.0, 1)

    listed = client.get("/api/ratings", params=Q).json()
    assert [x["rating"] for x in listed] == [3]

    summary = client.get("/api/ratings/summary", params=Q).json()
    assert summary == {"average": 3.0, "count": 1, "display": "3.0"}


def test_summary_for_unrated_item(client: TestClient) -> None:
    r = client.get("/api/ratings/summary", params={"itemId": "ach-1", "itemType": "achievement"})
    assert r.json() == {"average": 0.0, "count": 0, "display": "0.0"}


@pytest.mark.parametrize(
    "body, field",
    [
        ({**Q, "userId": ALICE, "rating": 7}, "rating"),
        ({**Q, "userId": ALICE, "rating": "4"}, "rating"),
        ({**Q, "userId": "", "rating": 4}, "userId"),
        ({"itemId": "dev-1", "itemType": "video", "userId": ALICE, "rating": 4}, "itemType"),
        ({"itemId": "", "itemType": "project", "userId": ALICE, "rating": 4}, "itemId"),
    ],
)
def test_rating_validation(client: TestClient, body: dict, field: str) -> None:
    r = client.post("/api/ratings", json=body)
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == field


def test_listing_requires_item(client: TestClient) -> None:
    assert client.get("/api/ratings").status_code == 400
    assert client.get("/api/comments", params={"itemType": "project"}).status_code == 400


# comments
def _add(client: TestClient, user: str, text: str) -> dict:
    r = client.post("/api/comments", json={**Q, "userId": user, "author": "Ann", "text": text})
    assert r.status_code == 200
    return r.json()


def test_comment_crud_and_ownership(client: TestClient, storage: MemoryStorage) -> None:
    c = _add(client, ALICE, "first")
    d = _add(client, BOB, "second")
    listed = client.get("/api/comments", params=Q).json()
    assert [x["id"] for x in listed] == [d["id"], c["id"]]

    before = storage.read("portfolio_comments:project_dev-1")
    r = client.put(f"/api/comments/{c['id']}", params=Q, json={"userId": BOB, "text": "hijack"})
    assert r.status_code == 200
    assert r.json() == {"success": False}
    r = client.delete(f"/api/comments/{c['id']}", params={**Q, "userId": BOB})
    assert r.json() == {"success": False}
    assert storage.read("portfolio_comments:project_dev-1") == before

    r = client.put(f"/api/comments/{c['id']}", params=Q, json={"userId": ALICE, "text": "edited"})
    assert r.status_code == 200
    assert r.json()["text"] == "edited"

    r = client.delete(f"/api/comments/{c['id']}", params={**Q, "userId": ALICE})
    assert r.json() == {"success": True}
    assert [x["id"] for x in client.get("/api/comments", params=Q).json()] == [d["id"]]


def test_unknown_comment_is_404(client: TestClient) -> None:
    r = client.put("/api/comments/comment_nope", params=Q, json={"userId": ALICE, "text": "x"})
    assert r.status_code == 404
    r = client.delete("/api/comments/comment_nope", params={**Q, "userId": ALICE})
    assert r.status_code == 404


def test_empty_comment_is_400(client: TestClient) -> None:
    r = client.post("/api/comments", json={**Q, "userId": ALICE, "author": "Ann", "text": "  "})
    assert r.status_code == 400
    assert r.json()["detail"] == {"field": "text", "error": "comment text is required"}


# catalog
def test_catalog(client: TestClient) -> None:
    assert [p["id"] for p in client.get("/api/projects").json()] == ["dev-2", "dev-1", "edit-1"]
    assert [p["id"] for p in client.get("/api/projects", params={"type": "editor"}).json()] == ["edit-1"]
    assert client.get("/api/projects", params={"type": "singer"}).status_code == 400
    assert client.get("/api/projects/dev-1").json()["title"] == "LinguaSync"
    assert client.get("/api/projects/missing").status_code == 404
    assert [a["id"] for a in client.get("/api/achievements").json()] == ["ach-1", "ach-2"]
    assert client.get("/api/achievements/ach-2").status_code == 200
    assert client.get("/api/achievements/missing").status_code == 404


# inbox
def test_feedback_endpoints(client: TestClient) -> None:
    r = client.post("/api/feedback", json={"userName": "Bo", "feedback": "nice", "projectId": "dev-2"})
    assert r.status_code == 200
    fid = r.json()["id"]
    assert r.json()["read"] is False

    assert [f["id"] for f in client.get("/api/feedback").json()] == [fid]
    assert client.put(f"/api/feedback/{fid}/read").json()["read"] is True
    assert client.put("/api/feedback/feedback_nope/read").status_code == 404

    r = client.delete(f"/api/feedback/{fid}")
    assert r.json()["success"] is True
    assert client.delete(f"/api/feedback/{fid}").status_code == 404
    assert client.post("/api/feedback", json={"userName": "Bo"}).status_code == 400


def test_message_endpoints(client: TestClient) -> None:
    r = client.post("/api/messages", json={"name": "Cy", "message": "hello"})
    assert r.status_code == 200
    mid = r.json()["id"]
    assert client.get("/api/messages").json()[0]["message"] == "hello"
    assert client.put(f"/api/messages/{mid}/read").json()["read"] is True
    assert client.delete(f"/api/messages/{mid}").json()["success"] is True
    assert client.get("/api/messages").json() == []


def test_storage_failure_is_500(config_base, failing_storage) -> None:
    from showcase import create_app

    client = TestClient(create_app(DEFAULT_CFG, storage=failing_storage, catalog=Catalog()))
    r = client.post("/api/ratings", json={**Q, "userId": ALICE, "rating": 4})
    assert r.status_code == 500
