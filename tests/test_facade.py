# Showcase test scripts
from __future__ import annotations

import json

import pytest
import requests
import responses

from sc_platform.identity import VisitorSession
from sc_platform.models import ItemRef
from sc_platform.result import Ok, ValidationError
from sc_platform.storage import MemoryStorage
from services.facade import LocalBackend, RemoteBackend, build_client, build_facade
from services.remote_client import RemoteClient

API = "http://api.test/api"
ITEM = ItemRef("project", "dev-1")
ALICE = VisitorSession("user_1_alice0000")
BOB = VisitorSession("user_2_bob000000")


@pytest.fixture()
def local_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def remote(local_storage: MemoryStorage) -> RemoteBackend:
    client = RemoteClient(API, timeout=1.0, max_retries=1, backoff_base=0)
    return RemoteBackend(client, LocalBackend.over(local_storage))


def _rating_json(vid: str, value: int, rid: str = "rating_9", ts: str = "2025-02-01T00:00:00.000Z") -> dict:
    return {"id": rid, "itemId": "dev-1", "itemType": "project", "userId": vid, "rating": value, "createdAt": ts}


def _comment_json(vid: str, cid: str, ts: str, text: str = "hi") -> dict:
    return {
        "id": cid, "itemId": "dev-1", "itemType": "project", "userId": vid,
        "author": "Ann", "text": text, "createdAt": ts, "updatedAt": ts,
    }


# remote ok
@responses.activate
def test_remote_lists_are_sorted_newest_first(remote: RemoteBackend) -> None:
    responses.add(
        responses.GET,
        f"{API}/comments",
        json=[
            _comment_json(ALICE.visitor_id, "c_old", "2025-01-01T00:00:00.000Z"),
            _comment_json(BOB.visitor_id, "c_new", "2025-03-01T00:00:00.000Z"),
        ],
        status=200,
    )
    assert [c.id for c in remote.list_comments(ITEM)] == ["c_new", "c_old"]
    assert responses.calls[0].request.params == {"itemId": "dev-1", "itemType": "project"}


@responses.activate
def test_remote_submit_rating(remote: RemoteBackend, local_storage: MemoryStorage) -> None:
    responses.add(
        responses.POST,
        f"{API}/ratings",
        json={**_rating_json(ALICE.visitor_id, 4), "average": 4.5, "count": 2},
        status=200,
    )
    res = remote.submit_rating(ALICE, ITEM, 4)
    assert isinstance(res, Ok)
    assert res.value.rating.value == 4
    assert res.value.aggregate.to_dict() == {"average": 4.5, "count": 2, "display": "4.5"}

    assert len(responses.calls) == 1
    sent = json.loads(responses.calls[0].request.body)
    assert sent == {"itemId": "dev-1", "itemType": "project", "userId": ALICE.visitor_id, "rating": 4}
    assert local_storage.keys() == []


@responses.activate
def test_submit_rating_aggregate_comes_from_the_post(remote: RemoteBackend, local_storage: MemoryStorage) -> None:
    responses.add(
        responses.POST,
        f"{API}/ratings",
        json={**_rating_json(ALICE.visitor_id, 4), "average": 4.5, "count": 2},
        status=200,
    )
    responses.add(responses.GET, f"{API}/ratings", json={"error": "busy"}, status=503)

    res = remote.submit_rating(ALICE, ITEM, 4)
    assert isinstance(res, Ok)
    assert (res.value.aggregate.average, res.value.aggregate.count) == (4.5, 2)
    assert [c.request.method for c in responses.calls] == ["POST"]
    assert local_storage.keys() == []


@responses.activate
def test_submit_rating_without_aggregate_falls_back(remote: RemoteBackend, local_storage: MemoryStorage) -> None:
    responses.add(responses.POST, f"{API}/ratings", json=_rating_json(ALICE.visitor_id, 4), status=200)
    res = remote.submit_rating(ALICE, ITEM, 4)
    assert isinstance(res, Ok)
    assert res.value.aggregate.count == 1
    assert "portfolio_ratings:project_dev-1" in local_storage.keys()


@responses.activate
def test_remote_validation_happens_before_network(remote: RemoteBackend) -> None:
    assert isinstance(remote.submit_rating(ALICE, ITEM, 9), ValidationError)
    assert isinstance(remote.add_comment(ALICE, ITEM, "Ann", "   "), ValidationError)
    assert isinstance(remote.submit_feedback("", "x"), ValidationError)
    assert len(responses.calls) == 0


# fallback
@responses.activate
def test_connection_error_falls_back_to_local(remote: RemoteBackend, local_storage: MemoryStorage) -> None:
    responses.add(responses.POST, f"{API}/ratings", body=requests.ConnectionError("refused"))
    responses.add(responses.GET, f"{API}/ratings", body=requests.ConnectionError("refused"))

    res = remote.submit_rating(ALICE, ITEM, 5)
    assert isinstance(res, Ok)
    assert res.value.aggregate.count == 1
    assert "portfolio_ratings:project_dev-1" in local_storage.keys()
    assert [r.value for r in remote.list_ratings(ITEM)] == [5]


@responses.activate
def test_server_error_falls_back_to_local(remote: RemoteBackend) -> None:
    responses.add(responses.POST, f"{API}/comments", json={"error": "boom"}, status=500)
    responses.add(responses.GET, f"{API}/comments", json={"error": "boom"}, status=500)

    res = remote.add_comment(ALICE, ITEM, "Ann", "offline")
    assert isinstance(res, Ok)
    assert res.value.id.startswith("comment_")
    assert [c.text for c in remote.list_comments(ITEM)] == ["offline"]


@responses.activate
def test_unparseable_body_falls_back(remote: RemoteBackend) -> None:
    responses.add(responses.GET, f"{API}/comments", body="<html>oops</html>", status=200, content_type="text/html")
    assert remote.list_comments(ITEM) == []


@responses.activate
def test_retry_then_success(local_storage: MemoryStorage) -> None:
    client = RemoteClient(API, timeout=1.0, max_retries=2, backoff_base=0)
    backend = RemoteBackend(client, LocalBackend.over(local_storage))
    responses.add(responses.GET, f"{API}/ratings", json={"error": "busy"}, status=503)
    responses.add(responses.GET, f"{API}/ratings", json=[_rating_json(BOB.visitor_id, 2)], status=200)

    assert [r.value for r in backend.list_ratings(ITEM)] == [2]
    assert len(responses.calls) == 2


# ownership through the remote path
@responses.activate
def test_remote_non_owner_edit_is_refused_without_put(remote: RemoteBackend) -> None:
    responses.add(
        responses.GET,
        f"{API}/comments",
        json=[_comment_json(ALICE.visitor_id, "c1", "2025-01-01T00:00:00.000Z")],
        status=200,
    )
    assert remote.edit_comment(BOB, ITEM, "c1", "hijack") == Ok(None)
    assert remote.delete_comment(BOB, ITEM, "c1") == Ok(False)
    assert all(c.request.method == "GET" for c in responses.calls)


@responses.activate
def test_remote_owner_edit_and_delete(remote: RemoteBackend) -> None:
    responses.add(
        responses.GET,
        f"{API}/comments",
        json=[_comment_json(ALICE.visitor_id, "c1", "2025-01-01T00:00:00.000Z")],
        status=200,
    )
    responses.add(
        responses.PUT,
        f"{API}/comments/c1",
        json=_comment_json(ALICE.visitor_id, "c1", "2025-01-01T00:00:00.000Z", text="edited"),
        status=200,
    )
    responses.add(responses.DELETE, f"{API}/comments/c1", json={"success": True}, status=200)

    edited = remote.edit_comment(ALICE, ITEM, "c1", "edited")
    assert isinstance(edited, Ok) and edited.value is not None
    assert edited.value.text == "edited"
    assert remote.delete_comment(ALICE, ITEM, "c1") == Ok(True)

    put = next(c for c in responses.calls if c.request.method == "PUT")
    assert json.loads(put.request.body) == {"userId": ALICE.visitor_id, "text": "edited"}
    delete = next(c for c in responses.calls if c.request.method == "DELETE")
    assert delete.request.params["userId"] == ALICE.visitor_id


@responses.activate
def test_server_refusal_maps_to_none(remote: RemoteBackend) -> None:
    responses.add(responses.GET, f"{API}/comments", json=[], status=200)
    responses.add(responses.PUT, f"{API}/comments/c1", json={"success": False}, status=200)
    assert remote.edit_comment(ALICE, ITEM, "c1", "x") == Ok(None)


# inbox
@responses.activate
def test_feedback_falls_back_to_local(remote: RemoteBackend, local_storage: MemoryStorage) -> None:
    responses.add(responses.POST, f"{API}/feedback", body=requests.ConnectionError("down"))
    res = remote.submit_feedback("Bo", "great work", "Portfolio Website", "dev-2")
    assert isinstance(res, Ok)
    assert res.value.user_name == "Bo"
    assert res.value.project_id == "dev-2"
    assert "portfolio_feedback" in local_storage.keys()


@responses.activate
def test_message_goes_to_api(remote: RemoteBackend) -> None:
    responses.add(
        responses.POST,
        f"{API}/messages",
        json={"id": "message_1", "name": "Cy", "message": "hello", "createdAt": "2025-01-01T00:00:00.000Z"},
        status=200,
    )
    res = remote.send_message("Cy", "hello")
    assert isinstance(res, Ok)
    assert res.value.id == "message_1"


# wiring
def test_build_facade_local_by_default(config_base) -> None:
    facade = build_facade({"storage": {"mode": "local"}}, storage=MemoryStorage())
    assert isinstance(facade, LocalBackend)


def test_build_facade_remote(config_base) -> None:
    facade = build_facade({"storage": {"mode": "remote", "remote": {"base_url": API}}}, storage=MemoryStorage())
    assert isinstance(facade, RemoteBackend)
    assert facade.client.base_url == API


def test_build_client_shares_storage_with_identity(config_base) -> None:
    storage = MemoryStorage()
    client = build_client({"storage": {"mode": "local"}}, storage=storage)
    session = client.session()
    assert storage.read("userId") == session.visitor_id

    assert isinstance(client.facade.submit_rating(session, ITEM, 4), Ok)
    assert client.facade.user_rating(session, ITEM) == 4


def test_build_client_default_file_storage(config_base) -> None:
    client = build_client({})
    client.session()
    assert (config_base / "local_storage.json").exists()


# inbox reads through the facade
def _feedback_json(fid: str, ts: str, read: bool = False) -> dict:
    return {"id": fid, "userName": "Bo", "feedback": "nice", "createdAt": ts, "read": read}


@responses.activate
def test_remote_inbox_reads(remote: RemoteBackend) -> None:
    responses.add(
        responses.GET,
        f"{API}/feedback",
        json=[_feedback_json("f_old", "2025-01-01T00:00:00Z"), _feedback_json("f_new", "2025-01-02T00:00:00Z")],
        status=200,
    )
    responses.add(
        responses.GET,
        f"{API}/messages",
        json=[{"id": "m1", "name": "Cy", "message": "hello", "createdAt": "2025-01-01T00:00:00.000Z"}],
        status=200,
    )
    assert [f.id for f in remote.list_feedback()] == ["f_new", "f_old"]
    assert [m.message for m in remote.list_messages()] == ["hello"]


@responses.activate
def test_inbox_reads_fall_back_to_local(remote: RemoteBackend) -> None:
    responses.add(responses.POST, f"{API}/feedback", body=requests.ConnectionError("down"))
    responses.add(responses.POST, f"{API}/messages", body=requests.ConnectionError("down"))
    responses.add(responses.GET, f"{API}/feedback", json={"error": "boom"}, status=500)
    responses.add(responses.GET, f"{API}/messages", body=requests.ConnectionError("down"))

    fb = remote.submit_feedback("Bo", "offline feedback").value
    msg = remote.send_message("Cy", "offline message").value
    assert [f.id for f in remote.list_feedback()] == [fb.id]
    assert [m.id for m in remote.list_messages()] == [msg.id]


@responses.activate
def test_remote_mark_read_and_delete(remote: RemoteBackend) -> None:
    responses.add(
        responses.PUT,
        f"{API}/feedback/f1/read",
        json=_feedback_json("f1", "2025-01-01T00:00:00.000Z", read=True),
        status=200,
    )
    responses.add(responses.DELETE, f"{API}/messages/m1", json={"success": True, "message": "Message deleted successfully"}, status=200)

    marked = remote.mark_read("feedback", "f1")
    assert isinstance(marked, Ok) and marked.value.read is True
    assert remote.delete_inbox("messages", "m1") == Ok(True)


@responses.activate
def test_mark_read_and_delete_fall_back_to_local(remote: RemoteBackend) -> None:
    responses.add(responses.POST, f"{API}/feedback", body=requests.ConnectionError("down"))
    fb = remote.submit_feedback("Bo", "offline").value
    responses.add(responses.PUT, f"{API}/feedback/{fb.id}/read", body=requests.ConnectionError("down"))
    responses.add(responses.DELETE, f"{API}/feedback/{fb.id}", json={"error": "boom"}, status=500)

    marked = remote.mark_read("feedback", fb.id)
    assert isinstance(marked, Ok) and marked.value.read is True
    assert remote.delete_inbox("feedback", fb.id) == Ok(True)
    assert remote.fallback.list_feedback() == []


@responses.activate
def test_unknown_inbox_kind_is_rejected(remote: RemoteBackend) -> None:
    res = remote.mark_read("likes", "x")
    assert isinstance(res, ValidationError) and res.field == "kind"
    assert isinstance(remote.delete_inbox("likes", "x"), ValidationError)
    assert isinstance(remote.fallback.mark_read("likes", "x"), ValidationError)
    assert len(responses.calls) == 0


# catalog reads through the facade
@responses.activate
def test_remote_catalog_reads(remote: RemoteBackend) -> None:
    responses.add(responses.GET, f"{API}/projects", json=[{"id": "remote-1", "type": "editor"}], status=200)
    responses.add(responses.GET, f"{API}/achievements/ach-9", json={"id": "ach-9", "name": "Remote"}, status=200)

    assert [p["id"] for p in remote.projects("editor")] == ["remote-1"]
    assert responses.calls[0].request.params == {"type": "editor"}
    assert remote.achievement("ach-9")["name"] == "Remote"


@responses.activate
def test_catalog_reads_fall_back_to_local(remote: RemoteBackend) -> None:
    responses.add(responses.GET, f"{API}/projects", body=requests.ConnectionError("down"))
    responses.add(responses.GET, f"{API}/projects/dev-1", json={"error": "boom"}, status=500)
    responses.add(responses.GET, f"{API}/achievements", body="<html/>", status=200, content_type="text/html")
    responses.add(responses.GET, f"{API}/achievements/ach-1", body=requests.ConnectionError("down"))

    assert [p["id"] for p in remote.projects("developer")] == ["dev-2", "dev-1"]
    assert remote.project("dev-1")["title"] == "LinguaSync"
    assert [a["id"] for a in remote.achievements()] == ["ach-1", "ach-2"]
    assert remote.achievement("ach-1")["name"] == "Hackathon Finalist"


def test_local_backend_catalog_and_inbox(local_storage: MemoryStorage) -> None:
    local = LocalBackend.over(local_storage)
    assert [p["id"] for p in local.projects()] == ["dev-2", "dev-1", "edit-1"]
    assert local.project("missing") is None
    msg = local.send_message("Cy", "hi").value
    assert local.mark_read("messages", msg.id).value.read is True
    assert local.delete_inbox("messages", msg.id) == Ok(True)
    assert local.list_messages() == []
