"""API tests against the real app with the UoW and publisher overridden."""
from __future__ import annotations

import logging
import uuid

import jwt
import pytest
from fastapi.testclient import TestClient

from messaging_service.api.deps import get_publisher, get_uow
from messaging_service.app import create_app
from messaging_service.config import settings
from messaging_service.log_config import CorrelationIdFilter
from tests.conftest import FakePublisher, FakeUoW


def _auth(user_id: str) -> dict[str, str]:
    token = jwt.encode(
        {"userId": user_id, "username": user_id.removeprefix("u-")},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


ALICE = _auth("u-alice")
BOB = _auth("u-bob")
MALLORY = _auth("u-mallory")


@pytest.fixture
def uow() -> FakeUoW:
    uow = FakeUoW()
    for user_id in ("u-alice", "u-bob", "u-mallory"):
        uow.add_user(user_id)
    uow.add_user("u-gone", deactivated=True)
    return uow


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def client(uow, publisher):
    app = create_app()

    async def _override_uow():
        yield uow

    app.dependency_overrides[get_uow] = _override_uow
    app.dependency_overrides[get_publisher] = lambda: publisher
    return TestClient(app, raise_server_exceptions=False)


def _api(path: str) -> str:
    return f"{settings.API_PREFIX}{path}"


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"]


def test_request_id_is_echoed(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_conversation_round_trip(client, publisher):
    created = client.post(_api("/conversations"), headers=ALICE, json={"participantId": "u-bob"})
    assert created.status_code == 201
    conversation = created.json()["conversation"]
    assert conversation["type"] == "direct"
    assert {p["id"] for p in conversation["participants"]} == {"u-alice", "u-bob"}

    again = client.post(_api("/conversations"), headers=BOB, json={"participantId": "u-alice"})
    assert again.status_code == 200
    assert again.json()["conversation"]["id"] == conversation["id"]

    cid = conversation["id"]
    posted = client.post(_api(f"/conversations/{cid}/messages"), headers=ALICE, json={"content": "hi"})
    assert posted.status_code == 201
    message = posted.json()["message"]
    assert message["receiverId"] == "u-bob"
    assert message["isDelivered"] is True
    assert message["isRead"] is False
    assert message["sender"]["username"] == "alice"
    assert publisher.types() == ["message_received", "conversation_updated"]

    listed = client.get(_api("/conversations"), headers=BOB).json()
    assert listed["success"] is True
    [row] = listed["conversations"]
    assert row["unreadCount"] == 1
    assert row["lastMessageContent"] == "hi"
    assert row["lastMessage"]["id"] == message["id"]

    page = client.get(_api(f"/conversations/{cid}/messages"), headers=BOB).json()
    assert [m["content"] for m in page["messages"]] == ["hi"]
    assert page["pagination"] == {
        "page": 1,
        "limit": settings.MESSAGES_PAGE_DEFAULT,
        "totalCount": 1,
        "hasMore": False,
        "totalPages": 1,
    }

    marked = client.patch(_api(f"/conversations/{cid}"), headers=BOB, json={"action": "mark_all_read"})
    assert marked.status_code == 200
    assert marked.json() == {"success": True, "message": "All messages marked as read"}
    assert client.get(_api("/conversations"), headers=BOB).json()["conversations"][0]["unreadCount"] == 0


def test_reply_and_delete(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")
    first = client.post(
        _api(f"/conversations/{conv.id}/messages"), headers=ALICE, json={"content": "question?"},
    ).json()["message"]
    reply = client.post(
        _api(f"/conversations/{conv.id}/messages"),
        headers=BOB,
        json={"content": "answer", "replyToId": first["id"]},
    ).json()["message"]
    assert reply["replyTo"]["id"] == first["id"]
    assert reply["replyTo"]["sender"] == {"id": "u-alice", "username": "alice"}

    deleted = client.patch(_api(f"/messages/{reply['id']}"), headers=BOB, json={"action": "delete"})
    assert deleted.status_code == 200
    body = deleted.json()
    assert body["message"] == "Message deleted"
    assert body["data"]["isDeleted"] is True

    summary = client.get(_api(f"/conversations/{conv.id}"), headers=ALICE).json()["conversation"]
    assert summary["lastMessageId"] == first["id"]


def test_mark_single_message_read(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")
    sent = client.post(
        _api(f"/conversations/{conv.id}/messages"), headers=ALICE, json={"content": "ping"},
    ).json()["message"]

    resp = client.patch(_api(f"/messages/{sent['id']}"), headers=BOB, json={"action": "mark_read"})

    assert resp.status_code == 200
    assert resp.json()["message"] == "Message marked as read"
    assert resp.json()["data"]["isRead"] is True


def test_missing_token_is_401(client):
    resp = client.get(_api("/conversations"))
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Unauthorized"}


def test_garbage_token_is_401(client):
    resp = client.get(_api("/conversations"), headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_deactivated_user_is_401(client):
    resp = client.get(_api("/conversations"), headers=_auth("u-gone"))
    assert resp.status_code == 401


def test_non_participant_gets_404(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")

    for resp in (
        client.get(_api(f"/conversations/{conv.id}"), headers=MALLORY),
        client.get(_api(f"/conversations/{conv.id}/messages"), headers=MALLORY),
        client.post(_api(f"/conversations/{conv.id}/messages"), headers=MALLORY, json={"content": "x"}),
    ):
        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "message": "Conversation not found or access denied",
        }


def test_unknown_conversation_gets_404(client):
    resp = client.get(_api(f"/conversations/{uuid.uuid4()}"), headers=ALICE)
    assert resp.status_code == 404


def test_blank_message_is_400(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")

    resp = client.post(_api(f"/conversations/{conv.id}/messages"), headers=ALICE, json={"content": "   "})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Message content or attachment required"}
    assert uow.messages._messages == []


def test_create_conversation_requires_participant(client):
    resp = client.post(_api("/conversations"), headers=ALICE, json={})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Participant ID is required"


def test_create_conversation_unknown_participant(client):
    resp = client.post(_api("/conversations"), headers=ALICE, json={"participantId": "u-nobody"})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Participant not found"


def test_invalid_actions_are_400(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")
    sent = client.post(
        _api(f"/conversations/{conv.id}/messages"), headers=ALICE, json={"content": "x"},
    ).json()["message"]

    conv_resp = client.patch(_api(f"/conversations/{conv.id}"), headers=ALICE, json={"action": "archive"})
    msg_resp = client.patch(_api(f"/messages/{sent['id']}"), headers=ALICE, json={"action": "pin"})

    assert conv_resp.status_code == 400
    assert msg_resp.status_code == 400
    assert msg_resp.json() == {"success": False, "message": "Invalid action"}


def test_bad_pagination_is_400(client, uow):
    conv = uow.add_conversation("u-alice", "u-bob")

    resp = client.get(_api(f"/conversations/{conv.id}/messages"), headers=ALICE, params={"page": 0})

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_malformed_id_is_400(client):
    resp = client.get(_api("/conversations/not-a-uuid"), headers=ALICE)
    assert resp.status_code == 400


def test_send_by_receiver_id_then_list_by_query(client, publisher):
    sent = client.post(
        _api("/messages"), headers=ALICE, json={"receiverId": "u-bob", "content": "first contact"},
    )
    assert sent.status_code == 201
    body = sent.json()
    assert body["success"] is True
    assert body["message"] == "Message sent"
    cid = body["data"]["conversationId"]
    assert body["data"]["receiverId"] == "u-bob"
    assert publisher.types() == ["message_received", "conversation_updated"]

    again = client.post(
        _api("/messages"), headers=BOB, json={"receiverId": "u-alice", "content": "welcome"},
    )
    assert again.json()["data"]["conversationId"] == cid

    page = client.get(_api("/messages"), headers=BOB, params={"conversationId": cid}).json()
    assert [m["content"] for m in page["messages"]] == ["first contact", "welcome"]
    assert page["pagination"]["totalCount"] == 2

    outsider = client.get(_api("/messages"), headers=MALLORY, params={"conversationId": cid})
    assert outsider.status_code == 404


def test_send_by_receiver_id_rejects_unknown_receiver(client):
    resp = client.post(_api("/messages"), headers=ALICE, json={"receiverId": "u-nobody", "content": "hi"})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Receiver not found"}


def test_send_by_receiver_id_requires_receiver(client):
    resp = client.post(_api("/messages"), headers=ALICE, json={"content": "hi"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_unexpected_error_is_500_with_request_id(client, uow, monkeypatch):
    async def _broken(user_id):
        raise RuntimeError("secret db detail")

    monkeypatch.setattr(uow.conversations, "list_for_user", _broken)

    records: list[logging.LogRecord] = []

    class _Collect(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    handler = _Collect(level=logging.ERROR)
    handler.addFilter(CorrelationIdFilter())
    app_logger = logging.getLogger("messaging_service")
    app_logger.addHandler(handler)
    try:
        resp = client.get(_api("/conversations"), headers={**ALICE, "X-Request-ID": "req-500"})
    finally:
        app_logger.removeHandler(handler)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Internal server error"}
    assert "secret" not in resp.text
    assert resp.headers["X-Request-ID"] == "req-500"
    [record] = records
    assert record.correlation_id == "req-500"
    assert record.exc_info is not None
