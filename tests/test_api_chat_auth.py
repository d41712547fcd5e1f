from datetime import datetime, timedelta, timezone

from clausecraft.errors import GatewayError


# ------------------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------------------

def test_register_login_logout_cycle(client):
    resp = client.post("/api/register", json={"email": "a@example.com", "password": "secret1"})
    assert resp.status_code == 201
    user = resp.json()
    assert set(user) == {"id", "email"}

    assert client.get("/api/user").json() == user

    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/user").status_code == 401

    resp = client.post("/api/login", json={"email": "A@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]


def test_duplicate_registration_is_400(client, logged_in):
    resp = client.post("/api/register", json={"email": "demo@example.com", "password": "other99"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already registered"}


def test_wrong_password_is_401(client, logged_in):
    client.post("/api/logout")
    resp = client.post("/api/login", json={"email": "demo@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_short_password_is_400(client):
    resp = client.post("/api/register", json={"email": "b@example.com", "password": "123"})
    assert resp.status_code == 400


def test_password_is_not_stored_in_clear(client, store, logged_in):
    record = store.get_user(logged_in["id"])
    assert "demo123" not in record.passwordHash


# ------------------------------------------------------------------------------
# Chat
# ------------------------------------------------------------------------------

def test_chat_requires_login(client, gateway):
    gateway.replies = ["should not be used"]
    assert client.get("/api/chat/history").status_code == 401
    resp = client.post("/api/chat/message", json={"message": "What is an NDA?"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}
    assert gateway.calls == []


def test_chat_message_round_trip(client, gateway, logged_in):
    gateway.replies = ["An NDA is a confidentiality agreement."]
    resp = client.post("/api/chat/message", json={"message": "What is an NDA?"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["question"] == "What is an NDA?"
    assert body["answer"] == "An NDA is a confidentiality agreement."
    assert body["ownerId"] == logged_in["id"]
    assert gateway.calls[0]["max_tokens"] == 1000

    history = client.get("/api/chat/history").json()
    assert [h["id"] for h in history] == [body["id"]]


def test_chat_invalid_shape_is_400(client, gateway, logged_in):
    assert client.post("/api/chat/message", json={"text": "hi"}).status_code == 400
    assert client.post("/api/chat/message", json={"message": "   "}).status_code == 400
    assert gateway.calls == []


def test_chat_gateway_failure_is_500(client, gateway, store, logged_in):
    gateway.replies = [GatewayError("timeout")]
    resp = client.post("/api/chat/message", json={"message": "Hello?"})
    assert resp.status_code == 500
    assert store.list_chat_history(logged_in["id"]) == []


def test_history_is_ascending_and_scoped(client, store, logged_in):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    uid = logged_in["id"]
    # Inserted out of order on purpose
    store.append_chat_exchange(uid, "q2", "a2", created_at=base + timedelta(minutes=2))
    store.append_chat_exchange(uid, "q0", "a0", created_at=base)
    store.append_chat_exchange(uid, "q1", "a1", created_at=base + timedelta(minutes=1))
    store.append_chat_exchange(uid + 100, "other", "user", created_at=base)

    history = client.get("/api/chat/history").json()
    assert [h["question"] for h in history] == ["q0", "q1", "q2"]
