"""User and role API tests"""
import json

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, Session

from app.core.config import settings
from app.core.exceptions import StorageFailure
from app.services.event_store import EventStore


def _create_role(client, name="ADMIN"):
    response = client.post("/roles", json={"role_name": name, "description": f"{name} role"})
    assert response.status_code == 201
    return response.json()


def _user_body(**overrides):
    body = {
        "username": "jdoe",
        "email": "jdoe@example.com",
        "password_hash": "$2b$12$abcdefghijklmnopqrstuv",
        "first_name": "John",
        "last_name": "Doe",
    }
    body.update(overrides)
    return body


def test_health_endpoint(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_user_with_roles(client):
    admin = _create_role(client, "ADMIN")
    response = client.post("/users", json=_user_body(roles=[{"role_id": admin["role_id"]}]))
    assert response.status_code == 201
    user = response.json()
    assert user["user_id"] == 1
    assert user["username"] == "jdoe"
    assert user["active"] is True
    assert [r["role_name"] for r in user["roles"]] == ["ADMIN"]
    assert "password_hash" not in user

    fetched = client.get(f"/users/{user['user_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "jdoe@example.com"


def test_create_user_records_event(client):
    client.post("/users", json=_user_body())
    events = client.get("/events/unprocessed").json()
    user_events = [e for e in events if e["event_type"] == "UserCreated"]
    assert len(user_events) == 1
    event = user_events[0]
    assert event["subject"] == "users/create"
    assert event["attempts"] == 0
    assert event["processed"] is False
    data = json.loads(event["data"])
    assert data["username"] == "jdoe"
    assert "password_hash" not in data


def test_create_user_without_body(client):
    """Test create endpoint without a body"""
    response = client.post("/users")
    assert response.status_code == 422


def test_create_user_missing_fields(client):
    response = client.post("/users", json={"username": "jdoe"})
    assert response.status_code == 422


def test_create_duplicate_user(client):
    assert client.post("/users", json=_user_body()).status_code == 201
    response = client.post("/users", json=_user_body(email="other@example.com"))
    assert response.status_code == 409


def test_create_user_unknown_role(client):
    response = client.post("/users", json=_user_body(roles=[{"role_id": 42}]))
    assert response.status_code == 404
    assert "42" in response.json()["detail"]
    assert client.get("/users/1").status_code == 404


def test_get_missing_user(client):
    assert client.get("/users/99").status_code == 404


def test_assign_role(client):
    role = _create_role(client, "AUDITOR")
    user = client.post("/users", json=_user_body()).json()

    response = client.post(f"/users/{user['user_id']}/roles/{role['role_id']}")
    assert response.status_code == 200
    assert [r["role_name"] for r in response.json()["roles"]] == ["AUDITOR"]

    again = client.post(f"/users/{user['user_id']}/roles/{role['role_id']}")
    assert again.status_code == 409

    types = [e["event_type"] for e in client.get("/events/unprocessed").json()]
    assert types == ["RoleCreated", "UserCreated", "RoleAssigned"]


def test_assign_role_unknown_user_or_role(client):
    role = _create_role(client)
    assert client.post(f"/users/5/roles/{role['role_id']}").status_code == 404
    user = client.post("/users", json=_user_body()).json()
    assert client.post(f"/users/{user['user_id']}/roles/77").status_code == 404


def test_roles_list_and_duplicates(client):
    _create_role(client, "ADMIN")
    _create_role(client, "USER")
    assert client.post("/roles", json={"role_name": "ADMIN"}).status_code == 409
    names = [r["role_name"] for r in client.get("/roles").json()]
    assert names == ["ADMIN", "USER"]


def _failing_append(self, event_type, subject, data, commit=True):
    raise StorageFailure("append", "database is unavailable")


def test_required_event_failure_fails_request(client, monkeypatch):
    monkeypatch.setattr(settings, "EVENT_APPEND_REQUIRED", True)
    monkeypatch.setattr(EventStore, "append", _failing_append)

    response = client.post("/users", json=_user_body())
    assert response.status_code == 503
    assert response.json()["detail"] == "Storage unavailable: append failed"

    monkeypatch.undo()
    assert client.get("/users/1").status_code == 404


def test_best_effort_event_failure_keeps_user(client, monkeypatch):
    monkeypatch.setattr(settings, "EVENT_APPEND_REQUIRED", False)
    monkeypatch.setattr(EventStore, "append", _failing_append)

    response = client.post("/users", json=_user_body())
    assert response.status_code == 201
    assert client.get(f"/users/{response.json()['user_id']}").status_code == 200
    assert client.get("/events/unprocessed").json() == []


def test_best_effort_commit_failure_returns_503(client, monkeypatch):
    monkeypatch.setattr(settings, "EVENT_APPEND_REQUIRED", False)

    def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("server closed the connection"))

    monkeypatch.setattr(Session, "commit", failing_commit)

    response = client.post("/users", json=_user_body())
    assert response.status_code == 503
    assert response.json()["detail"] == "Storage unavailable: commit failed"

    monkeypatch.undo()
    assert client.get("/users/1").status_code == 404


def test_best_effort_mode_still_records_event(client, monkeypatch):
    monkeypatch.setattr(settings, "EVENT_APPEND_REQUIRED", False)
    client.post("/users", json=_user_body())
    types = [e["event_type"] for e in client.get("/events/unprocessed").json()]
    assert types == ["UserCreated"]


def test_concurrent_duplicate_role_returns_409(client, monkeypatch):
    _create_role(client, "ADMIN")
    # Let the request miss the existing row, as a racing insert would
    monkeypatch.setattr(Query, "first", lambda self: None)

    response = client.post("/roles", json={"role_name": "ADMIN"})
    assert response.status_code == 409

    monkeypatch.undo()
    assert [r["role_name"] for r in client.get("/roles").json()] == ["ADMIN"]
