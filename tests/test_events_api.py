"""Event inspection and outcome reporting endpoints"""


def _append(store, n=1):
    return [store.append("UserCreated", "users/create", '{"user_id": %d}' % i) for i in range(n)]


def test_list_unprocessed(client, store):
    ids = _append(store, 3)
    response = client.get("/events/unprocessed", params={"limit": 2})
    assert response.status_code == 200
    assert [e["event_id"] for e in response.json()] == ids[:2]


def test_list_unprocessed_rejects_bad_bounds(client):
    assert client.get("/events/unprocessed", params={"max_attempts": 0}).status_code == 422
    assert client.get("/events/unprocessed", params={"limit": 0}).status_code == 422


def test_report_failure_then_success(client, store):
    (event_id,) = _append(store)

    response = client.post(f"/events/{event_id}/processed", json={"success": False, "error_message": "db timeout"})
    assert response.status_code == 200
    body = response.json()
    assert body["attempts"] == 1
    assert body["processed"] is False
    assert body["error_message"] == "db timeout"
    assert body["status"] == "pending"

    response = client.post(f"/events/{event_id}/processed", json={"success": True})
    body = response.json()
    assert body["attempts"] == 2
    assert body["processed"] is True
    assert body["error_message"] is None
    assert body["status"] == "processed"

    assert client.get("/events/unprocessed").json() == []


def test_report_failure_requires_message(client, store):
    (event_id,) = _append(store)
    response = client.post(f"/events/{event_id}/processed", json={"success": False})
    assert response.status_code == 422


def test_report_unknown_event(client):
    response = client.post("/events/404/processed", json={"success": True})
    assert response.status_code == 404


def test_exhausted_listing(client, store):
    (event_id,) = _append(store)
    for i in range(3):
        client.post(f"/events/{event_id}/processed", json={"success": False, "error_message": f"failure {i}"})

    assert client.get("/events/unprocessed", params={"max_attempts": 3}).json() == []
    exhausted = client.get("/events/exhausted", params={"max_attempts": 3}).json()
    assert [e["event_id"] for e in exhausted] == [event_id]
    assert exhausted[0]["status"] == "exhausted"
    assert [e["event_id"] for e in client.get("/events/unprocessed", params={"max_attempts": 5}).json()] == [event_id]


def test_get_event(client, store):
    (event_id,) = _append(store)
    response = client.get(f"/events/{event_id}")
    assert response.status_code == 200
    assert response.json()["event_type"] == "UserCreated"
    assert client.get("/events/999").status_code == 404
