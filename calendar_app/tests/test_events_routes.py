import pytest
from datetime import datetime, timezone


def event_row(event_id=1, user_id=1, **overrides):
    row = {
        "event_id": event_id,
        "user_id": user_id,
        "title": "Standup",
        "description": None,
        "date": datetime(2024, 1, 2, 9, 0, 0, tzinfo=timezone.utc),
        "category": None,
        "reminder": False,
        "reminder_time": None,
        "version": 1,
        "created_at": datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


def test_list_events(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchall.return_value = [event_row(1), event_row(2, title="Retro")]

    response = client.get("/api/events", headers=auth_header(1))

    assert response.status_code == 200
    data = response.get_json()
    assert [e["title"] for e in data] == ["Standup", "Retro"]
    assert data[0]["date"] == "2024-01-02T09:00:00Z"

    sql, params = mock_cursor.execute.call_args[0]
    assert "WHERE user_id = %s" in sql
    assert params == (1,)


def test_list_events_scoped_to_token_user(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchall.return_value = []

    response = client.get("/api/events", headers=auth_header(2))

    assert response.status_code == 200
    assert response.get_json() == []
    _, params = mock_cursor.execute.call_args[0]
    assert params == (2,)


def test_list_events_requires_token(client, events_db):
    _, mock_cursor = events_db

    response = client.get("/api/events")

    assert response.status_code == 401
    assert response.get_json()["error"] == "Unauthenticated"
    assert not mock_cursor.execute.called


def test_list_events_rejects_bad_token(client, events_db):
    _, mock_cursor = events_db

    response = client.get("/api/events", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert not mock_cursor.execute.called


def test_create_event_success(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(10, user_id=1)

    payload = {"title": "Standup", "date": "2024-01-02T09:00:00Z"}
    response = client.post("/api/events", json=payload, headers=auth_header(1))

    assert response.status_code == 201
    data = response.get_json()
    assert data["id"] == 10
    assert data["title"] == "Standup"
    assert data["date"] == "2024-01-02T09:00:00Z"

    sql, params = mock_cursor.execute.call_args[0]
    assert sql.startswith("INSERT INTO events (title, date, user_id)")
    assert params == ["Standup", datetime(2024, 1, 2, 9, 0, 0, tzinfo=timezone.utc), 1]


def test_create_event_ignores_client_owner(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(11, user_id=1)

    payload = {"title": "Standup", "date": "2024-01-02T09:00:00Z", "user_id": 99, "userId": 99}
    response = client.post("/api/events", json=payload, headers=auth_header(1))

    assert response.status_code == 201
    sql, params = mock_cursor.execute.call_args[0]
    assert params[-1] == 1
    assert 99 not in params


def test_create_event_with_optional_fields(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(
        12,
        description="Daily sync",
        category="work",
        reminder=True,
        reminder_time=datetime(2024, 1, 2, 8, 45, 0, tzinfo=timezone.utc),
    )

    payload = {
        "title": "Standup",
        "date": "2024-01-02T09:00:00Z",
        "description": "Daily sync",
        "category": "work",
        "reminder": True,
        "reminder_time": "2024-01-02T08:45:00Z",
    }
    response = client.post("/api/events", json=payload, headers=auth_header(1))

    assert response.status_code == 201
    data = response.get_json()
    assert data["reminder"] is True
    assert data["reminder_time"] == "2024-01-02T08:45:00Z"
    assert data["category"] == "work"


@pytest.mark.parametrize("payload", [
    {"title": "Standup"},
    {"date": "2024-01-02T09:00:00Z"},
    {"title": "   ", "date": "2024-01-02T09:00:00Z"},
    {"title": "Standup", "date": "not a date"},
    {"title": "x" * 201, "date": "2024-01-02T09:00:00Z"},
    {"title": "Standup", "date": "2024-01-02T09:00:00Z", "reminder": "yes"},
])
def test_create_event_invalid_input(client, events_db, auth_header, payload):
    _, mock_cursor = events_db

    response = client.post("/api/events", json=payload, headers=auth_header(1))

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"
    assert not mock_cursor.execute.called


def test_create_event_requires_token(client, events_db):
    _, mock_cursor = events_db
    response = client.post("/api/events", json={"title": "Standup", "date": "2024-01-02T09:00:00Z"})
    assert response.status_code == 401
    assert not mock_cursor.execute.called


def test_update_event(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(1, title="Updated Title", version=2)

    response = client.put("/api/events/1", json={"title": "Updated Title"}, headers=auth_header(1))

    assert response.status_code == 200
    data = response.get_json()
    assert data["title"] == "Updated Title"
    assert data["version"] == 2

    sql, params = mock_cursor.execute.call_args[0]
    assert "WHERE event_id = %s AND user_id = %s" in sql
    assert "version = version + 1" in sql
    assert params == ["Updated Title", 1, 1]


def test_update_event_ignores_owner_fields(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(1)

    response = client.put("/api/events/1", json={"description": "notes", "user_id": 2}, headers=auth_header(1))

    assert response.status_code == 200
    sql, params = mock_cursor.execute.call_args[0]
    assert sql.startswith("UPDATE events SET description = %s,")
    assert params == ["notes", 1, 1]


def test_update_event_of_other_user_is_not_found(client, events_db, auth_header):
    _, mock_cursor = events_db
    # The owner-scoped UPDATE matches no row for user 2
    mock_cursor.fetchone.return_value = None

    response = client.put("/api/events/1", json={"title": "Hijacked"}, headers=auth_header(2))

    assert response.status_code == 404
    assert response.get_json() == {"message": "Event not found", "error": "NotFound"}
    _, params = mock_cursor.execute.call_args[0]
    assert params == ["Hijacked", 1, 2]


def test_update_event_no_valid_fields(client, events_db, auth_header):
    _, mock_cursor = events_db

    response = client.put("/api/events/1", json={"owner": 3}, headers=auth_header(1))

    assert response.status_code == 400
    assert not mock_cursor.execute.called


def test_update_event_with_matching_version(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = event_row(1, title="New", version=4)

    response = client.put("/api/events/1", json={"title": "New", "version": 3}, headers=auth_header(1))

    assert response.status_code == 200
    sql, params = mock_cursor.execute.call_args[0]
    assert "AND version = %s" in sql
    assert params == ["New", 1, 1, 3]


def test_update_event_with_stale_version(client, events_db, auth_header):
    _, mock_cursor = events_db
    # UPDATE matches nothing, then the owner-scoped lookup finds version 5
    mock_cursor.fetchone.side_effect = [None, {"version": 5}]

    response = client.put("/api/events/1", json={"title": "New", "version": 3}, headers=auth_header(1))

    assert response.status_code == 409
    assert response.get_json()["error"] == "VersionConflict"
    sql, params = mock_cursor.execute.call_args[0]
    assert "WHERE event_id = %s AND user_id = %s" in sql
    assert params == (1, 1)


def test_update_event_with_version_not_owned(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.side_effect = [None, None]

    response = client.put("/api/events/1", json={"title": "New", "version": 3}, headers=auth_header(2))

    assert response.status_code == 404


def test_update_event_rejects_non_integer_version(client, events_db, auth_header):
    response = client.put("/api/events/1", json={"title": "New", "version": "3"}, headers=auth_header(1))
    assert response.status_code == 400


def test_delete_event(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = {"event_id": 1}

    response = client.delete("/api/events/1", headers=auth_header(1))

    assert response.status_code == 200
    assert response.get_json() == {"message": "Event deleted"}
    sql, params = mock_cursor.execute.call_args[0]
    assert "WHERE event_id = %s AND user_id = %s" in sql
    assert params == (1, 1)


def test_delete_event_twice_is_not_found_both_times(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = None

    first = client.delete("/api/events/1", headers=auth_header(1))
    second = client.delete("/api/events/1", headers=auth_header(1))

    assert first.status_code == second.status_code == 404
    assert first.get_json() == second.get_json()


def test_delete_event_of_other_user_is_not_found(client, events_db, auth_header):
    _, mock_cursor = events_db
    mock_cursor.fetchone.return_value = None

    response = client.delete("/api/events/1", headers=auth_header(2))

    assert response.status_code == 404
    _, params = mock_cursor.execute.call_args[0]
    assert params == (1, 2)


def test_non_integer_event_id_is_not_found(client, auth_header):
    response = client.delete("/api/events/abc", headers=auth_header(1))
    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"


@pytest.mark.parametrize("field", ["title", "description", "category"])
def test_create_event_rejects_nul_characters(client, events_db, auth_header, field):
    _, mock_cursor = events_db
    payload = {"title": "Standup", "date": "2024-01-02T09:00:00Z", field: "bad\x00value"}

    response = client.post("/api/events", json=payload, headers=auth_header(1))

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"
    assert not mock_cursor.execute.called


def test_update_event_rejects_nul_characters(client, events_db, auth_header):
    _, mock_cursor = events_db

    response = client.put("/api/events/1", json={"title": "Re\x00tro"}, headers=auth_header(1))

    assert response.status_code == 400
    assert not mock_cursor.execute.called


@pytest.mark.parametrize("body", [["Standup"], "Standup"])
def test_create_event_non_object_body(client, events_db, auth_header, body):
    response = client.post("/api/events", json=body, headers=auth_header(1))
    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"


def test_create_then_list_returns_the_event(client, events_db, auth_header):
    _, mock_cursor = events_db
    created_row = event_row(20, user_id=1)
    mock_cursor.fetchone.return_value = created_row

    created = client.post(
        "/api/events",
        json={"title": "Standup", "date": "2024-01-02T09:00:00Z"},
        headers=auth_header(1),
    )
    assert created.status_code == 201

    # The store now holds exactly the inserted row for this owner
    mock_cursor.fetchall.return_value = [created_row]
    listed = client.get("/api/events", headers=auth_header(1))

    assert listed.status_code == 200
    events = listed.get_json()
    assert len(events) == 1
    assert events[0] == created.get_json()
    assert events[0]["title"] == "Standup"
    assert events[0]["date"] == "2024-01-02T09:00:00Z"
    _, params = mock_cursor.execute.call_args[0]
    assert params == (1,)
