"""
Route tests for /api/users with auth bypassed and a fresh, empty UserService.
"""

import asyncio

from app.services.users import UserService

NEW_USER = {
    "first_name": "alice",
    "last_name": "anderson",
    "email": "Alice@Company.com",
    "phone_number": "+1-555-0100",
    "department": "it",
    "position": "software engineer",
}


def _create(client, **overrides):
    response = client.post("/api/users", json={**NEW_USER, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_returns_201_with_location_and_sanitized_fields(client):
    response = client.post("/api/users", json=NEW_USER)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["first_name"] == "Alice"
    assert body["email"] == "alice@company.com"
    assert body["department"] == "IT"
    assert body["position"] == "Software Engineer"
    assert body["is_active"] is True
    assert response.headers["location"].endswith("/api/users/1")


def test_create_duplicate_email_returns_409(client):
    _create(client)

    response = client.post("/api/users", json={**NEW_USER, "email": "ALICE@company.com"})

    assert response.status_code == 409
    body = response.json()
    assert body["type"] == "conflict"
    assert body["detail"] == "A user with this email already exists."


def test_create_invalid_body_returns_400_with_field_errors(client):
    response = client.post(
        "/api/users", json={**NEW_USER, "department": "Engineering", "first_name": "A1"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "validation-error"
    assert "department" in body["errors"]
    assert "first_name" in body["errors"]
    assert body["errors"]["department"][0].startswith("Department must be one of")


def test_get_by_id(client):
    created = _create(client)

    response = client.get(f"/api/users/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_missing_returns_404(client):
    response = client.get("/api/users/42")

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "not-found"
    assert body["detail"] == "User with ID 42 not found"
    assert body["instance"] == "/api/users/42"


def test_non_positive_id_returns_400(client):
    response = client.get("/api/users/0")

    assert response.status_code == 400
    assert response.json()["detail"] == "User ID must be a positive integer"


def test_non_numeric_id_returns_400(client):
    response = client.get("/api/users/abc")

    assert response.status_code == 400
    assert response.json()["type"] == "validation-error"


def test_head_reports_existence(client):
    created = _create(client)

    assert client.head(f"/api/users/{created['id']}").status_code == 200
    assert client.head("/api/users/999").status_code == 404


def test_get_by_email_is_case_insensitive(client):
    created = _create(client)

    response = client.get("/api/users/by-email", params={"email": "ALICE@company.COM"})

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert client.get("/api/users/by-email", params={"email": "x@y.com"}).status_code == 404


def test_get_by_department(client):
    _create(client, email="a@x.com", last_name="Zed")
    _create(client, email="b@x.com", last_name="Adams")
    _create(client, email="c@x.com", department="HR")

    response = client.get("/api/users/by-department/IT")

    assert response.status_code == 200
    assert [u["last_name"] for u in response.json()] == ["Adams", "Zed"]


def test_get_by_department_too_long_returns_400(client):
    response = client.get("/api/users/by-department/" + "x" * 101)

    assert response.status_code == 400


def test_list_all(client):
    _create(client, email="a@x.com")
    _create(client, email="b@x.com")

    response = client.get("/api/users/all")

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_query_pagination_and_sorting(client):
    for n, last in enumerate(["Doe", "Johnson", "Adams"]):
        _create(client, email=f"{n}@x.com", last_name=last)
    _create(client, email="hr@x.com", department="HR", last_name="Smith")

    response = client.get(
        "/api/users",
        params={
            "department": "IT",
            "sort_by": "lastName",
            "sort_direction": "desc",
            "page": 1,
            "page_size": 2,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [u["last_name"] for u in body["data"]] == ["Johnson", "Doe"]
    assert body["total_count"] == 3
    assert body["total_pages"] == 2
    assert body["has_next_page"] is True
    assert body["has_previous_page"] is False


def test_query_page_size_is_capped(client):
    _create(client)

    body = client.get("/api/users", params={"page_size": 500}).json()

    assert body["page_size"] == 100


def test_query_rejects_page_zero(client):
    response = client.get("/api/users", params={"page": 0})

    assert response.status_code == 400
    assert "page" in response.json()["errors"]


def test_update_partial(client):
    created = _create(client)

    response = client.put(f"/api/users/{created['id']}", json={"position": "team lead"})

    assert response.status_code == 200
    body = response.json()
    assert body["position"] == "Team Lead"
    assert body["email"] == created["email"]


def test_update_empty_body_returns_400(client):
    created = _create(client)

    response = client.put(f"/api/users/{created['id']}", json={})

    assert response.status_code == 400
    body = response.json()
    assert body["errors"]["body"] == ["At least one field must be provided for update"]


def test_update_conflict_and_not_found(client):
    _create(client, email="a@x.com")
    other = _create(client, email="b@x.com")

    conflict = client.put(f"/api/users/{other['id']}", json={"email": "a@x.com"})
    missing = client.put("/api/users/999", json={"position": "Lead"})

    assert conflict.status_code == 409
    assert missing.status_code == 404


def test_delete_then_get_returns_404_and_email_is_reusable(client):
    created = _create(client)

    assert client.delete(f"/api/users/{created['id']}").status_code == 204
    assert client.get(f"/api/users/{created['id']}").status_code == 404
    assert client.delete(f"/api/users/{created['id']}").status_code == 404

    again = _create(client)
    assert again["id"] != created["id"]


def test_soft_deleted_visible_with_is_active_false(client):
    created = _create(client)
    client.delete(f"/api/users/{created['id']}")

    body = client.get("/api/users", params={"is_active": "false"}).json()

    assert [u["id"] for u in body["data"]] == [created["id"]]


def test_mutation_is_visible_to_next_query(client):
    created = _create(client)
    client.get("/api/users")

    client.put(f"/api/users/{created['id']}", json={"department": "HR"})
    body = client.get("/api/users").json()

    assert body["data"][0]["department"] == "HR"


class _LoopRecordingService(UserService):
    """Records, per call, whether it ran on a thread with a running event loop."""

    def __init__(self):
        super().__init__()
        self.calls: list[tuple[str, bool]] = []

    def _record(self, name):
        try:
            asyncio.get_running_loop()
            on_loop = True
        except RuntimeError:
            on_loop = False
        self.calls.append((name, on_loop))

    def list_all(self):
        self._record("list_all")
        return super().list_all()

    def query(self, params):
        self._record("query")
        return super().query(params)

    def get_by_id(self, record_id):
        self._record("get_by_id")
        return super().get_by_id(record_id)

    def create(self, fields):
        self._record("create")
        return super().create(fields)

    def update(self, record_id, changes):
        self._record("update")
        return super().update(record_id, changes)

    def soft_delete(self, record_id):
        self._record("soft_delete")
        return super().soft_delete(record_id)


def test_service_calls_run_off_the_event_loop(client):
    service = _LoopRecordingService()
    client.app.state.user_service = service

    user = _create(client)
    client.get("/api/users/all")
    client.get("/api/users")
    client.get(f"/api/users/{user['id']}")
    client.put(f"/api/users/{user['id']}", json={"position": "Manager"})
    client.delete(f"/api/users/{user['id']}")

    assert {name for name, _ in service.calls} == {
        "create",
        "list_all",
        "query",
        "get_by_id",
        "update",
        "soft_delete",
    }
    assert [name for name, on_loop in service.calls if on_loop] == []
