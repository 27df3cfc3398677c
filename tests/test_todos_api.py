from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from todo_api.db import SQLiteRepository
from todo_api.events import TodoCreated, TodoDeleted, TodoUpdated
from todo_api.main import app
from todo_api.services import TodoService, get_todo_service

BASE = "/api/todos"


def create_todo_payload(
    title="Test Task",
    description="Do something",
    completed=False,
    priority=None,
    due_date=None,
):
    payload = {
        "title": title,
        "description": description,
        "completed": completed,
    }
    if priority is not None:
        payload["priority"] = priority
    if due_date is not None:
        payload["due_date"] = due_date
    return payload


def assert_todo_shape(todo: dict):
    for key in ["id", "title", "completed", "priority", "created_at", "updated_at"]:
        assert key in todo
    assert "description" in todo
    assert "due_date" in todo
    assert isinstance(todo["id"], int)
    assert isinstance(todo["title"], str)
    assert isinstance(todo["completed"], bool)
    assert todo["priority"] in ("LOW", "MEDIUM", "HIGH")
    # FastAPI/Pydantic returns strings for datetime fields
    datetime.fromisoformat(todo["created_at"])
    datetime.fromisoformat(todo["updated_at"])
    if todo["due_date"] is not None:
        datetime.fromisoformat(todo["due_date"])


def create(client, **kwargs) -> dict:
    res = client.post(BASE, json=create_todo_payload(**kwargs))
    assert res.status_code == 201
    return res.json()


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] in ("memory", "sqlite")


class TestTodosCRUD:
    def test_list_empty(self, client):
        res = client.get(BASE)
        assert res.status_code == 200
        assert res.json() == []

    def test_create_todo_minimal(self, client, sink):
        res = client.post(BASE, json={"title": "Buy milk"})
        assert res.status_code == 201
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["title"] == "Buy milk"
        assert todo["description"] is None
        assert todo["completed"] is False
        assert todo["priority"] == "MEDIUM"
        assert len(sink.events) == 1
        assert isinstance(sink.events[0], TodoCreated)

    def test_create_todo_with_priority_and_due_date(self, client):
        todo = create(client, title="Pay bills", priority="HIGH", due_date="2099-12-25")
        assert_todo_shape(todo)
        assert todo["priority"] == "HIGH"
        # Due date should be promoted to midnight
        assert todo["due_date"].startswith("2099-12-25T00:00:00")

    def test_create_accepts_lowercase_priority(self, client):
        assert create(client, priority="low")["priority"] == "LOW"

    def test_list_all(self, client):
        first = create(client, title="One")
        second = create(client, title="Two")
        res = client.get(BASE)
        assert res.status_code == 200
        assert [t["id"] for t in res.json()] == [first["id"], second["id"]]

    def test_get_todo_and_not_found(self, client):
        tid = create(client, title="Read book")["id"]

        res_get = client.get(f"{BASE}/{tid}")
        assert res_get.status_code == 200
        fetched = res_get.json()
        assert fetched["id"] == tid
        assert fetched["title"] == "Read book"

        res_404 = client.get(f"{BASE}/999999")
        assert res_404.status_code == 404
        assert res_404.json()["detail"] == "Todo not found"

    def test_put_replaces_todo(self, client, sink):
        tid = create(client, title="Initial", description="A", due_date="2100-01-01")["id"]

        res_put = client.put(
            f"{BASE}/{tid}",
            json={"title": "Replaced", "completed": True, "priority": "LOW"},
        )
        assert res_put.status_code == 200
        updated = res_put.json()
        assert updated["id"] == tid
        assert updated["title"] == "Replaced"
        assert updated["completed"] is True
        assert updated["priority"] == "LOW"
        # Omitted fields are cleared
        assert updated["description"] is None
        assert updated["due_date"] is None
        assert isinstance(sink.events[-1], TodoUpdated)

    def test_put_not_found(self, client, sink):
        res = client.put(f"{BASE}/424242", json=create_todo_payload(title="Nope"))
        assert res.status_code == 404
        assert res.json()["detail"] == "Todo not found"
        assert sink.events == []

    def test_delete_todo(self, client, sink):
        tid = create(client, title="ToDelete")["id"]

        res_del = client.delete(f"{BASE}/{tid}")
        assert res_del.status_code == 204
        assert res_del.text == ""
        assert sink.events[-1] == TodoDeleted(tid)

        assert client.get(f"{BASE}/{tid}").status_code == 404
        assert client.get(BASE).json() == []
        res_del_again = client.delete(f"{BASE}/{tid}")
        assert res_del_again.status_code == 404
        assert res_del_again.json()["detail"] == "Todo not found"

    def test_toggle(self, client, sink):
        tid = create(client, title="Flip me")["id"]

        res1 = client.patch(f"{BASE}/{tid}/toggle")
        assert res1.status_code == 200
        assert res1.json()["completed"] is True
        res2 = client.patch(f"{BASE}/{tid}/toggle")
        assert res2.json()["completed"] is False
        assert [type(e) for e in sink.events] == [TodoCreated, TodoUpdated, TodoUpdated]

        assert client.patch(f"{BASE}/98765/toggle").status_code == 404


class TestFilteringAndSearch:
    def seed(self, client):
        create(client, title="Test Todo", completed=True, priority="HIGH")
        create(client, title="Another task", priority="LOW")
        create(client, title="Quick test", priority="HIGH")

    def test_filter_by_status(self, client):
        self.seed(client)
        res_true = client.get(f"{BASE}/status/true")
        assert res_true.status_code == 200
        assert [t["title"] for t in res_true.json()] == ["Test Todo"]

        res_false = client.get(f"{BASE}/status/false")
        assert res_false.status_code == 200
        assert all(item["completed"] is False for item in res_false.json())
        assert len(res_false.json()) == 2

    def test_filter_by_priority(self, client):
        self.seed(client)
        res = client.get(f"{BASE}/priority/HIGH")
        assert res.status_code == 200
        assert [t["title"] for t in res.json()] == ["Test Todo", "Quick test"]
        assert client.get(f"{BASE}/priority/MEDIUM").json() == []

    def test_search_by_title(self, client):
        self.seed(client)
        res = client.get(f"{BASE}/search", params={"title": "test"})
        assert res.status_code == 200
        assert [t["title"] for t in res.json()] == ["Test Todo", "Quick test"]

    def test_combined_filter(self, client):
        self.seed(client)
        res = client.get(f"{BASE}/filter", params={"completed": "false", "priority": "HIGH"})
        assert res.status_code == 200
        assert [t["title"] for t in res.json()] == ["Quick test"]


class TestValidationErrors:
    def assert_validation_body(self, res):
        assert res.status_code == 400
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)
        return body

    def test_create_blank_title(self, client, sink):
        body = self.assert_validation_body(client.post(BASE, json={"title": "  ", "description": "x"}))
        assert "title" in body["errors"]
        assert sink.events == []

    def test_create_missing_title(self, client):
        body = self.assert_validation_body(client.post(BASE, json={"description": "Description"}))
        assert "title" in body["errors"]

    def test_put_blank_title(self, client):
        tid = create(client, title="Valid")["id"]
        body = self.assert_validation_body(client.put(f"{BASE}/{tid}", json={"title": ""}))
        assert "title" in body["errors"]
        assert client.get(f"{BASE}/{tid}").json()["title"] == "Valid"

    def test_bad_due_date(self, client):
        body = self.assert_validation_body(
            client.post(BASE, json={"title": "Due date bad", "due_date": "not-a-date"})
        )
        assert "due_date" in body["errors"]

    def test_unknown_priority(self, client):
        self.assert_validation_body(client.post(BASE, json={"title": "x", "priority": "URGENT"}))
        self.assert_validation_body(client.get(f"{BASE}/priority/URGENT"))

    def test_search_requires_title(self, client):
        self.assert_validation_body(client.get(f"{BASE}/search"))

    def test_malformed_json_reported_against_request(self, client):
        res = client.post(BASE, content='{"title": "x",', headers={"Content-Type": "application/json"})
        body = self.assert_validation_body(res)
        assert list(body["errors"]) == ["request"]


class TestIdBounds:
    @pytest.fixture
    def sqlite_client(self, tmp_path, sink):
        service = TodoService(SQLiteRepository(str(tmp_path / "todos.db")), sink)
        app.dependency_overrides[get_todo_service] = lambda: service
        try:
            yield TestClient(app)
        finally:
            app.dependency_overrides.pop(get_todo_service, None)

    def test_oversized_id_is_rejected_on_every_id_route(self, sqlite_client, sink):
        huge = 2**64
        for res in (
            sqlite_client.get(f"{BASE}/{huge}"),
            sqlite_client.put(f"{BASE}/{huge}", json={"title": "x"}),
            sqlite_client.delete(f"{BASE}/{huge}"),
            sqlite_client.patch(f"{BASE}/{huge}/toggle"),
        ):
            assert res.status_code == 400
            assert "todo_id" in res.json()["errors"]
        assert sink.events == []

    def test_largest_storable_id_is_not_found(self, sqlite_client):
        res = sqlite_client.get(f"{BASE}/{2**63 - 1}")
        assert res.status_code == 404
        assert res.json()["detail"] == "Todo not found"

    def test_zero_id_is_rejected(self, client):
        assert client.get(f"{BASE}/0").status_code == 400
