import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_api.events import RecordingNotificationSink  # noqa: E402
from todo_api.main import app  # noqa: E402
from todo_api.repositories import InMemoryRepository  # noqa: E402
from todo_api.services import TodoService, get_todo_service  # noqa: E402


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def service(repository, sink) -> TodoService:
    return TodoService(repository, sink)


@pytest.fixture
def client(service):
    """TestClient whose routes share the `service` fixture's repository and sink."""
    app.dependency_overrides[get_todo_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_todo_service, None)
