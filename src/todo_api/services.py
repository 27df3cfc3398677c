"""Business logic for todos."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends

from .events import NotificationSink, TodoCreated, TodoDeleted, TodoUpdated, get_notification_sink
from .models import Priority, TodoEntity
from .repositories import Repository, get_repository
from .schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TodoService:
    """
    Service layer for todo operations.

    Every mutation runs fetch -> modify -> save -> notify. The sink is only
    called once the repository has accepted the change, so a failing save
    raises before anything is published. Repository errors are not caught.
    """

    def __init__(self, repository: Repository, sink: NotificationSink) -> None:
        self._repository = repository
        self._sink = sink

    def list_all(self) -> List[TodoEntity]:
        """Get all todo items."""
        return self._repository.list_all()

    def get_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        """Get a todo by ID, or None."""
        return self._repository.get(todo_id)

    def create(self, draft: TodoCreate) -> TodoEntity:
        """Persist a new todo and announce it."""
        saved = self._repository.save(draft.to_entity())
        self._sink.publish(TodoCreated(saved.copy()))
        return saved

    def update(self, todo_id: int, patch: TodoUpdate) -> Optional[TodoEntity]:
        """
        Replace every editable field of an existing todo with the values in
        `patch`. Fields the client left out carry their schema defaults, so
        e.g. an omitted due_date clears the stored one.
        """
        existing = self._repository.get(todo_id)
        if existing is None:
            logger.debug("Update skipped, todo %s not found", todo_id)
            return None
        existing["title"] = patch.title
        existing["description"] = patch.description
        existing["completed"] = patch.completed
        existing["priority"] = patch.priority
        existing["due_date"] = patch.due_date
        updated = self._repository.save(existing)
        self._sink.publish(TodoUpdated(updated.copy()))
        return updated

    def delete(self, todo_id: int) -> bool:
        """Delete a todo by ID. Returns False when there was nothing to delete."""
        if self._repository.get(todo_id) is None:
            logger.debug("Delete skipped, todo %s not found", todo_id)
            return False
        self._repository.delete(todo_id)
        self._sink.publish(TodoDeleted(todo_id))
        return True

    def list_by_completed(self, completed: bool) -> List[TodoEntity]:
        return self._repository.find_by_completed(completed)

    def list_by_priority(self, priority: Priority) -> List[TodoEntity]:
        return self._repository.find_by_priority(priority)

    def list_by_completed_and_priority(self, completed: bool, priority: Priority) -> List[TodoEntity]:
        return self._repository.find_by_completed_and_priority(completed, priority)

    def search_by_title(self, text: str) -> List[TodoEntity]:
        """Case-insensitive substring search on titles."""
        return self._repository.find_by_title_containing(text)

    def toggle_completion(self, todo_id: int) -> Optional[TodoEntity]:
        """Flip the completion flag of a todo and announce the new state."""
        existing = self._repository.get(todo_id)
        if existing is None:
            logger.debug("Toggle skipped, todo %s not found", todo_id)
            return None
        existing["completed"] = not existing["completed"]
        updated = self._repository.save(existing)
        self._sink.publish(TodoUpdated(updated.copy()))
        return updated


# PUBLIC_INTERFACE
def get_todo_service(
    repo: Repository = Depends(get_repository),
    sink: NotificationSink = Depends(get_notification_sink),
) -> TodoService:
    """FastAPI dependency wiring the configured repository and sink."""
    return TodoService(repo, sink)
