from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import Callable, List, Optional

from .models import Priority, TodoEntity
from .settings import get_settings


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def save(self, entity: TodoEntity) -> TodoEntity:
        """
        Persist the full record and return the stored copy.

        An entity whose id is None is inserted and receives a new id; otherwise
        the record with that id is overwritten. created_at is set on insert,
        updated_at on every save.
        """

    @abstractmethod
    def get(self, todo_id: int) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def list_all(self) -> List[TodoEntity]:
        """Return every TodoEntity ordered by id."""

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def find_by_completed(self, completed: bool) -> List[TodoEntity]:
        """Return todos whose completion flag equals `completed`."""

    @abstractmethod
    def find_by_priority(self, priority: Priority) -> List[TodoEntity]:
        """Return todos with the given priority."""

    @abstractmethod
    def find_by_title_containing(self, text: str) -> List[TodoEntity]:
        """Return todos whose title contains `text`, ignoring case."""

    @abstractmethod
    def find_by_completed_and_priority(self, completed: bool, priority: Priority) -> List[TodoEntity]:
        """Return todos matching both the completion flag and the priority."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now()

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def save(self, entity: TodoEntity) -> TodoEntity:
        now = self._now()
        stored = entity.copy()
        with self._lock:
            if stored["id"] is None:
                stored["id"] = self._allocate_id()
                stored["created_at"] = now
            else:
                existing = self._items.get(stored["id"])
                if existing is not None:
                    stored["created_at"] = existing["created_at"]
                elif stored["created_at"] is None:
                    stored["created_at"] = now
                # Keep id allocation ahead of explicitly assigned ids
                self._next_id = max(self._next_id, stored["id"] + 1)
            stored["updated_at"] = now
            self._items[stored["id"]] = stored
            return stored.copy()

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def list_all(self) -> List[TodoEntity]:
        return self._select(lambda t: True)

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None

    def find_by_completed(self, completed: bool) -> List[TodoEntity]:
        return self._select(lambda t: t["completed"] == completed)

    def find_by_priority(self, priority: Priority) -> List[TodoEntity]:
        return self._select(lambda t: t["priority"] == priority)

    def find_by_title_containing(self, text: str) -> List[TodoEntity]:
        s = text.lower()
        return self._select(lambda t: s in (t["title"] or "").lower())

    def find_by_completed_and_priority(self, completed: bool, priority: Priority) -> List[TodoEntity]:
        return self._select(lambda t: t["completed"] == completed and t["priority"] == priority)

    def _select(self, predicate: Callable[[TodoEntity], bool]) -> List[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for _, t in sorted(self._items.items()) if predicate(t)]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository backed by SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()
