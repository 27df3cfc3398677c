from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """Priority level of a todo item."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item for non-ORM storage
    backends.

    Fields:
    - id: Unique integer identifier; None until the record is first saved
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - priority: LOW, MEDIUM or HIGH
    - due_date: Optional due datetime (normalized to datetime in schemas)
    - created_at: local creation timestamp, stamped by the store
    - updated_at: local last update timestamp, stamped by the store
    """

    id: Optional[int]
    title: str
    description: Optional[str]
    completed: bool
    priority: Priority
    due_date: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


def new_entity(
    title: str,
    description: Optional[str] = None,
    completed: bool = False,
    priority: Priority = Priority.MEDIUM,
    due_date: Optional[datetime] = None,
) -> TodoEntity:
    """Build an unsaved TodoEntity; the store fills in id and timestamps."""
    return {
        "id": None,
        "title": title,
        "description": description,
        "completed": completed,
        "priority": priority,
        "due_date": due_date,
        "created_at": None,
        "updated_at": None,
    }
