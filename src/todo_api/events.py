"""
Todo change notifications.

Events are published synchronously, in the caller's thread, after the store
has accepted a change. Sinks are best-effort: there is no queue, retry, or
delivery guarantee.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from .models import TodoEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoEvent:
    """Base class for todo change events."""


@dataclass(frozen=True)
class TodoCreated(TodoEvent):
    todo: TodoEntity = field(hash=False)


@dataclass(frozen=True)
class TodoUpdated(TodoEvent):
    todo: TodoEntity = field(hash=False)


@dataclass(frozen=True)
class TodoDeleted(TodoEvent):
    todo_id: int


# PUBLIC_INTERFACE
class NotificationSink(ABC):
    """Receiver of todo change events."""

    @abstractmethod
    def publish(self, event: TodoEvent) -> None:
        """Handle a single event. Called after the change has been persisted."""


class LoggingNotificationSink(NotificationSink):
    """Default sink: writes one INFO log line per event."""

    def publish(self, event: TodoEvent) -> None:
        if isinstance(event, TodoCreated):
            logger.info("Todo created event: id=%s, title=%s", event.todo["id"], event.todo["title"])
        elif isinstance(event, TodoUpdated):
            logger.info(
                "Todo updated event: id=%s, title=%s, completed=%s",
                event.todo["id"],
                event.todo["title"],
                event.todo["completed"],
            )
        elif isinstance(event, TodoDeleted):
            logger.info("Todo deleted event: id=%s", event.todo_id)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")


class RecordingNotificationSink(NotificationSink):
    """Keeps every published event in memory, in publish order."""

    def __init__(self) -> None:
        self.events: List[TodoEvent] = []

    def publish(self, event: TodoEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()


# PUBLIC_INTERFACE
def get_notification_sink() -> NotificationSink:
    """Return the sink used by the running application."""
    return LoggingNotificationSink()
