from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generator, List, Optional, Sequence

from .models import Priority, TodoEntity
from .repositories import Repository


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    priority: str = "priority"
    due_date: str = "due_date"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _py_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        # SQLite LOWER() only folds ASCII; match str.lower() used by the in-memory store
        conn.create_function("py_lower", 1, _py_lower, deterministic=True)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.priority} TEXT NOT NULL DEFAULT '{Priority.MEDIUM.value}',
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_completed ON {_COLS.table}({_COLS.completed})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_priority ON {_COLS.table}({_COLS.priority})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        def parse_dt(s: Optional[str]) -> Optional[datetime]:
            if s is None:
                return None
            return datetime.fromisoformat(s)

        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description],
            "completed": bool(row[_COLS.completed]),
            "priority": Priority(row[_COLS.priority]),
            "due_date": parse_dt(row[_COLS.due_date]),
            "created_at": parse_dt(row[_COLS.created_at]),
            "updated_at": parse_dt(row[_COLS.updated_at]),
        }

    def _fetch_one(self, conn: sqlite3.Connection, todo_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)).fetchone()

    def _select(self, where_sql: str = "", params: Sequence[Any] = ()) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} {where_sql} ORDER BY {_COLS.id} ASC", params
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def save(self, entity: TodoEntity) -> TodoEntity:
        now = datetime.now().isoformat()
        due = entity["due_date"].isoformat() if entity["due_date"] else None
        priority = Priority(entity["priority"]).value
        completed = 1 if entity["completed"] else 0
        with self._conn() as conn:
            existing = self._fetch_one(conn, entity["id"]) if entity["id"] is not None else None
            if existing is not None:
                conn.execute(
                    f"""
                    UPDATE {_COLS.table}
                    SET {_COLS.title} = ?, {_COLS.description} = ?, {_COLS.completed} = ?,
                        {_COLS.priority} = ?, {_COLS.due_date} = ?, {_COLS.updated_at} = ?
                    WHERE {_COLS.id} = ?
                    """,
                    (entity["title"], entity["description"], completed, priority, due, now, entity["id"]),
                )
                todo_id = entity["id"]
            else:
                created = entity["created_at"].isoformat() if entity["created_at"] else now
                cur = conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.description}, {_COLS.completed},
                        {_COLS.priority}, {_COLS.due_date}, {_COLS.created_at}, {_COLS.updated_at})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (entity["id"], entity["title"], entity["description"], completed, priority, due, created, now),
                )
                todo_id = cur.lastrowid
            row = self._fetch_one(conn, todo_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = self._fetch_one(conn, todo_id)
            return self._row_to_entity(row) if row else None

    def list_all(self) -> List[TodoEntity]:
        return self._select()

    def delete(self, todo_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0

    def find_by_completed(self, completed: bool) -> List[TodoEntity]:
        return self._select(f"WHERE {_COLS.completed} = ?", (1 if completed else 0,))

    def find_by_priority(self, priority: Priority) -> List[TodoEntity]:
        return self._select(f"WHERE {_COLS.priority} = ?", (Priority(priority).value,))

    def find_by_title_containing(self, text: str) -> List[TodoEntity]:
        like = f"%{_escape_like(text.lower())}%"
        return self._select(f"WHERE py_lower({_COLS.title}) LIKE ? ESCAPE '\\'", (like,))

    def find_by_completed_and_priority(self, completed: bool, priority: Priority) -> List[TodoEntity]:
        return self._select(
            f"WHERE {_COLS.completed} = ? AND {_COLS.priority} = ?",
            (1 if completed else 0, Priority(priority).value),
        )
