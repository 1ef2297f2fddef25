from __future__ import annotations

import asyncio
import os
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, List, Optional

from .models import TaskRow
from .store import RemoteError, TaskStore


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    importance: str = "importance"
    category: str = "category"
    expanded: str = "expanded"
    completed: str = "completed"
    position_x: str = "position_x"
    position_y: str = "position_y"


_COLS = _Cols()

_BOOL_COLUMNS = {_COLS.expanded, _COLS.completed}
_TEXT_COLUMNS = {_COLS.title, _COLS.description, _COLS.importance, _COLS.category}


class SQLiteTaskStore(TaskStore):
    """
    Single-file `tasks` table implementing the TaskStore contract.

    Queries run in a worker thread so the event loop stays responsive; each call
    opens its own connection.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
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
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NOT NULL DEFAULT '',
                    {_COLS.importance} TEXT NOT NULL DEFAULT 'medium',
                    {_COLS.category} TEXT NULL,
                    {_COLS.expanded} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.position_x} REAL NULL,
                    {_COLS.position_y} REAL NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_category ON {_COLS.table}({_COLS.category})"
            )

    async def _run(self, fn, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as exc:
            raise RemoteError(f"sqlite: {exc}") from exc

    def _row_to_entity(self, row: sqlite3.Row) -> TaskRow:
        position = None
        if row[_COLS.position_x] is not None and row[_COLS.position_y] is not None:
            position = {"x": float(row[_COLS.position_x]), "y": float(row[_COLS.position_y])}
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description] or "",
            "importance": str(row[_COLS.importance]),
            "category": row[_COLS.category],
            "expanded": bool(row[_COLS.expanded]),
            "completed": bool(row[_COLS.completed]),
            "position": position,
        }  # type: ignore[return-value]

    @staticmethod
    def _to_columns(patch: TaskRow) -> dict:
        """Flatten a wire row into column values; unknown keys are dropped."""
        values: dict = {}
        for key, value in patch.items():
            if key in _BOOL_COLUMNS:
                values[key] = 1 if value else 0
            elif key in _TEXT_COLUMNS:
                values[key] = value
            elif key == "position":
                pos: Optional[dict] = value  # type: ignore[assignment]
                values[_COLS.position_x] = float(pos["x"]) if pos else None
                values[_COLS.position_y] = float(pos["y"]) if pos else None
        return values

    # ---- sync bodies ----

    def _select(self) -> List[TaskRow]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_COLS.table} ORDER BY rowid").fetchall()
            return [self._row_to_entity(r) for r in rows]

    def _select_categories(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLS.category} FROM {_COLS.table} WHERE {_COLS.category} IS NOT NULL"
            ).fetchall()
            return [str(r[_COLS.category]) for r in rows]

    def _insert(self, row: TaskRow) -> List[TaskRow]:
        values = self._to_columns(row)
        values[_COLS.id] = uuid.uuid4().hex
        names = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_COLS.table} ({names}) VALUES ({marks})",
                list(values.values()),
            )
            stored = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (values[_COLS.id],)
            ).fetchone()
            assert stored is not None
            return [self._row_to_entity(stored)]

    def _update(self, task_id: str, patch: TaskRow) -> None:
        values = self._to_columns(patch)
        if not values:
            return
        assignments = ", ".join(f"{name} = ?" for name in values)
        with self._conn() as conn:
            conn.execute(
                f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                [*values.values(), task_id],
            )

    def _delete(self, task_id: str) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))

    # ---- TaskStore ----

    async def select(self) -> List[TaskRow]:
        return await self._run(self._select)

    async def select_categories(self) -> List[str]:
        return await self._run(self._select_categories)

    async def insert(self, row: TaskRow) -> List[TaskRow]:
        return await self._run(self._insert, row)

    async def update(self, task_id: str, patch: TaskRow) -> None:
        await self._run(self._update, task_id, patch)

    async def delete(self, task_id: str) -> None:
        await self._run(self._delete, task_id)
