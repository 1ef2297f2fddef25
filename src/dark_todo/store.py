from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import TaskRow
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

TABLE = "tasks"
COLUMNS = ("id", "title", "description", "importance", "category", "expanded", "completed", "position")


# PUBLIC_INTERFACE
class RemoteError(Exception):
    """A task store call failed. Carries an opaque message from the backend."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """
    Async contract of the `tasks` table.

    Every call either returns its result or raises RemoteError. Stores only store:
    no validation, no ordering guarantees on select.
    """

    @abstractmethod
    async def select(self) -> List[TaskRow]:
        """Return all rows of the table."""

    @abstractmethod
    async def select_categories(self) -> List[str]:
        """Return the non-null `category` column values (duplicates allowed)."""

    @abstractmethod
    async def insert(self, row: TaskRow) -> List[TaskRow]:
        """Insert one row and return the stored row(s) including the assigned id."""

    @abstractmethod
    async def update(self, task_id: str, patch: TaskRow) -> None:
        """Apply `patch` to the row whose id equals `task_id`."""

    @abstractmethod
    async def delete(self, task_id: str) -> None:
        """Delete the row whose id equals `task_id`."""

    async def aclose(self) -> None:
        """Release any connections held by the store."""
        return None

    async def __aenter__(self) -> "TaskStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class InMemoryTaskStore(TaskStore):
    """
    In-process table suitable for testing and default runtime.

    Ids are random hex strings, mirroring a hosted store's uuid keys.
    """

    def __init__(self, rows: Optional[List[TaskRow]] = None) -> None:
        self._rows: Dict[str, TaskRow] = {}
        for row in rows or []:
            stored = self._normalize(row)
            self._rows[stored["id"]] = stored

    @staticmethod
    def _normalize(row: TaskRow) -> TaskRow:
        stored: TaskRow = {
            "id": str(row.get("id") or uuid.uuid4().hex),
            "title": row.get("title", ""),
            "description": row.get("description") or "",
            "importance": row.get("importance") or "medium",
            "category": row.get("category"),
            "expanded": bool(row.get("expanded", False)),
            "completed": bool(row.get("completed", False)),
            "position": row.get("position"),
        }
        return stored

    async def select(self) -> List[TaskRow]:
        return [dict(r) for r in self._rows.values()]  # type: ignore[misc]

    async def select_categories(self) -> List[str]:
        return [r["category"] for r in self._rows.values() if r.get("category") is not None]  # type: ignore[misc]

    async def insert(self, row: TaskRow) -> List[TaskRow]:
        fresh = dict(row)
        fresh.pop("id", None)
        stored = self._normalize(fresh)  # type: ignore[arg-type]
        self._rows[stored["id"]] = stored
        return [dict(stored)]  # type: ignore[list-item]

    async def update(self, task_id: str, patch: TaskRow) -> None:
        existing = self._rows.get(task_id)
        if existing is None:
            # Filtered update matching no rows is not an error for a table store
            return
        for key, value in patch.items():
            if key in COLUMNS and key != "id":
                existing[key] = value  # type: ignore[literal-required]

    async def delete(self, task_id: str) -> None:
        self._rows.pop(task_id, None)


# PUBLIC_INTERFACE
def get_task_store(settings: Optional[Settings] = None) -> TaskStore:
    """
    Factory to return the configured task store based on settings.
    - memory: InMemoryTaskStore
    - sqlite: SQLiteTaskStore
    - supabase: SupabaseTaskStore (falls back to memory when credentials are missing)
    """
    settings = settings or get_settings()
    backend = settings.task_store_backend
    if backend == "sqlite":
        from .db import SQLiteTaskStore

        return SQLiteTaskStore(settings.sqlite_db_path)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            logger.warning("SUPABASE_URL/SUPABASE_KEY not set; using in-memory task store")
            return InMemoryTaskStore()
        from .hosted_store import SupabaseTaskStore

        return SupabaseTaskStore(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.supabase_timeout,
        )
    return InMemoryTaskStore()
