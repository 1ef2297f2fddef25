from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set

from pydantic import ValidationError

from .category_input import CategoryInput
from .models import Importance
from .schemas import ALL_CATEGORIES, UNCATEGORIZED, Position, Task, TaskDraft
from .store import RemoteError, TaskStore

logger = logging.getLogger(__name__)

MOBILE_BREAKPOINT = 768


class WritePolicy(str, Enum):
    """How an operation reconciles local state with the store."""

    # local state changes only after the store confirms
    CONFIRMED = "confirmed"
    # local state changes first; the store write is best effort and never rolled back
    OPTIMISTIC = "optimistic"


# Read by TaskListController._write. submit_draft is absent: it always waits for
# the store-assigned id before the task appears.
OPERATION_POLICIES: Dict[str, WritePolicy] = {
    "toggle_expanded": WritePolicy.CONFIRMED,
    "toggle_completed": WritePolicy.CONFIRMED,
    "delete_task": WritePolicy.CONFIRMED,
    "reposition_task": WritePolicy.OPTIMISTIC,
}


# PUBLIC_INTERFACE
def sort_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Order by importance weight, high first. Ties keep their prior relative order."""
    return sorted(tasks, key=lambda t: t.importance.weight, reverse=True)


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[Task], category_filter: str) -> List[Task]:
    """
    Select the tasks shown under a category filter.

    - 'all': every task
    - 'uncategorized': tasks with an empty or absent category
    - anything else: exact category match
    """
    if category_filter == ALL_CATEGORIES:
        return list(tasks)
    if category_filter == UNCATEGORIZED:
        return [t for t in tasks if t.is_uncategorized]
    return [t for t in tasks if t.category == category_filter]


def is_mobile_layout(width: float, breakpoint: int = MOBILE_BREAKPOINT) -> bool:
    return width <= breakpoint


@dataclass
class ControllerState:
    tasks: List[Task] = field(default_factory=list)
    draft: TaskDraft = field(default_factory=TaskDraft)
    categories: Set[str] = field(default_factory=set)
    category_filter: str = ALL_CATEGORIES
    is_mobile_layout: bool = False
    is_draft_form_visible: bool = False
    category_input: CategoryInput = field(default_factory=CategoryInput)


# PUBLIC_INTERFACE
class TaskListController:
    """
    Owns the task list state and keeps it in step with the task store.

    Store failures are logged and the action is abandoned; nothing is retried
    and nothing is raised to the caller. See OPERATION_POLICIES for which
    operations wait for the store before touching local state.
    """

    def __init__(self, store: TaskStore, *, mobile_breakpoint: int = MOBILE_BREAKPOINT) -> None:
        self.store = store
        self.mobile_breakpoint = mobile_breakpoint
        self.state = ControllerState()
        self._background: Set["asyncio.Task[None]"] = set()

    # ---- queries ----

    @property
    def tasks(self) -> List[Task]:
        return self.state.tasks

    @property
    def draft(self) -> TaskDraft:
        return self.state.draft

    def find(self, task_id: str) -> Optional[Task]:
        for task in self.state.tasks:
            if task.id == task_id:
                return task
        return None

    def visible_tasks(self) -> List[Task]:
        return filter_tasks(self.state.tasks, self.state.category_filter)

    def sorted_categories(self) -> List[str]:
        return sorted(self.state.categories)

    # ---- loading ----

    async def load(self) -> bool:
        try:
            rows = await self.store.select()
        except RemoteError as exc:
            logger.error("Error fetching tasks: %s", exc.message)
            return False
        try:
            loaded = [Task.from_row(row) for row in rows]
        except ValidationError as exc:
            logger.error("Task store returned malformed rows: %s", exc)
            return False

        # one record per id; a later duplicate replaces the earlier one in place
        by_id: Dict[str, Task] = {}
        for task in loaded:
            by_id[task.id] = task
        self.state.tasks = sort_tasks(by_id.values())
        logger.debug("Loaded %d tasks", len(self.state.tasks))
        return True

    async def load_categories(self) -> bool:
        try:
            values = await self.store.select_categories()
        except RemoteError as exc:
            logger.error("Error fetching categories: %s", exc.message)
            return False
        self.state.categories = {v for v in values if v}
        self.state.category_input.sync(self.state.draft.category, self.state.categories)
        return True

    # ---- draft ----

    def update_draft(
        self,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        importance: Optional[Importance] = None,
        category: Optional[str] = None,
    ) -> TaskDraft:
        draft = self.state.draft
        if title is not None:
            draft.title = title
        if description is not None:
            draft.description = description
        if importance is not None:
            draft.importance = Importance.coerce(importance)
        if category is not None:
            draft.category = self.state.category_input.type_text(category)
        return draft

    def choose_category(self, option: str) -> TaskDraft:
        self.state.draft.category = self.state.category_input.choose(option)
        return self.state.draft

    def toggle_category_mode(self) -> None:
        self.state.category_input.toggle_mode()

    def toggle_draft_form(self) -> bool:
        self.state.is_draft_form_visible = not self.state.is_draft_form_visible
        return self.state.is_draft_form_visible

    def _reset_draft(self) -> None:
        self.state.draft = TaskDraft()
        self.state.category_input.sync("", self.state.categories)

    async def submit_draft(self) -> Optional[Task]:
        draft = self.state.draft
        if not draft.title.strip():
            return None

        row = draft.to_insert_row()
        try:
            inserted = await self.store.insert(row)
        except RemoteError as exc:
            logger.error("Error adding task: %s", exc.message)
            return None
        if not inserted:
            logger.error("Error adding task: store returned no row for %r", row["title"])
            return None
        try:
            created = Task.from_row(inserted[0])
        except ValidationError as exc:
            logger.error("Error adding task: malformed row %s", exc)
            return None

        remaining = [t for t in self.state.tasks if t.id != created.id]
        self.state.tasks = sort_tasks([*remaining, created])
        if created.category:
            self.state.categories.add(created.category)
        self._reset_draft()
        logger.info("Added task id=%s importance=%s", created.id, created.importance.value)
        return created

    # ---- policy-driven writes ----

    async def _write(
        self,
        op: str,
        write: Callable[[], Awaitable[None]],
        apply: Callable[[], None],
        failure: str,
    ) -> bool:
        """
        Run a store write and its local change in the order OPERATION_POLICIES gives `op`.

        CONFIRMED awaits the write and applies only on success. OPTIMISTIC applies
        at once and leaves the write to a tracked background task.
        """
        if OPERATION_POLICIES[op] is WritePolicy.OPTIMISTIC:
            apply()
            self._spawn(self._write_in_background(write, failure))
            return True
        try:
            await write()
        except RemoteError as exc:
            logger.error("%s: %s", failure, exc.message)
            return False
        apply()
        return True

    def _spawn(self, coro: Awaitable[None]) -> None:
        background = asyncio.get_running_loop().create_task(coro)
        self._background.add(background)
        background.add_done_callback(self._background.discard)

    @staticmethod
    async def _write_in_background(write: Callable[[], Awaitable[None]], failure: str) -> None:
        try:
            await write()
        except RemoteError as exc:
            # never rolled back
            logger.error("%s: %s", failure, exc.message)

    async def _toggle(self, op: str, task_id: str, field_name: str) -> bool:
        task = self.find(task_id)
        if task is None:
            logger.warning("Toggle %s on unknown task id=%s ignored", field_name, task_id)
            return False
        flipped = not getattr(task, field_name)

        def apply() -> None:
            # look the task up again: a reload may have replaced it while we waited
            current = self.find(task_id)
            if current is not None:
                setattr(current, field_name, flipped)

        return await self._write(
            op,
            lambda: self.store.update(task_id, {field_name: flipped}),  # type: ignore[misc]
            apply,
            f"Error updating task {task_id}",
        )

    async def toggle_expanded(self, task_id: str) -> bool:
        return await self._toggle("toggle_expanded", task_id, "expanded")

    async def toggle_completed(self, task_id: str) -> bool:
        return await self._toggle("toggle_completed", task_id, "completed")

    async def delete_task(self, task_id: str) -> bool:
        if self.find(task_id) is None:
            logger.warning("Delete of unknown task id=%s ignored", task_id)
            return False

        def apply() -> None:
            self.state.tasks = [t for t in self.state.tasks if t.id != task_id]

        return await self._write(
            "delete_task", lambda: self.store.delete(task_id), apply, f"Error deleting task {task_id}"
        )

    async def reposition_task(self, task_id: str, position: Position) -> bool:
        if self.find(task_id) is None:
            logger.warning("Reposition of unknown task id=%s ignored", task_id)
            return False
        target = Position(x=position.x, y=position.y)

        def apply() -> None:
            current = self.find(task_id)
            if current is not None:
                current.position = target

        return await self._write(
            "reposition_task",
            lambda: self.store.update(task_id, {"position": target.model_dump()}),
            apply,
            f"Error updating task position {task_id}",
        )

    async def drain(self) -> None:
        """Wait for outstanding background writes."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # ---- view state ----

    def set_category_filter(self, category_filter: str) -> str:
        self.state.category_filter = category_filter
        return category_filter

    def set_viewport(self, width: float, height: float) -> bool:
        self.state.is_mobile_layout = is_mobile_layout(width, self.mobile_breakpoint)
        return self.state.is_mobile_layout
