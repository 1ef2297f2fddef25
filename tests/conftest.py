from __future__ import annotations

import os

import pytest

# Tests never reach a hosted store
os.environ.setdefault("TASK_STORE_BACKEND", "memory")

from dark_todo.controller import TaskListController  # noqa: E402

from .fakes import RecordingTaskStore, row  # noqa: E402


@pytest.fixture()
def store() -> RecordingTaskStore:
    return RecordingTaskStore(
        [
            row("a", "Water plants", "low", "home"),
            row("b", "Ship release", "high", "work"),
            row("c", "Call mom", "medium"),
            row("d", "Refill printer", "medium", ""),
        ]
    )


@pytest.fixture()
def empty_store() -> RecordingTaskStore:
    return RecordingTaskStore()


@pytest.fixture()
def controller(store: RecordingTaskStore) -> TaskListController:
    return TaskListController(store)
