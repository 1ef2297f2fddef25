from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request

from ..controller import TaskListController
from ..schemas import (
    BoardView,
    CategoryChoice,
    DraftUpdate,
    FilterUpdate,
    Position,
    Viewport,
)
from ..views import board_view

router = APIRouter(
    prefix="/api/v1",
    tags=["tasks"],
)


def _get_controller(request: Request) -> TaskListController:
    """
    Dependency returning the process-wide controller created in the app lifespan.
    """
    return request.app.state.controller


# Store failures never reach the client: each endpoint answers with the board
# as it stands after the attempt, changed or not.


# PUBLIC_INTERFACE
@router.get(
    "/board",
    response_model=BoardView,
    summary="Get Board",
    description="Render the task list under the current filter and layout, plus the draft form.",
)
def get_board(controller: TaskListController = Depends(_get_controller)) -> BoardView:
    return board_view(controller)


# PUBLIC_INTERFACE
@router.post(
    "/tasks/reload",
    response_model=BoardView,
    summary="Reload Tasks",
    description="Fetch all tasks and the known categories from the task store.",
)
async def reload_tasks(controller: TaskListController = Depends(_get_controller)) -> BoardView:
    await controller.load()
    await controller.load_categories()
    return board_view(controller)


# PUBLIC_INTERFACE
@router.patch(
    "/draft",
    response_model=BoardView,
    summary="Edit Draft",
    description="Change fields of the not-yet-submitted task. Only provided fields are applied.",
)
def edit_draft(payload: DraftUpdate, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    controller.update_draft(
        title=payload.title,
        description=payload.description,
        importance=payload.importance,
        category=payload.category,
    )
    return board_view(controller)


# PUBLIC_INTERFACE
@router.post(
    "/draft/submit",
    response_model=BoardView,
    summary="Submit Draft",
    description=(
        "Insert the draft as a new task. A blank title is ignored. On success the draft is "
        "reset; on failure it is kept so the user can retry."
    ),
)
async def submit_draft(controller: TaskListController = Depends(_get_controller)) -> BoardView:
    await controller.submit_draft()
    return board_view(controller)


@router.post("/draft/toggle-form", response_model=BoardView, summary="Show/Hide Draft Form")
def toggle_draft_form(controller: TaskListController = Depends(_get_controller)) -> BoardView:
    controller.toggle_draft_form()
    return board_view(controller)


@router.post("/draft/category/choose", response_model=BoardView, summary="Choose Draft Category")
def choose_category(payload: CategoryChoice, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    controller.choose_category(payload.option)
    return board_view(controller)


@router.post("/draft/category/toggle-mode", response_model=BoardView, summary="Toggle Category Input Mode")
def toggle_category_mode(controller: TaskListController = Depends(_get_controller)) -> BoardView:
    controller.toggle_category_mode()
    return board_view(controller)


# PUBLIC_INTERFACE
@router.get("/categories", response_model=List[str], summary="List Categories")
def list_categories(controller: TaskListController = Depends(_get_controller)) -> List[str]:
    return controller.sorted_categories()


# PUBLIC_INTERFACE
@router.put(
    "/filter",
    response_model=BoardView,
    summary="Set Category Filter",
    description="'all' shows everything, 'uncategorized' shows tasks without a category, any other value is an exact match.",
)
def set_filter(payload: FilterUpdate, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    controller.set_category_filter(payload.category)
    return board_view(controller)


# PUBLIC_INTERFACE
@router.put("/viewport", response_model=BoardView, summary="Report Viewport Size")
def set_viewport(
    payload: Viewport,
    controller: TaskListController = Depends(_get_controller),
) -> BoardView:
    controller.set_viewport(payload.width, payload.height)
    return board_view(controller)


# PUBLIC_INTERFACE
@router.post("/tasks/{task_id}/toggle-expanded", response_model=BoardView, summary="Expand/Collapse Task")
async def toggle_expanded(task_id: str, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    await controller.toggle_expanded(task_id)
    return board_view(controller)


# PUBLIC_INTERFACE
@router.post("/tasks/{task_id}/toggle-completed", response_model=BoardView, summary="Complete/Reopen Task")
async def toggle_completed(task_id: str, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    await controller.toggle_completed(task_id)
    return board_view(controller)


# PUBLIC_INTERFACE
@router.put(
    "/tasks/{task_id}/position",
    response_model=BoardView,
    summary="Move Task",
    description="Place the card immediately; the store is updated in the background.",
)
async def reposition_task(
    task_id: str,
    payload: Position,
    controller: TaskListController = Depends(_get_controller),
) -> BoardView:
    await controller.reposition_task(task_id, payload)
    return board_view(controller)


# PUBLIC_INTERFACE
@router.delete("/tasks/{task_id}", response_model=BoardView, summary="Delete Task")
async def delete_task(task_id: str, controller: TaskListController = Depends(_get_controller)) -> BoardView:
    await controller.delete_task(task_id)
    return board_view(controller)
