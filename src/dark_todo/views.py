from __future__ import annotations

from typing import Iterable, List

from .controller import TaskListController
from .models import Importance
from .scene import OPACITY, Scene
from .schemas import (
    ORIGIN,
    BoardView,
    CategoryInputView,
    DraftView,
    SceneOut,
    SphereOut,
    Task,
    TaskCard,
)

IMPORTANCE_COLORS = {
    Importance.HIGH: "bg-red-600",
    Importance.MEDIUM: "bg-yellow-600",
    Importance.LOW: "bg-green-600",
}
DEFAULT_COLOR = "bg-gray-600"


def importance_color(importance: Importance) -> str:
    return IMPORTANCE_COLORS.get(importance, DEFAULT_COLOR)


def task_card(task: Task, *, stacked: bool) -> TaskCard:
    show_description = task.expanded and bool(task.description)
    return TaskCard(
        id=task.id,
        title=task.title,
        description=task.description if show_description else None,
        importance=task.importance,
        importance_color=importance_color(task.importance),
        category=task.category or None,
        expanded=task.expanded,
        completed=task.completed,
        strike_through=task.completed,
        draggable=not stacked,
        position=None if stacked else (task.position or ORIGIN),
    )


def task_cards(tasks: Iterable[Task], *, stacked: bool) -> List[TaskCard]:
    return [task_card(t, stacked=stacked) for t in tasks]


# PUBLIC_INTERFACE
def board_view(controller: TaskListController) -> BoardView:
    """
    Render the controller's state.

    Mobile layouts get a stacked list; wider ones get absolutely placed,
    draggable cards. Layout never changes which tasks are shown or their order.
    """
    state = controller.state
    stacked = state.is_mobile_layout
    category_input = state.category_input
    return BoardView(
        layout="stacked" if stacked else "absolute",
        category_filter=state.category_filter,
        categories=controller.sorted_categories(),
        cards=task_cards(controller.visible_tasks(), stacked=stacked),
        form=DraftView(
            visible=state.is_draft_form_visible,
            draft=state.draft.model_copy(),
            category_input=CategoryInputView(
                mode=category_input.mode.value,
                value=category_input.value,
                button_label=category_input.button_label,
                options=category_input.options(),
            ),
        ),
    )


def scene_view(scene: Scene, elapsed: float) -> SceneOut:
    width, height = scene.viewport or (0.0, 0.0)
    return SceneOut(
        width=width,
        height=height,
        elapsed=elapsed,
        spheres=[
            SphereOut(position=list(s.position), size=s.size, color=s.color, opacity=OPACITY)
            for s in scene.spheres
        ],
    )
