from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Importance, TaskRow

ALL_CATEGORIES = "all"
UNCATEGORIZED = "uncategorized"


# PUBLIC_INTERFACE
class Position(BaseModel):
    """Free-form drag placement of a task card."""

    x: float = Field(0.0, description="Horizontal offset")
    y: float = Field(0.0, description="Vertical offset")


ORIGIN = Position(x=0.0, y=0.0)


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A task held in the controller's collection.

    Built from a store row; `importance` is coerced so that anything the store
    returns maps to one of the three levels.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f1c",
                "title": "Pay rent",
                "description": "Before the 5th",
                "importance": "high",
                "category": "home",
                "expanded": False,
                "completed": False,
                "position": {"x": 10, "y": 20},
            }
        }
    )

    id: str = Field(..., description="Identifier assigned by the task store")
    title: str = Field(..., description="Display title")
    description: str = Field(default="", description="Optional detailed description")
    importance: Importance = Field(default=Importance.MEDIUM, description="Priority level")
    category: Optional[str] = Field(default=None, description="Free-form category; empty means uncategorized")
    expanded: bool = Field(default=False, description="Whether the description is shown")
    completed: bool = Field(default=False, description="Completion status flag")
    position: Optional[Position] = Field(default=None, description="Drag placement; absent means origin")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> str:
        """Stores may hand back integer keys; the id is opaque text."""
        if v is None:
            raise ValueError("id is required")
        return str(v)

    @field_validator("importance", mode="before")
    @classmethod
    def coerce_importance(cls, v: object) -> Importance:
        return Importance.coerce(v)  # type: ignore[arg-type]

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return v or ""

    @property
    def is_uncategorized(self) -> bool:
        return not self.category

    @classmethod
    def from_row(cls, row: TaskRow) -> "Task":
        return cls.model_validate(dict(row))


# PUBLIC_INTERFACE
class TaskDraft(BaseModel):
    """
    The in-progress, not-yet-persisted fields of a new task.
    """

    title: str = Field(default="", description="Title as typed; trimmed on submission")
    description: str = Field(default="", description="Optional description")
    importance: Importance = Field(default=Importance.MEDIUM, description="Priority level")
    category: str = Field(default="", description="Category as typed or chosen; empty means none")

    def to_insert_row(self) -> TaskRow:
        """Row sent to the store: trimmed title, flags cleared, empty category as null."""
        category = self.category.strip()
        return {
            "title": self.title.strip(),
            "description": self.description,
            "importance": self.importance.value,
            "category": category or None,
            "completed": False,
            "expanded": False,
        }


# PUBLIC_INTERFACE
class DraftUpdate(BaseModel):
    """
    Partial edit of the draft. Only provided fields are applied.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy milk", "importance": "low"}}
    )

    title: Optional[str] = Field(default=None, description="New draft title")
    description: Optional[str] = Field(default=None, description="New draft description")
    importance: Optional[Importance] = Field(default=None, description="New draft importance")
    category: Optional[str] = Field(default=None, description="New draft category")


class CategoryChoice(BaseModel):
    option: str = Field(..., description="A known category, or '__new__' to switch to free text")


class FilterUpdate(BaseModel):
    category: str = Field(
        ALL_CATEGORIES,
        description="'all', 'uncategorized', or an exact category name",
    )

    @field_validator("category")
    @classmethod
    def non_blank(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("category filter must not be blank")
        return s


class Viewport(BaseModel):
    width: float = Field(..., gt=0, description="Viewport width")
    height: float = Field(..., gt=0, description="Viewport height")


# PUBLIC_INTERFACE
class TaskCard(BaseModel):
    """
    Render-ready view of one task.
    """

    id: str
    title: str
    description: Optional[str] = Field(default=None, description="Present only when expanded and non-empty")
    importance: Importance
    importance_color: str
    category: Optional[str] = None
    expanded: bool
    completed: bool
    strike_through: bool
    draggable: bool
    position: Optional[Position] = Field(default=None, description="Absolute placement; null in stacked layout")


class CategoryInputView(BaseModel):
    mode: str
    value: str
    button_label: str
    options: List[str]


class DraftView(BaseModel):
    visible: bool
    draft: TaskDraft
    category_input: CategoryInputView


# PUBLIC_INTERFACE
class BoardView(BaseModel):
    """
    Everything the page needs to render the current state.
    """

    layout: str = Field(..., description="'stacked' on mobile layouts, 'absolute' otherwise")
    category_filter: str
    categories: List[str]
    cards: List[TaskCard]
    form: DraftView


class SphereOut(BaseModel):
    position: List[float] = Field(..., description="[x, y, z]")
    size: float
    color: str
    opacity: float


class SphereHover(BaseModel):
    hovered: bool = Field(..., description="Whether the pointer is over the sphere")


class SceneOut(BaseModel):
    width: float
    height: float
    elapsed: float
    spheres: List[SphereOut]
