from __future__ import annotations

from enum import Enum
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class Importance(str, Enum):
    """Three-level task importance. The weight drives list ordering."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return IMPORTANCE_WEIGHTS[self]

    @classmethod
    def coerce(cls, raw: Optional[str]) -> "Importance":
        """Map a stored value to a level; anything unknown reads as medium."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


IMPORTANCE_WEIGHTS = {
    Importance.HIGH: 3,
    Importance.MEDIUM: 2,
    Importance.LOW: 1,
}


class PositionRow(TypedDict):
    x: float
    y: float


# PUBLIC_INTERFACE
class TaskRow(TypedDict, total=False):
    """
    A row of the remote `tasks` table as it travels over the wire.

    Fields:
    - id: Opaque identifier assigned by the store on insert
    - title: Display title (non-empty after trimming)
    - description: Free text, empty by default
    - importance: 'low' | 'medium' | 'high'
    - category: Optional free-form category; null/empty means uncategorized
    - expanded: Whether the description is shown
    - completed: Completion flag
    - position: Optional {x, y} drag placement
    """

    id: str
    title: str
    description: str
    importance: str
    category: Optional[str]
    expanded: bool
    completed: bool
    position: Optional[PositionRow]
