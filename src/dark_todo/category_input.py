from __future__ import annotations

from enum import Enum
from typing import Iterable, List

NEW_CATEGORY = "__new__"
NEW_CATEGORY_LABEL = "Add new category"


class CategoryInputMode(str, Enum):
    SELECTING = "selecting"
    FREE_TEXT = "free_text"


# PUBLIC_INTERFACE
class CategoryInput:
    """
    Category field of the draft form: a selector over known categories with an
    escape hatch to free text.

    A value that is not a known category always shows as free text. Switching
    modes never clears the value.
    """

    def __init__(self, value: str = "", categories: Iterable[str] = ()) -> None:
        self.value = value
        self.categories: List[str] = sorted(set(categories))
        self.mode = CategoryInputMode.SELECTING
        self.sync(value, self.categories)

    @property
    def is_free_text(self) -> bool:
        return self.mode is CategoryInputMode.FREE_TEXT

    @property
    def button_label(self) -> str:
        return "Select" if self.is_free_text else "Custom"

    def options(self) -> List[str]:
        return [*self.categories, NEW_CATEGORY]

    def sync(self, value: str, categories: Iterable[str]) -> None:
        """Re-derive the mode whenever the value or the known categories change."""
        self.value = value
        self.categories = sorted(set(categories))
        if value in self.categories:
            self.mode = CategoryInputMode.SELECTING
        else:
            self.mode = CategoryInputMode.FREE_TEXT

    def choose(self, option: str) -> str:
        """Apply a selector choice; the sentinel only switches to free text."""
        if option == NEW_CATEGORY:
            self.mode = CategoryInputMode.FREE_TEXT
            return self.value
        self.sync(option, self.categories)
        return self.value

    def type_text(self, text: str) -> str:
        # Typing an existing name snaps back to the selector
        self.sync(text, self.categories)
        return self.value

    def toggle_mode(self) -> CategoryInputMode:
        if self.is_free_text:
            self.mode = CategoryInputMode.SELECTING
        else:
            self.mode = CategoryInputMode.FREE_TEXT
        return self.mode
