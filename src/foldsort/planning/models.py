"""Categorization plan data models."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from foldsort.scanning.models import EntryKind

_FORBIDDEN_CHARACTERS = ("\\", "\x00")


def _check_segment(segment: str, value: str) -> None:
    if not segment.strip():
        raise ValueError(f"empty path segment in {value!r}")
    if segment in (".", ".."):
        raise ValueError(f"relative segment {segment!r} is not allowed in {value!r}")


class PlanItem(BaseModel):
    """A root-level entry proposed for relocation.

    Attributes:
        name: Base name of the file or folder inside the organized root.
        kind: Whether the entry is a file or a folder.
    """

    name: str
    kind: EntryKind = EntryKind.FILE

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if "/" in value or any(char in value for char in _FORBIDDEN_CHARACTERS):
            raise ValueError(f"item name {value!r} must not contain path separators")
        _check_segment(value, value)
        return value


class PlanCategory(BaseModel):
    """A destination grouping and the items assigned to it.

    Attributes:
        name: Display label and destination folder, relative to the organized root.
            Forward slashes nest categories (``Projects/Node.js``).
        reason: Optional explanation for the grouping.
        items: Entries to move into the category folder, in execution order.
    """

    name: str
    reason: Optional[str] = None
    items: List[PlanItem] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if any(char in value for char in _FORBIDDEN_CHARACTERS):
            raise ValueError(f"category name {value!r} contains an illegal character")
        if value.startswith("/"):
            raise ValueError(f"category name {value!r} must be relative")
        for segment in value.split("/"):
            _check_segment(segment, value)
        return value

    @property
    def relative_path(self) -> PurePosixPath:
        """Return the category folder relative to the organized root."""
        return PurePosixPath(self.name)


class Plan(BaseModel):
    """Ordered categorization plan; categories are applied in sequence order."""

    categories: List[PlanCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_category_names(self) -> "Plan":
        seen: set[str] = set()
        for category in self.categories:
            if category.name in seen:
                raise ValueError(f"duplicate category {category.name!r}")
            seen.add(category.name)
        return self

    @property
    def is_empty(self) -> bool:
        """Return True when the plan proposes no categories."""
        return not self.categories

    @property
    def item_count(self) -> int:
        """Return the number of item assignments across all categories."""
        return sum(len(category.items) for category in self.categories)

    def get(self, name: str) -> Optional[PlanCategory]:
        """Return the category called ``name`` if present."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def to_mapping(self) -> Dict[str, Any]:
        """Return the plan in its document form (category name to reason and items)."""
        return {
            category.name: {
                "reason": category.reason,
                "items": [
                    {"name": item.name, "type": item.kind.value} for item in category.items
                ],
            }
            for category in self.categories
        }


class PlanDebugInfo(BaseModel):
    """Diagnostics returned alongside a plan in debug mode."""

    system_prompt: str
    user_prompt: str
    raw_response: str
    model: str
    usage: Optional[Dict[str, Any]] = None
    item_count: int = 0


class PlanResult(BaseModel):
    """Outcome of one plan build."""

    plan: Plan = Field(default_factory=Plan)
    debug: Optional[PlanDebugInfo] = None


__all__ = ["PlanItem", "PlanCategory", "Plan", "PlanDebugInfo", "PlanResult"]
