"""Plan execution result models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from foldsort.planning.models import PlanItem
from foldsort.state.models import MoveRecord


class SkipReason(str, Enum):
    """Why an item was left in place."""

    SELF_TARGET = "self_target"
    NESTED_TARGET = "nested_target"
    MISSING_SOURCE = "missing_source"
    DESTINATION_EXISTS = "destination_exists"
    MOVE_FAILED = "move_failed"


class MoveOutcome(BaseModel):
    """Result of handling one plan item.

    Attributes:
        item: Plan item that was processed.
        category: Category the item was assigned to.
        record: Move record when the item was relocated.
        skip_reason: Reason the item was left in place.
        size_bytes: On-disk size of the moved item.
        detail: Optional error text for failed moves.
    """

    item: PlanItem
    category: str
    record: Optional[MoveRecord] = None
    skip_reason: Optional[SkipReason] = None
    size_bytes: int = 0
    detail: Optional[str] = None

    @property
    def moved(self) -> bool:
        return self.record is not None


class ExecutionResult(BaseModel):
    """Per-item outcomes of one plan execution, in plan order."""

    outcomes: List[MoveOutcome] = Field(default_factory=list)

    @property
    def records(self) -> list[MoveRecord]:
        """Return records of successful moves in execution order."""
        return [outcome.record for outcome in self.outcomes if outcome.record is not None]

    @property
    def skipped(self) -> list[MoveOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.moved]

    @property
    def bytes_moved(self) -> int:
        return sum(outcome.size_bytes for outcome in self.outcomes if outcome.moved)


__all__ = ["SkipReason", "MoveOutcome", "ExecutionResult"]
