"""Persisted history and metrics models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from foldsort.scanning.models import EntryKind

HISTORY_LIMIT = 100
METRICS_SERIES_LIMIT = 50
SECONDS_SAVED_PER_ITEM = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateBaseModel(BaseModel):
    """Shared settings for persisted models (camelCase on disk)."""

    model_config = ConfigDict(populate_by_name=True)


class MoveRecord(StateBaseModel):
    """Audit entry for one relocated item."""

    name: str
    kind: EntryKind
    category: str
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_prompt_payload(self) -> dict:
        """Return the compact form included in categorization prompts."""
        return {"name": self.name, "type": self.kind.value, "category": self.category}


class MetricsPoint(StateBaseModel):
    """One execution in the metrics time series.

    Attributes:
        timestamp: When the execution finished.
        files_moved: Items moved by the execution.
        bytes_moved: Bytes moved by the execution.
        total_files: Cumulative items moved after the execution.
        total_bytes: Cumulative bytes moved after the execution.
    """

    timestamp: datetime = Field(default_factory=_utcnow)
    files_moved: int = Field(default=0, alias="files")
    bytes_moved: int = Field(default=0, alias="bytes")
    total_files: int = Field(default=0, alias="totalFiles")
    total_bytes: int = Field(default=0, alias="totalBytes")


class MetricsSnapshot(StateBaseModel):
    """Cumulative usage counters plus a bounded per-execution series."""

    total_files: int = Field(default=0, alias="totalFiles")
    total_bytes: int = Field(default=0, alias="totalBytes")
    total_time_saved: int = Field(default=0, alias="totalTimeSaved")
    history: List[MetricsPoint] = Field(default_factory=list)

    def record_operation(
        self,
        files_moved: int,
        bytes_moved: int,
        *,
        timestamp: Optional[datetime] = None,
    ) -> MetricsPoint:
        """Add one execution to the counters and the series.

        Args:
            files_moved: Items moved by the execution.
            bytes_moved: Bytes moved by the execution.
            timestamp: Optional timestamp for the series point.

        Returns:
            MetricsPoint: The appended series point.
        """
        self.total_files += files_moved
        self.total_bytes += bytes_moved
        self.total_time_saved += SECONDS_SAVED_PER_ITEM * files_moved
        point = MetricsPoint(
            timestamp=timestamp or _utcnow(),
            files_moved=files_moved,
            bytes_moved=bytes_moved,
            total_files=self.total_files,
            total_bytes=self.total_bytes,
        )
        self.history.append(point)
        del self.history[:-METRICS_SERIES_LIMIT]
        return point


class SortingState(StateBaseModel):
    """Everything persisted between sessions."""

    sorting_history: List[MoveRecord] = Field(default_factory=list, alias="sortingHistory")
    metrics: MetricsSnapshot = Field(default_factory=MetricsSnapshot)

    def add_records(self, records: Iterable[MoveRecord]) -> None:
        """Prepend a batch of records and keep the most recent entries."""
        self.sorting_history = [*records, *self.sorting_history][:HISTORY_LIMIT]


__all__ = [
    "HISTORY_LIMIT",
    "METRICS_SERIES_LIMIT",
    "SECONDS_SAVED_PER_ITEM",
    "MoveRecord",
    "MetricsPoint",
    "MetricsSnapshot",
    "SortingState",
]
