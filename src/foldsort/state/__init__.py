"""History and metrics persistence for foldsort."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .errors import StateError
from .models import (
    HISTORY_LIMIT,
    METRICS_SERIES_LIMIT,
    SECONDS_SAVED_PER_ITEM,
    MetricsPoint,
    MetricsSnapshot,
    MoveRecord,
    SortingState,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path("~/.foldsort/state.json")


class StateRepository:
    """Persist move history and usage metrics in a JSON document."""

    def __init__(self, state_path: Path | None = None) -> None:
        """Initialize the repository.

        Args:
            state_path: Location of the state document; defaults to ``~/.foldsort/state.json``.
        """
        self._state_path = (state_path or DEFAULT_STATE_PATH).expanduser()
        self._lock = threading.Lock()

    @property
    def state_path(self) -> Path:
        """Return the resolved state document path."""
        return self._state_path

    def load(self) -> SortingState:
        """Load persisted state, returning an empty state when none exists.

        Returns:
            SortingState: Deserialized history and metrics.

        Raises:
            StateError: If the stored document cannot be parsed.
        """
        if not self._state_path.exists():
            return SortingState()

        try:
            data = json.loads(self._state_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StateError(f"Invalid state data: {exc}") from exc

        try:
            return SortingState.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid state data: {exc}") from exc

    def save(self, state: SortingState) -> None:
        """Persist ``state`` to disk.

        Args:
            state: History and metrics to serialize.
        """
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        payload = state.model_dump(mode="json", by_alias=True)
        self._state_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def history(self) -> list[MoveRecord]:
        """Return move records, newest first."""
        return self.load().sorting_history

    def metrics(self) -> MetricsSnapshot:
        """Return cumulative metrics."""
        return self.load().metrics

    def record_execution(self, records: Sequence[MoveRecord], bytes_moved: int) -> SortingState:
        """Fold one execution into history and metrics.

        The read-modify-write cycle runs under the repository lock so concurrent
        executions sharing a repository never lose updates.

        Args:
            records: Successful moves in execution order.
            bytes_moved: Total size of the moved items.

        Returns:
            SortingState: The updated state as persisted.
        """
        with self._lock:
            state = self.load()
            state.add_records(records)
            state.metrics.record_operation(len(records), bytes_moved)
            self.save(state)
        LOGGER.debug("Recorded %d moves (%d bytes)", len(records), bytes_moved)
        return state


__all__ = [
    "StateRepository",
    "DEFAULT_STATE_PATH",
    "HISTORY_LIMIT",
    "METRICS_SERIES_LIMIT",
    "SECONDS_SAVED_PER_ITEM",
    "MetricsPoint",
    "MetricsSnapshot",
    "MoveRecord",
    "SortingState",
    "StateError",
]
