"""Boundary operations offered to host applications.

:class:`OrganizerService` wires the scanner, the plan builder, the executor,
and the state repository together. Each method is one coarse unit of work: a
host issues it, waits for the result or error, then issues the next.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from foldsort.config import FoldsortConfig
from foldsort.organization import ExecutionResult, PlanExecutor
from foldsort.planning import Plan, PlanRequestBuilder, PlanResult
from foldsort.planning.client import CompletionClient
from foldsort.scanning import DirectoryEntry, FolderScanner, ScanBudget
from foldsort.state import MetricsSnapshot, MoveRecord, StateRepository

LOGGER = logging.getLogger(__name__)


class OrganizerService:
    """Scan, analyze, and organize folders while tracking history and metrics."""

    def __init__(
        self,
        config: FoldsortConfig,
        *,
        repository: Optional[StateRepository] = None,
        client: Optional[CompletionClient] = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Loaded foldsort configuration.
            repository: History and metrics store; defaults to the per-user state file.
            client: Completion client override, mainly for tests and embedding hosts.
        """
        self._config = config
        self._repository = repository or StateRepository()
        self._scanner = FolderScanner(
            ScanBudget(
                max_depth=config.scan.max_depth,
                max_files_scanned=config.scan.max_files_scanned,
            ),
            markers=config.scan.markers,
        )
        self._builder = PlanRequestBuilder(config.llm, debug=config.debug_mode, client=client)
        self._executor = PlanExecutor()
        self.last_execution: Optional[ExecutionResult] = None

    @property
    def repository(self) -> StateRepository:
        return self._repository

    def scan_folder(self, path: Path) -> list[DirectoryEntry]:
        """Return the root listing of ``path`` with subfolder summaries.

        Raises:
            ScanError: If ``path`` cannot be read.
        """
        return self._scanner.scan(path)

    def analyze_folder(self, path: Path, items: Sequence[DirectoryEntry]) -> PlanResult:
        """Request a categorization plan for ``items`` scanned from ``path``.

        Raises:
            ConfigError: If no credential is configured.
            UpstreamError: If the categorization request fails.
            ParseError: If the response is not a valid plan.
        """
        history = self._repository.history()
        result = self._builder.build(items, history)
        LOGGER.info(
            "Plan for %s: %d categories, %d items",
            path,
            len(result.plan.categories),
            result.plan.item_count,
        )
        return result

    def execute_organization(self, path: Path, plan: Plan) -> bool:
        """Apply ``plan`` to ``path`` and persist history and metrics.

        An empty plan changes nothing. Items that cannot be moved are skipped
        without failing the call; :attr:`last_execution` holds the per-item
        outcomes of the most recent call.

        Returns:
            bool: True once the plan has been processed.

        Raises:
            ExecutionError: If ``path`` is not an existing directory.
        """
        if plan.is_empty:
            self.last_execution = ExecutionResult()
            return True

        result = self._executor.apply(path, plan)
        self.last_execution = result
        self._repository.record_execution(result.records, result.bytes_moved)
        LOGGER.info(
            "Organized %s: %d moved, %d skipped",
            path,
            len(result.records),
            len(result.skipped),
        )
        return True

    def get_metrics(self) -> MetricsSnapshot:
        """Return cumulative usage metrics."""
        return self._repository.metrics()

    def get_history(self) -> list[MoveRecord]:
        """Return move records, newest first."""
        return self._repository.history()


__all__ = ["OrganizerService"]
