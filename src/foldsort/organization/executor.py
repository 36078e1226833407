"""Executor for categorization plans."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from foldsort.planning.models import Plan, PlanCategory, PlanItem
from foldsort.state.models import MoveRecord

from .errors import ExecutionError
from .models import ExecutionResult, MoveOutcome, SkipReason

LOGGER = logging.getLogger(__name__)


def measure_size(path: Path) -> int:
    """Return the size of a file, or the summed file sizes below a directory.

    Unreadable entries count as zero.
    """
    try:
        if path.is_file():
            return path.stat().st_size
        if not path.is_dir():
            return 0
    except OSError:
        return 0

    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += os.stat(os.path.join(dirpath, filename)).st_size
            except OSError:
                continue
    return total


class PlanExecutor:
    """Move plan items into their category folders, one item at a time."""

    def apply(self, root: Path, plan: Plan) -> ExecutionResult:
        """Apply ``plan`` beneath ``root``.

        Items are handled independently: a guard, a missing source, an existing
        destination, or a failed move skips that item and the batch continues.

        Args:
            root: Folder the plan was built for.
            plan: Categories and items to relocate.

        Returns:
            ExecutionResult: One outcome per plan item, in plan order.

        Raises:
            ExecutionError: If ``root`` is not an existing directory.
        """
        root = root.expanduser()
        if not root.is_dir():
            raise ExecutionError(f"Folder to organize does not exist: {root}")

        result = ExecutionResult()
        for category in plan.categories:
            destination_dir = root.joinpath(*category.relative_path.parts)
            for item in category.items:
                outcome = self._apply_item(root, destination_dir, category, item)
                if outcome.moved:
                    LOGGER.debug("Moved %s into %s", item.name, category.name)
                else:
                    LOGGER.info(
                        "Skipped %s for %s: %s",
                        item.name,
                        category.name,
                        outcome.skip_reason.value if outcome.skip_reason else "unknown",
                    )
                result.outcomes.append(outcome)
        return result

    def _apply_item(
        self,
        root: Path,
        destination_dir: Path,
        category: PlanCategory,
        item: PlanItem,
    ) -> MoveOutcome:
        source = root / item.name
        destination = destination_dir / item.name

        if source == destination_dir:
            return self._skipped(item, category, SkipReason.SELF_TARGET)
        if source in destination_dir.parents:
            return self._skipped(item, category, SkipReason.NESTED_TARGET)
        if not os.path.lexists(source):
            return self._skipped(item, category, SkipReason.MISSING_SOURCE)

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return self._skipped(item, category, SkipReason.MOVE_FAILED, detail=str(exc))

        if os.path.lexists(destination):
            return self._skipped(item, category, SkipReason.DESTINATION_EXISTS)

        try:
            shutil.move(str(source), str(destination))
        except OSError as exc:
            return self._skipped(item, category, SkipReason.MOVE_FAILED, detail=str(exc))

        return MoveOutcome(
            item=item,
            category=category.name,
            record=MoveRecord(name=item.name, kind=item.kind, category=category.name),
            size_bytes=measure_size(destination),
        )

    def _skipped(
        self,
        item: PlanItem,
        category: PlanCategory,
        reason: SkipReason,
        *,
        detail: Optional[str] = None,
    ) -> MoveOutcome:
        return MoveOutcome(item=item, category=category.name, skip_reason=reason, detail=detail)


__all__ = ["PlanExecutor", "measure_size"]
