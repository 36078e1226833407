"""Budgeted folder scanning.

The scanner produces the flat listing of a root folder together with a
structural summary of every subfolder. Summaries are bounded by a
:class:`ScanBudget` so huge dependency trees cannot stall a scan or inflate the
categorization prompt.
"""

from __future__ import annotations

import logging
import stat as stat_module
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from foldsort.config.models import DEFAULT_PROJECT_MARKERS

from .errors import ScanError
from .models import NO_EXTENSION, DirectoryEntry, EntryKind, FolderContext, ScanBudget

LOGGER = logging.getLogger(__name__)

TOP_EXTENSION_LIMIT = 3
MARKER_LIMIT = 5


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def extension_for(name: str) -> str:
    """Return the lowercased extension of ``name`` including the dot.

    Names without a dot and dot-files such as ``.env`` map to
    :data:`NO_EXTENSION`. A name ending in a bare dot has the extension ``"."``.
    """
    index = name.rfind(".")
    if index <= 0:
        return NO_EXTENSION
    return name[index:].lower()


@dataclass(slots=True)
class _ScanAccumulator:
    """Counters shared by one recursive summary call tree."""

    max_files: int
    file_count: int = 0
    scanned_files: int = 0
    extensions: Counter = field(default_factory=Counter)
    markers: list[str] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return self.scanned_files >= self.max_files

    def count_file(self, name: str) -> None:
        self.file_count += 1
        self.scanned_files += 1
        self.extensions[extension_for(name)] += 1

    def to_context(self) -> FolderContext:
        return FolderContext(
            file_count=self.file_count,
            top_extensions=[ext for ext, _ in self.extensions.most_common(TOP_EXTENSION_LIMIT)],
            markers=self.markers[:MARKER_LIMIT],
            truncated=self.exhausted,
        )


class FolderScanner:
    """List a folder's children and summarize its subfolders within a budget."""

    def __init__(
        self,
        budget: ScanBudget | None = None,
        *,
        markers: Iterable[str] | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            budget: Depth and file limits for subfolder summaries.
            markers: Names identifying software projects; defaults to the built-in list.
        """
        self.budget = budget or ScanBudget()
        self.markers = frozenset(markers if markers is not None else DEFAULT_PROJECT_MARKERS)

    def scan(self, root: Path) -> list[DirectoryEntry]:
        """Return the immediate, non-hidden children of ``root``.

        Args:
            root: Folder selected for organization.

        Returns:
            list[DirectoryEntry]: Files and folders sorted by name; folders carry a context.

        Raises:
            ScanError: If ``root`` is missing, not a directory, or cannot be listed.
        """
        root = root.expanduser()
        try:
            children = sorted(root.iterdir(), key=lambda path: path.name)
        except OSError as exc:
            raise ScanError(f"Unable to read folder {root}: {exc}") from exc

        entries: list[DirectoryEntry] = []
        for child in children:
            if _is_hidden(child.name):
                continue
            try:
                mode = child.stat().st_mode
            except OSError as exc:
                LOGGER.debug("Skipping %s: %s", child, exc)
                continue
            if stat_module.S_ISREG(mode):
                entries.append(DirectoryEntry(name=child.name, kind=EntryKind.FILE))
            elif stat_module.S_ISDIR(mode):
                entries.append(
                    DirectoryEntry(
                        name=child.name,
                        kind=EntryKind.FOLDER,
                        context=self.compute_context(child),
                    )
                )
        LOGGER.debug("Scanned %s: %d entries", root, len(entries))
        return entries

    def compute_context(self, folder: Path) -> Optional[FolderContext]:
        """Summarize the recursive contents of ``folder``.

        Args:
            folder: Folder to summarize.

        Returns:
            FolderContext | None: Summary, or ``None`` when ``folder`` cannot be listed.
        """
        accumulator = _ScanAccumulator(max_files=self.budget.max_files_scanned)
        if not self._descend(folder, 0, accumulator):
            return None
        return accumulator.to_context()

    def _descend(self, folder: Path, depth: int, accumulator: _ScanAccumulator) -> bool:
        """Visit ``folder`` at ``depth``; return False when it cannot be listed."""
        if depth > self.budget.max_depth or accumulator.exhausted:
            return True

        try:
            children = sorted(folder.iterdir(), key=lambda path: path.name)
        except OSError as exc:
            LOGGER.debug("Unable to list %s: %s", folder, exc)
            return False

        for child in children:
            if accumulator.exhausted:
                break
            name = child.name
            is_marker = name in self.markers
            if _is_hidden(name) and not is_marker:
                continue
            if depth == 0 and is_marker:
                accumulator.markers.append(name)
            try:
                mode = child.stat().st_mode
            except OSError:
                continue
            if stat_module.S_ISREG(mode):
                accumulator.count_file(name)
            elif stat_module.S_ISDIR(mode):
                self._descend(child, depth + 1, accumulator)
        return True


__all__ = ["FolderScanner", "ScanError", "extension_for"]
