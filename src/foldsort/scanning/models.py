"""Data models produced by folder scans."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

NO_EXTENSION = "(no ext)"


class EntryKind(str, Enum):
    """Kind of a directory child."""

    FILE = "file"
    FOLDER = "folder"


class ScanBudget(BaseModel):
    """Limits bounding the recursive summary of one folder.

    Attributes:
        max_depth: Deepest level visited; depth 0 is the summarized folder itself.
        max_files_scanned: Files counted across the whole subtree before stopping.
    """

    max_depth: int = Field(default=3, ge=0)
    max_files_scanned: int = Field(default=500, ge=1)


class FolderContext(BaseModel):
    """Structural summary of a folder's recursive contents.

    Attributes:
        file_count: Files found within the scan budget.
        top_extensions: Up to three most frequent extensions, most frequent first.
        markers: Up to five project markers found at the folder's top level.
        truncated: Whether the file budget ran out before the subtree was visited.
    """

    file_count: int = 0
    top_extensions: List[str] = Field(default_factory=list)
    markers: List[str] = Field(default_factory=list)
    truncated: bool = False


class DirectoryEntry(BaseModel):
    """One immediate child of a scanned directory."""

    name: str
    kind: EntryKind
    context: Optional[FolderContext] = None

    def to_prompt_payload(self) -> dict:
        """Return the listing shape sent to the categorization service."""
        payload: dict = {"name": self.name, "type": self.kind.value}
        if self.kind is EntryKind.FOLDER:
            payload["context"] = (
                {
                    "fileCount": self.context.file_count,
                    "topExtensions": self.context.top_extensions,
                    "markers": self.context.markers,
                    "truncated": self.context.truncated,
                }
                if self.context is not None
                else None
            )
        return payload


__all__ = ["NO_EXTENSION", "EntryKind", "ScanBudget", "FolderContext", "DirectoryEntry"]
