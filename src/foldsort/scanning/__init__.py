"""Folder scanning package."""

from .errors import ScanError
from .models import NO_EXTENSION, DirectoryEntry, EntryKind, FolderContext, ScanBudget
from .scanner import FolderScanner

__all__ = [
    "NO_EXTENSION",
    "DirectoryEntry",
    "EntryKind",
    "FolderContext",
    "FolderScanner",
    "ScanBudget",
    "ScanError",
]
