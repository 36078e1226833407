"""Folder scanning errors."""


class ScanError(Exception):
    """Raised when the folder selected for scanning cannot be read."""
