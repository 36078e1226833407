"""Configuration errors."""

from __future__ import annotations

from typing import Optional


class ConfigError(Exception):
    """Raised when settings cannot be read, merged, or validated.

    Attributes:
        key: Dotted setting path the error concerns, when known.
    """

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key
