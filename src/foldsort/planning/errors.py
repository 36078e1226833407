"""Plan building errors."""

from __future__ import annotations

from typing import Optional


class PlanningError(Exception):
    """Base exception for plan building."""


class UpstreamError(PlanningError):
    """Raised when the categorization request itself fails."""


class ParseError(PlanningError):
    """Raised when a categorization response is not a valid plan document.

    Attributes:
        raw_response: Original response text, retained only in debug mode.
    """

    def __init__(self, message: str, *, raw_response: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_response = raw_response
