"""State management errors."""


class StateError(Exception):
    """Raised when persisted history or metrics cannot be read."""
