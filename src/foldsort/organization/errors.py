"""Plan execution errors."""


class ExecutionError(Exception):
    """Raised when a plan cannot be applied at all."""
