"""Plan execution package."""

from .errors import ExecutionError
from .executor import PlanExecutor, measure_size
from .models import ExecutionResult, MoveOutcome, SkipReason

__all__ = [
    "ExecutionError",
    "ExecutionResult",
    "MoveOutcome",
    "PlanExecutor",
    "SkipReason",
    "measure_size",
]
