"""Categorization plan building package."""

from .builder import PlanRequestBuilder
from .client import CategorizationClient, CompletionResult
from .errors import ParseError, PlanningError, UpstreamError
from .models import Plan, PlanCategory, PlanDebugInfo, PlanItem, PlanResult
from .normalize import normalize_plan_payload, parse_plan_response, strip_code_fence

__all__ = [
    "CategorizationClient",
    "CompletionResult",
    "ParseError",
    "Plan",
    "PlanCategory",
    "PlanDebugInfo",
    "PlanItem",
    "PlanRequestBuilder",
    "PlanResult",
    "PlanningError",
    "UpstreamError",
    "normalize_plan_payload",
    "parse_plan_response",
    "strip_code_fence",
]
