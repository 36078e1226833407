"""Normalization of categorization responses into canonical plans.

Responses arrive in a few historical shapes. The item list may live under
``items`` or ``files`` and entries may be bare names or ``{name, type}``
objects, optionally wrapped in a markdown code fence. Everything is reduced
to :class:`~foldsort.planning.models.Plan` here so the rest of the package
only sees one shape.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from foldsort.scanning.models import EntryKind

from .errors import ParseError
from .models import Plan

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_+.-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")
_FOLDER_KINDS = {"folder", "directory", "dir"}


def strip_code_fence(text: str) -> str:
    """Remove a leading and a trailing markdown fence, with or without a language tag."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_plan_response(text: str, *, keep_raw: bool = False) -> Plan:
    """Parse a categorization response or plan document into a :class:`Plan`.

    Args:
        text: Raw response text.
        keep_raw: Attach ``text`` to raised :class:`ParseError` instances.

    Returns:
        Plan: Canonical plan.

    Raises:
        ParseError: If the text is not JSON or does not describe a plan.
    """
    raw = text if keep_raw else None
    try:
        payload = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Categorization response is not valid JSON: {exc}", raw_response=raw
        ) from exc
    return normalize_plan_payload(payload, raw_response=raw)


def normalize_plan_payload(payload: Any, *, raw_response: Optional[str] = None) -> Plan:
    """Convert a decoded plan document into a :class:`Plan`.

    Args:
        payload: Decoded JSON value; must map category names to category objects.
        raw_response: Optional raw text attached to raised errors.

    Returns:
        Plan: Canonical plan preserving the document's category order.

    Raises:
        ParseError: If the payload does not match the plan document shape.
    """
    if not isinstance(payload, dict):
        raise ParseError("Plan document must be a JSON object.", raw_response=raw_response)

    categories: list[dict[str, Any]] = []
    for name, data in payload.items():
        if not isinstance(data, dict):
            raise ParseError(
                f"Category {name!r} must be an object with an item list.",
                raw_response=raw_response,
            )
        raw_items = data.get("items")
        if raw_items is None:
            raw_items = data.get("files")
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise ParseError(
                f"Items of category {name!r} must be a list.", raw_response=raw_response
            )

        reason = data.get("reason")
        categories.append(
            {
                "name": name,
                "reason": None if reason is None else str(reason),
                "items": [_normalize_item(entry, name, raw_response) for entry in raw_items],
            }
        )

    try:
        return Plan.model_validate({"categories": categories})
    except ValidationError as exc:
        raise ParseError(f"Plan document is invalid: {exc}", raw_response=raw_response) from exc


def _normalize_item(entry: Any, category: str, raw_response: Optional[str]) -> dict[str, Any]:
    if isinstance(entry, str):
        return {"name": entry, "kind": EntryKind.FILE}
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        raw_kind = entry.get("type", entry.get("kind"))
        kind = EntryKind.FILE
        if isinstance(raw_kind, str) and raw_kind.strip().lower() in _FOLDER_KINDS:
            kind = EntryKind.FOLDER
        return {"name": entry["name"], "kind": kind}
    raise ParseError(
        f"Unrecognized item {entry!r} in category {category!r}.",
        raw_response=raw_response,
    )


__all__ = ["strip_code_fence", "parse_plan_response", "normalize_plan_payload"]
