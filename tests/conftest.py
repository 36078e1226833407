"""Shared fixtures for foldsort tests."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from foldsort.planning.client import CompletionResult


class FakeCompletionClient:
    """Completion client returning canned text and recording prompts."""

    def __init__(self, text: str = "{}", usage: Optional[dict[str, Any]] = None) -> None:
        self.text = text
        self.usage = usage
        self.error: Optional[Exception] = None
        self.calls: list[tuple[str, str]] = []

    def complete(self, system_prompt: str, user_prompt: str) -> CompletionResult:
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return CompletionResult(text=self.text, usage=self.usage)

    @property
    def last_prompt(self) -> str:
        return self.calls[-1][1]


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()
