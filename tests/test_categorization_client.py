"""Tests for the OpenAI-compatible categorization client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Optional

import pytest
from openai import OpenAIError

from foldsort.config import ConfigError, LLMSettings
from foldsort.planning import UpstreamError
from foldsort.planning import client as client_module
from foldsort.planning.client import CategorizationClient


class _Usage:
    def __init__(self, **values: int) -> None:
        self._values = values

    def model_dump(self) -> dict[str, int]:
        return dict(self._values)


class _FakeOpenAI:
    """Stand-in for the SDK client recording constructor and request arguments."""

    instances: list["_FakeOpenAI"] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.requests: list[dict[str, Any]] = []
        self.content: Optional[str] = '{"Misc": {"items": []}}'
        self.usage: Optional[_Usage] = _Usage(prompt_tokens=10, completion_tokens=5)
        self.error: Optional[Exception] = None
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        _FakeOpenAI.instances.append(self)

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=self.usage)


@pytest.fixture
def fake_openai(monkeypatch: pytest.MonkeyPatch) -> type[_FakeOpenAI]:
    _FakeOpenAI.instances = []
    monkeypatch.setattr(client_module, "OpenAI", _FakeOpenAI)
    return _FakeOpenAI


def test_complete_sends_chat_request(fake_openai: type[_FakeOpenAI]) -> None:
    settings = LLMSettings(api_key="sk-test", model="gpt-4o-mini", temperature=0.3)
    client = CategorizationClient(settings)

    result = client.complete("system text", "user text")

    sdk = fake_openai.instances[0]
    assert sdk.kwargs == {"api_key": "sk-test", "base_url": None, "timeout": 60.0}
    request = sdk.requests[0]
    assert request["model"] == "gpt-4o-mini"
    assert request["temperature"] == pytest.approx(0.3)
    assert request["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]
    assert result.text == '{"Misc": {"items": []}}'
    assert result.usage == {"prompt_tokens": 10, "completion_tokens": 5}
    assert client.model == "gpt-4o-mini"


def test_custom_endpoint_is_passed_through(fake_openai: type[_FakeOpenAI]) -> None:
    settings = LLMSettings(
        provider="custom",
        api_key="local",
        base_url="http://localhost:1234/v1",
        timeout_seconds=5,
    )

    CategorizationClient(settings)

    assert fake_openai.instances[0].kwargs["base_url"] == "http://localhost:1234/v1"
    assert fake_openai.instances[0].kwargs["timeout"] == 5


def test_missing_usage_is_reported_as_none(fake_openai: type[_FakeOpenAI]) -> None:
    client = CategorizationClient(LLMSettings(api_key="sk-test"))
    fake_openai.instances[0].usage = None

    assert client.complete("s", "u").usage is None


def test_sdk_errors_become_upstream_errors(fake_openai: type[_FakeOpenAI]) -> None:
    client = CategorizationClient(LLMSettings(api_key="sk-test"))
    fake_openai.instances[0].error = OpenAIError("quota exceeded")

    with pytest.raises(UpstreamError, match="quota exceeded"):
        client.complete("s", "u")


@pytest.mark.parametrize("content", [None, ""])
def test_empty_reply_is_an_upstream_error(
    fake_openai: type[_FakeOpenAI], content: Optional[str]
) -> None:
    client = CategorizationClient(LLMSettings(api_key="sk-test"))
    fake_openai.instances[0].content = content

    with pytest.raises(UpstreamError):
        client.complete("s", "u")


def test_missing_credential_is_a_config_error(fake_openai: type[_FakeOpenAI]) -> None:
    with pytest.raises(ConfigError):
        CategorizationClient(LLMSettings())

    assert fake_openai.instances == []


def test_custom_provider_requires_endpoint(fake_openai: type[_FakeOpenAI]) -> None:
    with pytest.raises(ConfigError):
        CategorizationClient(LLMSettings(provider="custom", api_key="local"))
