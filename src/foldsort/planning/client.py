"""Chat-completion client used for categorization requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from openai import OpenAI, OpenAIError

from foldsort.config import ConfigError, LLMSettings

from .errors import UpstreamError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CompletionResult:
    """Text and token usage returned by one completion.

    Attributes:
        text: Assistant message content.
        usage: Provider token usage, when reported.
    """

    text: str
    usage: Optional[dict[str, Any]] = None


class CompletionClient(Protocol):
    """Interface consumed by the plan builder."""

    def complete(self, system_prompt: str, user_prompt: str) -> CompletionResult: ...


class CategorizationClient:
    """Issue categorization requests against an OpenAI-compatible endpoint."""

    def __init__(self, settings: LLMSettings) -> None:
        """Create the underlying SDK client.

        Args:
            settings: Categorization service settings.

        Raises:
            ConfigError: If the credential is missing or a custom provider has no endpoint.
        """
        if not settings.api_key:
            raise ConfigError("API key is missing; set llm.api_key in the configuration.")
        if settings.provider == "custom" and not settings.base_url:
            raise ConfigError("The custom provider requires llm.base_url.")

        self._settings = settings
        self._client = OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url or None,
            timeout=settings.timeout_seconds,
        )

    @property
    def model(self) -> str:
        """Return the model identifier used for requests."""
        return self._settings.model

    def complete(self, system_prompt: str, user_prompt: str) -> CompletionResult:
        """Send one chat completion and return the assistant's reply.

        Args:
            system_prompt: System message content.
            user_prompt: User message content.

        Returns:
            CompletionResult: Reply text and token usage.

        Raises:
            UpstreamError: If the request fails or the reply is empty.
        """
        LOGGER.debug("Requesting categorization from %s", self._settings.model)
        try:
            response = self._client.chat.completions.create(
                model=self._settings.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self._settings.temperature,
            )
        except OpenAIError as exc:
            raise UpstreamError(f"Categorization request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamError("Categorization service returned an empty response.")

        usage = response.usage.model_dump() if response.usage is not None else None
        return CompletionResult(text=content.strip(), usage=usage)


__all__ = ["CategorizationClient", "CompletionClient", "CompletionResult"]
