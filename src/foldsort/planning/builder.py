"""Build categorization plans from folder listings."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from foldsort.config import ConfigError, LLMSettings
from foldsort.scanning.models import DirectoryEntry
from foldsort.state.models import MoveRecord

from .client import CategorizationClient, CompletionClient
from .models import Plan, PlanDebugInfo, PlanResult
from .normalize import parse_plan_response
from .prompts import SYSTEM_PROMPT, build_user_prompt

LOGGER = logging.getLogger(__name__)

MAX_PROMPT_ITEMS = 200
MAX_HISTORY_ITEMS = 20


class PlanRequestBuilder:
    """Turn a root listing into a categorization request and a normalized plan."""

    def __init__(
        self,
        settings: LLMSettings,
        *,
        debug: bool = False,
        client: Optional[CompletionClient] = None,
    ) -> None:
        """Initialize the builder.

        Args:
            settings: Categorization service settings.
            debug: Return prompt, response, and usage diagnostics with each plan.
            client: Completion client; created from ``settings`` on first use when omitted.
        """
        self._settings = settings
        self._debug = debug
        self._client = client

    def build(
        self,
        items: Sequence[DirectoryEntry],
        history: Sequence[MoveRecord] = (),
    ) -> PlanResult:
        """Request a plan for ``items``.

        Args:
            items: Root listing produced by the folder scanner.
            history: Previous move records, newest first, used as preference hints.

        Returns:
            PlanResult: Normalized plan plus diagnostics in debug mode.

        Raises:
            ConfigError: If no credential is configured.
            UpstreamError: If the categorization request fails.
            ParseError: If the response is not a valid plan document.
        """
        if not self._settings.api_key:
            raise ConfigError("API key is missing; set llm.api_key in the configuration.")

        if not items:
            return PlanResult(plan=Plan())

        selected = list(items)[:MAX_PROMPT_ITEMS]
        user_prompt = build_user_prompt(
            [entry.to_prompt_payload() for entry in selected],
            [record.to_prompt_payload() for record in history[:MAX_HISTORY_ITEMS]],
        )
        LOGGER.debug(
            "Built categorization prompt for %d of %d items (%d characters)",
            len(selected),
            len(items),
            len(user_prompt),
        )

        completion = self._get_client().complete(SYSTEM_PROMPT, user_prompt)
        plan = parse_plan_response(completion.text, keep_raw=self._debug)

        debug = None
        if self._debug:
            debug = PlanDebugInfo(
                system_prompt=SYSTEM_PROMPT,
                user_prompt=user_prompt,
                raw_response=completion.text,
                model=self._settings.model,
                usage=completion.usage,
                item_count=len(selected),
            )
        return PlanResult(plan=plan, debug=debug)

    def _get_client(self) -> CompletionClient:
        if self._client is None:
            self._client = CategorizationClient(self._settings)
        return self._client


__all__ = ["MAX_PROMPT_ITEMS", "MAX_HISTORY_ITEMS", "PlanRequestBuilder"]
