"""Content LLM client: the bridge between the planner and LLM providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fitnation.core.llm.provider import LLMProvider, ProviderResponse
from fitnation.core.llm.response import (
    check_guardrails,
    extract_json_object,
    sanitize_content,
    strip_markup,
)
from fitnation.core.llm.system_prompt import build_full_system_prompt

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Cleaned response from the content LLM."""

    content: str
    model: str
    guardrail_flags: list[str] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=dict)


class ContentLLMClient:
    """Invokes the content LLM and enforces output hygiene.

    Provider exceptions propagate unchanged; callers decide on fallbacks.
    """

    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider

    @property
    def provider_name(self) -> str:
        return getattr(self.provider, "name", type(self.provider).__name__)

    async def _call(
        self,
        task: str,
        task_instructions: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: float,
        json_output: bool,
    ) -> ProviderResponse:
        provider_response = await self.provider.generate(
            system_message=build_full_system_prompt(task_instructions),
            user_message=user_message,
            max_tokens=max_tokens,
            temperature=temperature,
            json_output=json_output,
        )
        logger.info(
            "Content LLM call: task=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            task,
            provider_response.model,
            provider_response.input_tokens,
            provider_response.output_tokens,
            provider_response.latency_ms,
        )
        return provider_response

    async def generate_text(
        self,
        task: str,
        task_instructions: str,
        user_message: str,
        max_tokens: int = 512,
        temperature: float = 0.5,
    ) -> LLMResponse:
        """Generate plain prose. Markup is stripped and unsafe sentences redacted."""
        provider_response = await self._call(
            task,
            task_instructions,
            user_message,
            max_tokens=max_tokens,
            temperature=temperature,
            json_output=False,
        )
        content = strip_markup(provider_response.content)
        guardrail_check = check_guardrails(content)
        content = sanitize_content(content, guardrail_check)
        if not guardrail_check.passed:
            logger.warning(
                "Guardrails enforced on %s: %d prohibited patterns redacted",
                task,
                len(guardrail_check.flags),
            )

        return LLMResponse(
            content=content,
            model=provider_response.model,
            guardrail_flags=guardrail_check.flags,
            usage={
                "input_tokens": provider_response.input_tokens,
                "output_tokens": provider_response.output_tokens,
            },
        )

    async def generate_json(
        self,
        task: str,
        task_instructions: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> Any:
        """Generate and decode a JSON object. The shape is not checked here.

        Raises:
            ValueError: if the response holds no decodable JSON object.
        """
        provider_response = await self._call(
            task,
            task_instructions,
            user_message,
            max_tokens=max_tokens,
            temperature=temperature,
            json_output=True,
        )
        return extract_json_object(provider_response.content)
