"""Anthropic Claude provider."""

from __future__ import annotations

import time

from fitnation.core.llm.provider import ProviderResponse

# Prefilling the assistant turn with "{" keeps Claude from wrapping JSON in prose.
_JSON_PREFILL = "{"


class AnthropicProvider:
    """Claude provider using the Anthropic SDK."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.4,
        json_output: bool = False,
    ) -> ProviderResponse:
        messages = [{"role": "user", "content": user_message}]
        if json_output:
            messages.append({"role": "assistant", "content": _JSON_PREFILL})

        start = time.monotonic()
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_message,
            messages=messages,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if json_output:
            text = _JSON_PREFILL + text
        return ProviderResponse(
            content=text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self.model,
            latency_ms=elapsed_ms,
        )
