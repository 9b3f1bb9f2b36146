"""Mock LLM provider for tests and key-less local runs."""

from __future__ import annotations

from fitnation.core.llm.provider import ProviderResponse

DEFAULT_TEXT_RESPONSE = (
    "You are off to a solid start.\n"
    "1. Hit your calorie target most days of the week.\n"
    "2. Build each meal around a protein source.\n"
    "3. Keep a water bottle with you and sip through the day."
)


class MockProvider:
    """Returns canned content; JSON requests get ``json_response`` when set.

    Responses can also be queued with :meth:`queue`, which take priority
    and are consumed in order.
    """

    name = "mock"

    def __init__(
        self,
        response_content: str = DEFAULT_TEXT_RESPONSE,
        json_response: str | None = None,
    ) -> None:
        self.response_content = response_content
        self.json_response = json_response
        self._queued: list[str] = []
        self.calls: list[dict[str, object]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def queue(self, *responses: str) -> None:
        self._queued.extend(responses)

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.4,
        json_output: bool = False,
    ) -> ProviderResponse:
        self.calls.append(
            {
                "system_message": system_message,
                "user_message": user_message,
                "json_output": json_output,
            }
        )
        if self._queued:
            content = self._queued.pop(0)
        elif json_output and self.json_response is not None:
            content = self.json_response
        else:
            content = self.response_content
        return ProviderResponse(
            content=content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(content.split()),
            model="mock",
            latency_ms=0.0,
        )
