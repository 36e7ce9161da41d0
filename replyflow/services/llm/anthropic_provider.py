from typing import Optional, Sequence

import httpx

from replyflow.exceptions import CompletionError
from replyflow.logging_config import get_logger
from replyflow.services.llm.base import LLMProvider, LLMResponse

logger = get_logger("llm.anthropic")

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-sonnet-4-20250514",
        base_url: str = "https://api.anthropic.com/v1/messages",
        timeout_seconds: float = 60.0,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds

    def complete(
        self,
        system_prompt: str,
        max_tokens: int,
        messages: Sequence[dict],
        model: Optional[str] = None,
    ) -> LLMResponse:
        model = model or self.default_model

        with httpx.Client(timeout=self.timeout_seconds) as client:
            payload = {
                "model": model,
                "max_tokens": max_tokens,
                "system": system_prompt,
                "messages": list(messages),
            }
            logger.debug(f"Anthropic request: model={model}, messages_count={len(payload['messages'])}")

            try:
                response = client.post(
                    self.base_url,
                    headers={
                        "x-api-key": self.api_key,
                        "anthropic-version": ANTHROPIC_VERSION,
                        "content-type": "application/json",
                    },
                    json=payload,
                )
            except httpx.HTTPError as exc:
                raise CompletionError(f"Anthropic request failed: {exc}") from exc

        logger.debug(f"Anthropic response status: {response.status_code}")

        if response.status_code != 200:
            logger.error(f"Anthropic error: {response.text}")
            raise CompletionError(
                f"Anthropic API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        data = response.json()
        return LLMResponse(
            content=data.get("content") or [],
            model=data.get("model", model),
            usage=data.get("usage"),
            stop_reason=data.get("stop_reason"),
        )
