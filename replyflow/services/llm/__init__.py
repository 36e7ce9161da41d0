from typing import Optional

from replyflow.config import settings
from replyflow.services.llm.anthropic_provider import AnthropicProvider
from replyflow.services.llm.base import LLMProvider, LLMResponse, extract_reply_text


def get_llm_provider() -> Optional[LLMProvider]:
    """Configured completion provider, or None when no API key is set."""
    if not settings.anthropic_api_key:
        return None
    return AnthropicProvider(
        api_key=settings.anthropic_api_key,
        default_model=settings.anthropic_model,
        base_url=settings.anthropic_api_url,
        timeout_seconds=settings.llm_timeout_seconds,
    )


__all__ = ["LLMProvider", "LLMResponse", "AnthropicProvider", "extract_reply_text", "get_llm_provider"]
