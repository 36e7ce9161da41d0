from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class LLMResponse:
    content: List[dict] = field(default_factory=list)  # provider content blocks
    model: str = ""
    usage: Optional[dict] = None
    stop_reason: Optional[str] = None


def extract_reply_text(blocks: Sequence[dict]) -> str:
    """Join the text of ``text`` blocks with newlines; other block types are ignored."""
    return "\n".join(block.get("text") or "" for block in blocks if block.get("type") == "text")


class LLMProvider(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        max_tokens: int,
        messages: Sequence[dict],
        model: Optional[str] = None,
    ) -> LLMResponse:
        """Generate a reply for the conversation."""
        pass
