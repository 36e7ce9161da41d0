from dataclasses import dataclass
from typing import Optional

import httpx

from replyflow.exceptions import GatewayError
from replyflow.logging_config import get_logger

logger = get_logger("whapi")

DEFAULT_CHAT_SUFFIX = "@s.whatsapp.net"


@dataclass
class SendResult:
    external_id: Optional[str] = None


def to_chat_jid(chat_id: str) -> str:
    """Append the default WhatsApp domain when the id has none."""
    if "@" in chat_id:
        return chat_id
    return f"{chat_id}{DEFAULT_CHAT_SUFFIX}"


def _extract_message_id(data) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if isinstance(message, dict) and message.get("id"):
        return message["id"]
    return data.get("message_id") or data.get("id")


class WhapiGateway:
    """Whapi gate API client for sending messages with a channel token."""

    def __init__(self, base_url: str = "https://gate.whapi.cloud", timeout_seconds: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def send_text(self, channel_token: str, to: str, body: str) -> SendResult:
        try:
            with httpx.Client(timeout=self.timeout_seconds) as client:
                response = client.post(
                    f"{self.base_url}/messages/text",
                    headers={"Authorization": f"Bearer {channel_token}"},
                    json={"to": to, "body": body},
                )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Whapi request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Whapi send failed",
                extra={"context": {"status": response.status_code, "body": response.text[:500]}},
            )
            raise GatewayError(
                f"Whapi send error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        return SendResult(external_id=_extract_message_id(data))
