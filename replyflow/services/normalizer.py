from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from replyflow.schemas.webhook import WhapiIncomingMessage
from replyflow.services.clock import utcnow


@dataclass(frozen=True)
class InboundMessage:
    sender: str
    chat_id: str
    body: str
    external_id: Optional[str]
    timestamp: datetime
    display_name: Optional[str] = None
    message_type: str = "text"
    media: Optional[dict] = None


def strip_jid(value: Optional[str]) -> str:
    """'77011234567@s.whatsapp.net' -> '77011234567'."""
    if not value:
        return ""
    return value.split("@", 1)[0]


def extract_body(msg: WhapiIncomingMessage) -> str:
    if msg.text and msg.text.body:
        return msg.text.body
    if msg.image and msg.image.caption:
        return msg.image.caption
    if msg.video and msg.video.caption:
        return msg.video.caption
    if msg.document and msg.document.filename:
        return f"[Document: {msg.document.filename}]"
    if msg.audio:
        return "[Audio message]"
    if msg.image:
        return "[Image]"
    if msg.video:
        return "[Video]"
    return f"[{msg.type or 'Unknown'} message]"


def _media_descriptor(msg: WhapiIncomingMessage) -> Optional[dict]:
    media = msg.image or msg.document or msg.audio or msg.video
    if media is None:
        return None
    return {"media": media.model_dump(exclude_none=True)}


def _parse_timestamp(value: Union[int, float, str, None]) -> datetime:
    """Epoch seconds, as a number or numeric string; anything else is now."""
    if value is None:
        return utcnow()
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return utcnow()


def normalize_message(msg: WhapiIncomingMessage) -> InboundMessage:
    """Build the canonical inbound message. Never raises on odd payloads."""
    sender = strip_jid(msg.from_)
    chat_id = strip_jid(msg.chat_id) or sender
    external_id = (msg.id or "").strip() or None

    return InboundMessage(
        sender=sender,
        chat_id=chat_id,
        body=extract_body(msg),
        external_id=external_id,
        timestamp=_parse_timestamp(msg.timestamp),
        display_name=(msg.from_name or "").strip() or None,
        message_type=msg.type or "text",
        media=_media_descriptor(msg),
    )
