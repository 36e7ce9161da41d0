from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from replyflow.database import get_db
from replyflow.logging_config import get_logger
from replyflow.models import Channel
from replyflow.models.channel import CHANNEL_STATUS_CONNECTED
from replyflow.schemas.webhook import WebhookResponse, WhapiIncomingMessage, WhapiWebhookPayload
from replyflow.services.ingestion_service import ingest_message
from replyflow.services.normalizer import strip_jid

logger = get_logger("webhook")

router = APIRouter()


def find_receiving_channel(db: Session, to: Optional[str]) -> Optional[Channel]:
    phone = strip_jid(to)
    if not phone:
        return None
    return (
        db.query(Channel)
        .filter(Channel.phone_number == phone, Channel.channel_status == CHANNEL_STATUS_CONNECTED)
        .first()
    )


def is_own_message(msg: WhapiIncomingMessage) -> bool:
    return msg.from_me or (msg.from_ is not None and msg.from_ == msg.to)


@router.post("/webhook/whapi", response_model=WebhookResponse)
def handle_whapi_webhook(payload: WhapiWebhookPayload, db: Session = Depends(get_db)):
    """Ingest gateway messages.

    Everything is committed once at the end; a datastore error bubbles up
    as a 500 so the gateway redelivers and idempotency takes over.
    """
    response = WebhookResponse()

    for msg in payload.messages:
        if is_own_message(msg):
            response.skipped += 1
            continue

        channel = find_receiving_channel(db, msg.to)
        if channel is None:
            logger.warning(
                "No connected channel for incoming message",
                extra={"context": {"to": strip_jid(msg.to), "message_id": msg.id}},
            )
            response.skipped += 1
            continue

        result = ingest_message(db, msg, channel.company_id, channel.id)
        if result.duplicate:
            response.duplicates += 1
        else:
            response.processed += 1

    db.commit()
    return response
