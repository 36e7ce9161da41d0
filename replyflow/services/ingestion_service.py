from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.logging_config import get_logger
from replyflow.schemas.webhook import WhapiIncomingMessage
from replyflow.services.contact_service import resolve_contact
from replyflow.services.conversation_service import resolve_conversation
from replyflow.services.message_service import store_inbound_message
from replyflow.services.normalizer import normalize_message
from replyflow.services.reply_job_service import enqueue_reply_job

logger = get_logger("ingestion")


@dataclass
class IngestResult:
    session_id: UUID
    message_id: Optional[UUID] = None
    reply_job_id: Optional[UUID] = None
    duplicate: bool = False


def ingest_message(
    db: Session,
    msg: WhapiIncomingMessage,
    company_id: UUID,
    channel_id: int,
) -> IngestResult:
    """Materialize one gateway message into conversation state.

    The caller owns the transaction: the contact, conversation, message,
    summary update and reply job are committed together. Datastore errors
    propagate so the gateway delivery fails and is retried.
    """
    inbound = normalize_message(msg)

    contact = resolve_contact(db, company_id, inbound.sender, inbound.display_name)
    conversation = resolve_conversation(
        db,
        company_id,
        channel_id,
        inbound.chat_id,
        contact,
        inbound.display_name,
    )

    message = store_inbound_message(db, conversation, inbound)
    if message is None:
        return IngestResult(session_id=conversation.id, duplicate=True)

    job = enqueue_reply_job(db, company_id=company_id, session_id=conversation.id, message_id=message.id)

    logger.info(
        "Inbound message stored",
        extra={
            "context": {
                "company_id": str(company_id),
                "channel_id": channel_id,
                "session_id": str(conversation.id),
                "message_id": str(message.id),
                "message_type": inbound.message_type,
            }
        },
    )
    return IngestResult(session_id=conversation.id, message_id=message.id, reply_job_id=job.id)
