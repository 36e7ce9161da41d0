import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.database import dialect_insert
from replyflow.logging_config import get_logger
from replyflow.models import Conversation, Message
from replyflow.services.clock import utcnow
from replyflow.services.conversation_service import reopen_on_inbound, update_summary
from replyflow.services.normalizer import InboundMessage

logger = get_logger("message_service")

DIRECTION_INBOUND = "inbound"
DIRECTION_OUTBOUND = "outbound"
SENDER_CONTACT = "contact"
SENDER_AI = "ai"


def is_duplicate_message(db: Session, company_id: UUID, external_message_id: Optional[str]) -> bool:
    """Read-only form of the dedup check, for callers that must not write.

    Ingestion does not use it: ``insert_inbound_message`` makes the same
    decision atomically. Messages without an external id are never
    duplicates.
    """
    if not external_message_id:
        return False
    existing = (
        db.query(Message.id)
        .filter(Message.company_id == company_id, Message.external_message_id == external_message_id)
        .first()
    )
    return existing is not None


def insert_inbound_message(db: Session, conversation: Conversation, inbound: InboundMessage) -> Optional[Message]:
    """Insert the inbound row, ignoring conflicts on (company_id, external_message_id).

    Returns None when the row already existed, which is the dedup signal.
    Concurrent duplicate deliveries race on the unique constraint rather
    than on a prior read.
    """
    message_id = uuid.uuid4()
    stmt = (
        dialect_insert(db, Message)
        .values(
            id=message_id,
            session_id=conversation.id,
            company_id=conversation.company_id,
            chat_id_normalized=conversation.chat_id,
            phone_number=inbound.sender,
            message_body=inbound.body,
            message_type=inbound.message_type,
            external_message_id=inbound.external_id,
            direction=DIRECTION_INBOUND,
            sender_type=SENDER_CONTACT,
            status="received",
            read=False,
            message_metadata=inbound.media,
            message_ts=inbound.timestamp,
            created_at=utcnow(),
        )
        .on_conflict_do_nothing(index_elements=["company_id", "external_message_id"])
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        return None
    return db.get(Message, message_id)


def store_inbound_message(db: Session, conversation: Conversation, inbound: InboundMessage) -> Optional[Message]:
    """Persist an inbound message and refresh the conversation summary.

    A duplicate external id stops here: no summary update happens and
    None is returned.
    """
    message = insert_inbound_message(db, conversation, inbound)
    if message is None:
        logger.info(
            "Duplicate message skipped",
            extra={"context": {"external_id": inbound.external_id, "session_id": str(conversation.id)}},
        )
        return None

    update_summary(
        conversation,
        body=inbound.body,
        at=inbound.timestamp,
        direction=DIRECTION_INBOUND,
        sender=SENDER_CONTACT,
    )
    reopen_on_inbound(conversation)
    db.flush()
    return message


def record_outbound_message(
    db: Session,
    conversation: Conversation,
    body: str,
    external_message_id: Optional[str] = None,
) -> Message:
    now = utcnow()
    message = Message(
        session_id=conversation.id,
        company_id=conversation.company_id,
        chat_id_normalized=conversation.chat_id,
        phone_number=conversation.phone_number,
        message_body=body,
        message_type="text",
        external_message_id=external_message_id,
        direction=DIRECTION_OUTBOUND,
        sender_type=SENDER_AI,
        status="sent",
        read=True,
        message_ts=now,
        created_at=now,
    )
    db.add(message)
    update_summary(conversation, body=body, at=now, direction=DIRECTION_OUTBOUND, sender=SENDER_AI)
    db.flush()
    return message


def get_recent_messages(db: Session, session_id: UUID, limit: int = 20) -> List[Message]:
    """Most recent messages first."""
    return (
        db.query(Message)
        .filter(Message.session_id == session_id)
        .order_by(Message.created_at.desc())
        .limit(limit)
        .all()
    )
