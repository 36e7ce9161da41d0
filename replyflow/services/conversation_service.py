from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.logging_config import get_logger
from replyflow.models import Contact, Conversation
from replyflow.services.clock import utcnow
from replyflow.services.state_machine import ConversationStatus, reopen_for_inbound

logger = get_logger("conversation_service")


def get_conversation(db: Session, company_id: UUID, session_id: UUID) -> Optional[Conversation]:
    return (
        db.query(Conversation)
        .filter(Conversation.id == session_id, Conversation.company_id == company_id)
        .first()
    )


def resolve_conversation(
    db: Session,
    company_id: UUID,
    channel_id: int,
    chat_id: str,
    contact: Contact,
    display_name: Optional[str] = None,
) -> Conversation:
    """Find the conversation for (channel, chat) or open a new one.

    Contact linkage and the displayed contact name are refreshed on every
    inbound message, for new and existing conversations alike.
    """
    contact_name = display_name or contact.phone_number
    conversation = (
        db.query(Conversation)
        .filter(Conversation.channel_id == channel_id, Conversation.chat_id == chat_id)
        .first()
    )

    if conversation:
        conversation.contact_id = contact.id
        conversation.contact_name = contact_name
        return conversation

    conversation = Conversation(
        company_id=company_id,
        channel_id=channel_id,
        contact_id=contact.id,
        chat_id=chat_id,
        phone_number=contact.phone_number,
        contact_name=contact_name,
        status=ConversationStatus.OPEN.value,
    )
    db.add(conversation)
    db.flush()
    logger.info(
        "Conversation created",
        extra={"context": {"session_id": str(conversation.id), "channel_id": channel_id}},
    )
    return conversation


def reopen_on_inbound(conversation: Conversation) -> None:
    """Reopen resolved/closed conversations and clear any snooze."""
    previous = conversation.status
    conversation.status = reopen_for_inbound(previous)
    if conversation.snoozed_until is not None:
        conversation.snoozed_until = None
    if conversation.status != previous:
        logger.info(
            "Conversation reopened",
            extra={"context": {"session_id": str(conversation.id), "from": previous}},
        )


def update_summary(
    conversation: Conversation,
    *,
    body: str,
    at: datetime,
    direction: str,
    sender: str,
) -> None:
    conversation.last_message = body
    conversation.last_message_at = at
    conversation.last_message_direction = direction
    conversation.last_message_sender = sender
    conversation.updated_at = utcnow()
