from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.logging_config import get_logger
from replyflow.models import Channel, Message
from replyflow.models.channel import CHANNEL_STATUS_CONNECTED
from replyflow.services.conversation_service import get_conversation
from replyflow.services.eligibility_service import AgentContext
from replyflow.services.llm.base import LLMProvider, extract_reply_text
from replyflow.services.message_service import record_outbound_message
from replyflow.services.whapi_service import WhapiGateway, to_chat_jid

logger = get_logger("reply_service")


def get_connected_channel(db: Session, company_id: UUID, channel_id: int) -> Optional[Channel]:
    return (
        db.query(Channel)
        .filter(
            Channel.id == channel_id,
            Channel.company_id == company_id,
            Channel.channel_status == CHANNEL_STATUS_CONNECTED,
        )
        .first()
    )


def send_and_record(
    db: Session,
    company_id: UUID,
    session_id: UUID,
    channel_id: int,
    body: str,
    gateway: WhapiGateway,
) -> Optional[Message]:
    """Deliver ``body`` to the conversation and store it as an outbound AI message.

    Returns None without sending when the conversation is gone or the
    channel has no connected delivery credential. Gateway errors propagate.
    """
    conversation = get_conversation(db, company_id, session_id)
    if conversation is None:
        logger.warning("Reply dropped: conversation not found", extra={"context": {"session_id": str(session_id)}})
        return None

    channel = get_connected_channel(db, company_id, channel_id)
    if channel is None or not channel.channel_token:
        logger.warning(
            "Reply dropped: channel not connected",
            extra={"context": {"session_id": str(session_id), "channel_id": channel_id}},
        )
        return None

    result = gateway.send_text(channel.channel_token, to_chat_jid(conversation.chat_id), body)
    message = record_outbound_message(db, conversation, body, external_message_id=result.external_id)

    logger.info(
        "Reply sent",
        extra={
            "context": {
                "session_id": str(session_id),
                "channel_id": channel_id,
                "message_id": str(message.id),
                "external_id": result.external_id,
            }
        },
    )
    return message


def respond_with_generated_reply(
    db: Session,
    company_id: UUID,
    context: AgentContext,
    provider: LLMProvider,
    gateway: WhapiGateway,
) -> Optional[Message]:
    response = provider.complete(context.system_prompt, context.max_tokens, list(context.messages))
    reply = extract_reply_text(response.content)
    if not reply.strip():
        logger.info("Empty completion, nothing sent", extra={"context": {"session_id": str(context.session_id)}})
        return None
    return send_and_record(db, company_id, context.session_id, context.channel_id, reply, gateway)


def respond_with_outside_hours_message(
    db: Session,
    company_id: UUID,
    session_id: UUID,
    channel_id: int,
    text: str,
    gateway: WhapiGateway,
) -> Optional[Message]:
    return send_and_record(db, company_id, session_id, channel_id, text, gateway)
