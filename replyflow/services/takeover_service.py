from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.logging_config import get_logger
from replyflow.models import Conversation
from replyflow.services.clock import utcnow
from replyflow.services.conversation_service import get_conversation

logger = get_logger("takeover")


def pause_ai(
    db: Session,
    company_id: UUID,
    session_id: UUID,
    duration_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Optional[Conversation]:
    """Hand the conversation to a human, optionally until a resume time."""
    conversation = get_conversation(db, company_id, session_id)
    if conversation is None:
        return None

    now = now or utcnow()
    conversation.human_takeover = True
    conversation.auto_resume_at = now + timedelta(minutes=duration_minutes) if duration_minutes else None
    conversation.updated_at = now
    db.flush()
    logger.info(
        "AI paused",
        extra={"context": {"session_id": str(session_id), "duration_minutes": duration_minutes}},
    )
    return conversation


def resume_ai(db: Session, company_id: UUID, session_id: UUID) -> Optional[Conversation]:
    conversation = get_conversation(db, company_id, session_id)
    if conversation is None:
        return None

    conversation.human_takeover = False
    conversation.auto_resume_at = None
    conversation.updated_at = utcnow()
    db.flush()
    logger.info("AI resumed", extra={"context": {"session_id": str(session_id)}})
    return conversation
