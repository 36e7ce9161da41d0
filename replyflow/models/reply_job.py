import uuid

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from replyflow.database import Base
from replyflow.services.clock import utcnow


class ReplyJob(Base):
    __tablename__ = "reply_jobs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    session_id = Column(UUID(as_uuid=True), ForeignKey("chat_sessions.id"), nullable=False)
    inbound_message_id = Column(UUID(as_uuid=True), ForeignKey("chat_messages.id"), nullable=False)
    status = Column(Text, nullable=False, default="PENDING")  # PENDING, PROCESSING, DONE, SKIPPED, FAILED
    outcome = Column(Text)
    attempts = Column(Integer, nullable=False, default=0)
    next_attempt_at = Column(TIMESTAMP(timezone=True))
    last_error = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
