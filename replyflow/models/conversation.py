import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship

from replyflow.database import Base, BigIntegerType
from replyflow.services.clock import utcnow


class Conversation(Base):
    __tablename__ = "chat_sessions"
    __table_args__ = (UniqueConstraint("channel_id", "chat_id", name="uq_chat_sessions_channel_chat"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    channel_id = Column(BigIntegerType, ForeignKey("whatsapp_channels.id"))
    contact_id = Column(UUID(as_uuid=True), ForeignKey("contacts.id"))
    chat_id = Column(Text, nullable=False)
    phone_number = Column(Text)
    contact_name = Column(Text)
    status = Column(Text, nullable=False, default="open")  # open, pending, resolved, closed
    snoozed_until = Column(TIMESTAMP(timezone=True))
    human_takeover = Column(Boolean, nullable=False, default=False)
    auto_resume_at = Column(TIMESTAMP(timezone=True))
    last_message = Column(Text)
    last_message_at = Column(TIMESTAMP(timezone=True))
    last_message_direction = Column(Text)  # inbound, outbound
    last_message_sender = Column(Text)  # contact, human, ai
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    contact = relationship("Contact")
    messages = relationship("Message", back_populates="conversation")
