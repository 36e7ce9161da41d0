import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship

from replyflow.database import Base, JSONType
from replyflow.services.clock import utcnow


class Message(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (
        UniqueConstraint("company_id", "external_message_id", name="uq_chat_messages_company_external_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("chat_sessions.id"), nullable=False)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    chat_id_normalized = Column(Text)
    phone_number = Column(Text)
    message_body = Column(Text)
    message_type = Column(Text, nullable=False, default="text")
    external_message_id = Column(Text)  # gateway id, null when the payload carries none
    direction = Column(Text, nullable=False)  # inbound, outbound
    sender_type = Column(Text, nullable=False)  # contact, human, ai
    status = Column(Text)  # received, sent
    read = Column(Boolean, nullable=False, default=False)
    message_metadata = Column("metadata", JSONType, key="message_metadata")
    message_ts = Column(TIMESTAMP(timezone=True), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
