import uuid

from sqlalchemy import Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from replyflow.database import Base, BigIntegerType
from replyflow.services.clock import utcnow


class KnowledgeBaseEntry(Base):
    __tablename__ = "knowledge_base_entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    channel_id = Column(BigIntegerType, ForeignKey("whatsapp_channels.id"))
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)


class ChannelKBAssignment(Base):
    __tablename__ = "channel_kb_assignments"
    __table_args__ = (UniqueConstraint("channel_id", "entry_id", name="uq_channel_kb_assignments"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    channel_id = Column(BigIntegerType, ForeignKey("whatsapp_channels.id"), nullable=False)
    entry_id = Column(UUID(as_uuid=True), ForeignKey("knowledge_base_entries.id"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
