from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from replyflow.database import Base, BigIntegerType

CHANNEL_STATUS_CONNECTED = "connected"


class Channel(Base):
    __tablename__ = "whatsapp_channels"

    id = Column(BigIntegerType, primary_key=True, autoincrement=True)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    name = Column(Text)
    phone_number = Column(Text)
    channel_token = Column(Text)  # gateway delivery credential
    channel_status = Column(Text, nullable=False, default="pending")  # pending, connected, disconnected
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    company = relationship("Company", back_populates="channels")
    agent_settings = relationship("ChannelAgentSettings", back_populates="channel", uselist=False)
