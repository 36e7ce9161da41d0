from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from replyflow.database import Base, BigIntegerType, JSONType

SCHEDULE_ALWAYS_ON = "always_on"
SCHEDULE_BUSINESS_HOURS = "business_hours"
SCHEDULE_CUSTOM = "custom"


class ChannelAgentSettings(Base):
    __tablename__ = "channel_agent_settings"

    channel_id = Column(BigIntegerType, ForeignKey("whatsapp_channels.id"), primary_key=True)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False)
    agent_id = Column(UUID(as_uuid=True), ForeignKey("ai_agents.id"))
    is_enabled = Column(Boolean, nullable=False, default=True)
    profile_data = Column(JSONType, nullable=False, default=dict)
    max_tokens = Column(Integer, default=500)
    schedule_mode = Column(Text, nullable=False, default=SCHEDULE_ALWAYS_ON)  # always_on, business_hours, custom
    business_hours = Column(JSONType)
    ai_schedule = Column(JSONType)  # custom schedule, same shape as business_hours
    outside_hours_message = Column(Text)
    custom_instructions = Column(Text)
    greeting_override = Column(Text)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    channel = relationship("Channel", back_populates="agent_settings")
    agent = relationship("Agent")
