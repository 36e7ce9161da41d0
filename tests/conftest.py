import os
import uuid
from datetime import datetime, timezone
from unittest.mock import Mock

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from replyflow.database import Base, create_db_engine
from replyflow.models import (
    Agent,
    Channel,
    ChannelAgentSettings,
    ChannelKBAssignment,
    Company,
    Contact,
    Conversation,
    KnowledgeBaseEntry,
    Message,
)
from replyflow.services.llm.base import LLMResponse
from replyflow.services.whapi_service import SendResult

WEEKDAY_HOURS = {
    day: {"enabled": True, "open": "09:00", "close": "17:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}
WEEKDAY_HOURS["saturday"] = {"enabled": False, "open": "10:00", "close": "14:00"}


@pytest.fixture
def engine():
    engine = create_db_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Real SQLAlchemy session on an in-memory sqlite database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def db_session():
    """Mock database session."""
    return Mock()


@pytest.fixture
def company(db):
    company = Company(id=uuid.uuid4(), name="Acme Dental", timezone="Europe/Berlin")
    db.add(company)
    db.flush()
    return company


@pytest.fixture
def channel(db, company):
    channel = Channel(
        company_id=company.id,
        name="Front desk",
        phone_number="4915100000000",
        channel_token="whapi-token",
        channel_status="connected",
    )
    db.add(channel)
    db.flush()
    return channel


@pytest.fixture
def agent_settings(db, company, channel):
    agent_settings = ChannelAgentSettings(
        channel_id=channel.id,
        company_id=company.id,
        is_enabled=True,
        profile_data={"use_case": "business", "business_name": "Acme Dental", "tone": "friendly"},
        max_tokens=300,
        schedule_mode="always_on",
    )
    db.add(agent_settings)
    db.flush()
    return agent_settings


@pytest.fixture
def make_conversation(db, company, channel):
    def _make(chat_id="4917612345678", **fields):
        contact = Contact(company_id=company.id, phone_number=chat_id, whatsapp_name="Lena")
        db.add(contact)
        db.flush()
        conversation = Conversation(
            company_id=company.id,
            channel_id=fields.pop("channel_id", channel.id),
            contact_id=contact.id,
            chat_id=chat_id,
            phone_number=chat_id,
            contact_name="Lena",
            status=fields.pop("status", "open"),
            **fields,
        )
        db.add(conversation)
        db.flush()
        return conversation

    return _make


@pytest.fixture
def make_message(db):
    def _make(conversation, body, direction="inbound", created_at=None, **fields):
        created_at = created_at or datetime.now(timezone.utc)
        message = Message(
            session_id=conversation.id,
            company_id=conversation.company_id,
            chat_id_normalized=conversation.chat_id,
            message_body=body,
            direction=direction,
            sender_type="contact" if direction == "inbound" else "ai",
            message_ts=created_at,
            created_at=created_at,
            **fields,
        )
        db.add(message)
        db.flush()
        return message

    return _make


@pytest.fixture
def make_kb_entry(db, company):
    def _make(title, content, created_at=None, assign_to=None):
        entry = KnowledgeBaseEntry(
            company_id=company.id,
            title=title,
            content=content,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(entry)
        db.flush()
        if assign_to is not None:
            db.add(ChannelKBAssignment(channel_id=assign_to.id, entry_id=entry.id))
            db.flush()
        return entry

    return _make


@pytest.fixture
def make_agent_template(db, company):
    def _make(profile_data, name="Receptionist"):
        agent = Agent(company_id=company.id, name=name, profile_data=profile_data)
        db.add(agent)
        db.flush()
        return agent

    return _make


@pytest.fixture
def provider():
    provider = Mock()
    provider.complete.return_value = LLMResponse(
        content=[{"type": "text", "text": "Hi Lena, we open at 9."}],
        model="claude-sonnet-4-20250514",
    )
    return provider


@pytest.fixture
def gateway():
    gateway = Mock()
    gateway.send_text.return_value = SendResult(external_id="wamid.out-1")
    return gateway
