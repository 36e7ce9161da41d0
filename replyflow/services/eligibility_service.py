"""Decides whether an automated reply may be sent for a conversation.

The decision logic is pure: ``evaluate_gate`` and ``build_agent_context``
only look at rows that were already fetched. ``resolve_eligibility`` is
the datastore adapter that fetches those rows and persists the lazy
human-takeover expiry.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple, Union
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.orm import Session

from replyflow.config import settings
from replyflow.logging_config import get_logger
from replyflow.models import Agent, ChannelAgentSettings, Company
from replyflow.models.channel_agent_settings import SCHEDULE_ALWAYS_ON
from replyflow.schemas.agent import AgentProfile, ChannelOverrides
from replyflow.services.clock import ensure_utc, utcnow
from replyflow.services.conversation_service import get_conversation
from replyflow.services.knowledge_service import get_visible_entries
from replyflow.services.message_service import DIRECTION_INBOUND, get_recent_messages
from replyflow.services.prompt_builder import build_system_prompt
from replyflow.services.schedule_service import in_schedule, schedule_for_mode

logger = get_logger("eligibility")

SKIP_CONVERSATION_NOT_FOUND = "conversation_not_found"
SKIP_NO_CHANNEL = "no_channel"
SKIP_AGENT_NOT_CONFIGURED = "agent_not_configured"
SKIP_AGENT_DISABLED = "agent_disabled"
SKIP_HUMAN_TAKEOVER = "human_takeover"
SKIP_OUTSIDE_HOURS = "outside_hours"


@dataclass(frozen=True)
class AgentContext:
    session_id: UUID
    channel_id: int
    system_prompt: str
    max_tokens: int
    messages: Tuple[dict, ...]


@dataclass(frozen=True)
class Respond:
    context: AgentContext


@dataclass(frozen=True)
class OutsideHours:
    session_id: UUID
    channel_id: int
    message: str


@dataclass(frozen=True)
class Skip:
    reason: str


Decision = Union[Respond, OutsideHours, Skip]


@dataclass(frozen=True)
class GateResult:
    decision: Optional[Union[OutsideHours, Skip]] = None  # None: continue to context assembly
    resume_takeover: bool = False


def takeover_expired(auto_resume_at: Optional[datetime], now: datetime) -> bool:
    resume_at = ensure_utc(auto_resume_at)
    return resume_at is not None and resume_at <= ensure_utc(now)


def evaluate_gate(conversation, agent_settings, timezone_name: Optional[str], now: datetime) -> GateResult:
    """Channel, enablement, takeover and schedule checks, in that order."""
    if conversation is None:
        return GateResult(Skip(SKIP_CONVERSATION_NOT_FOUND))
    if conversation.channel_id is None:
        return GateResult(Skip(SKIP_NO_CHANNEL))
    if agent_settings is None:
        return GateResult(Skip(SKIP_AGENT_NOT_CONFIGURED))
    if not agent_settings.is_enabled:
        return GateResult(Skip(SKIP_AGENT_DISABLED))

    resume_takeover = False
    if conversation.human_takeover:
        if not takeover_expired(conversation.auto_resume_at, now):
            return GateResult(Skip(SKIP_HUMAN_TAKEOVER))
        resume_takeover = True

    schedule_mode = agent_settings.schedule_mode or SCHEDULE_ALWAYS_ON
    if schedule_mode != SCHEDULE_ALWAYS_ON:
        schedule = schedule_for_mode(schedule_mode, agent_settings.business_hours, agent_settings.ai_schedule)
        if not in_schedule(schedule, timezone_name, now):
            if agent_settings.outside_hours_message:
                decision = OutsideHours(
                    session_id=conversation.id,
                    channel_id=conversation.channel_id,
                    message=agent_settings.outside_hours_message,
                )
            else:
                decision = Skip(SKIP_OUTSIDE_HOURS)
            return GateResult(decision, resume_takeover)

    return GateResult(None, resume_takeover)


def effective_profile(agent_settings, template) -> AgentProfile:
    """Template profile replaces the channel's own profile; no merging."""
    profile_data = template.profile_data if template is not None else agent_settings.profile_data
    if not isinstance(profile_data, dict):
        profile_data = {}
    try:
        return AgentProfile.model_validate(profile_data)
    except ValidationError as exc:
        invalid = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
        logger.warning(
            "Dropping invalid agent profile fields",
            extra={"context": {"fields": sorted(invalid)}},
        )
        return AgentProfile.model_validate({k: v for k, v in profile_data.items() if k not in invalid})


def history_to_messages(recent_first: Iterable) -> Tuple[dict, ...]:
    chronological = list(recent_first)[::-1]
    return tuple(
        {
            "role": "user" if message.direction == DIRECTION_INBOUND else "assistant",
            "content": message.message_body or "",
        }
        for message in chronological
    )


def build_agent_context(
    session_id: UUID,
    channel_id: int,
    agent_settings,
    template,
    kb_entries: Iterable,
    history: Iterable,
    default_max_tokens: int = 500,
) -> AgentContext:
    overrides = ChannelOverrides(
        custom_instructions=agent_settings.custom_instructions,
        greeting_override=agent_settings.greeting_override,
    )
    system_prompt = build_system_prompt(effective_profile(agent_settings, template), list(kb_entries), overrides)
    return AgentContext(
        session_id=session_id,
        channel_id=channel_id,
        system_prompt=system_prompt,
        max_tokens=agent_settings.max_tokens or default_max_tokens,
        messages=history_to_messages(history),
    )


def resolve_eligibility(
    db: Session,
    company_id: UUID,
    session_id: UUID,
    now: Optional[datetime] = None,
) -> Decision:
    now = now or utcnow()
    conversation = get_conversation(db, company_id, session_id)

    agent_settings = None
    if conversation is not None and conversation.channel_id is not None:
        agent_settings = (
            db.query(ChannelAgentSettings)
            .filter(
                ChannelAgentSettings.channel_id == conversation.channel_id,
                ChannelAgentSettings.company_id == company_id,
            )
            .first()
        )

    company = db.get(Company, company_id)
    timezone_name = company.timezone if company else None

    gate = evaluate_gate(conversation, agent_settings, timezone_name, now)

    if gate.resume_takeover:
        conversation.human_takeover = False
        conversation.auto_resume_at = None
        db.flush()
        logger.info("Human takeover expired, AI resumed", extra={"context": {"session_id": str(session_id)}})

    if gate.decision is not None:
        return gate.decision

    template = None
    if agent_settings.agent_id is not None:
        template = db.get(Agent, agent_settings.agent_id)
        if template is None:
            logger.warning(
                "Agent template not found, using channel profile",
                extra={"context": {"agent_id": str(agent_settings.agent_id), "channel_id": conversation.channel_id}},
            )

    kb_entries = get_visible_entries(db, company_id, conversation.channel_id)
    history = get_recent_messages(db, session_id, limit=settings.history_limit)

    context = build_agent_context(
        session_id=conversation.id,
        channel_id=conversation.channel_id,
        agent_settings=agent_settings,
        template=template,
        kb_entries=kb_entries,
        history=history,
        default_max_tokens=settings.default_max_tokens,
    )
    return Respond(context)
