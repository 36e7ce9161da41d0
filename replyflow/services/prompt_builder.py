"""System prompt construction for the reply agent.

``build_system_prompt`` is pure and its section order is fixed:
identity, communication style, response guidelines, greeting, knowledge
base, channel instructions, core rules. Sections without content are
left out entirely.
"""

from typing import Iterable, Optional

from replyflow.schemas.agent import AgentProfile, ChannelOverrides

GENERIC_IDENTITY = (
    "You are a helpful AI assistant managing WhatsApp conversations. Respond professionally and concisely."
)

TONE_DESCRIPTIONS = {
    "professional": "Maintain a professional, polished tone. Be respectful and business-appropriate.",
    "friendly": "Be warm, approachable, and personable. Use a conversational but helpful tone.",
    "casual": "Keep things relaxed and informal. Use everyday language and be easygoing.",
    "formal": "Use formal language and proper etiquette. Be courteous and dignified.",
}

LENGTH_DESCRIPTIONS = {
    "concise": "Keep responses short and to the point. Aim for 1-3 sentences when possible.",
    "moderate": "Provide clear, balanced responses. Use enough detail to be helpful without being verbose.",
    "detailed": "Give thorough, comprehensive responses. Include relevant details and explanations.",
}

KNOWLEDGE_BASE_INTRO = (
    "Use the following reference information to answer questions accurately. "
    "If a question isn't covered by this information, say so honestly."
)

CORE_RULES = """## Core Rules
- You are chatting via WhatsApp. Keep messages appropriate for mobile messaging.
- Never reveal that you are an AI unless directly asked.
- If you don't know the answer to something, be honest about it rather than making up information.
- Never share sensitive business information like internal processes, pricing strategies, or employee details unless explicitly covered in the knowledge base.
- If a conversation requires human attention (complaints, complex issues, urgent matters), politely let the customer know that a team member will follow up."""

SECTION_SEPARATOR = "\n\n"
KB_ENTRY_SEPARATOR = "\n\n---\n\n"


def _business_identity(profile: AgentProfile) -> str:
    name = profile.business_name or "the business"
    sections = [
        f"You are an AI assistant for {name}. You help manage WhatsApp conversations on behalf of this business."
    ]
    if profile.business_description:
        sections.append(f"## About the Business\n{profile.business_description}")
    if profile.business_type:
        sections.append(f"## Industry\nThis is a {profile.business_type} business.")
    if profile.target_audience:
        sections.append(f"## Target Audience\n{profile.target_audience}")
    return SECTION_SEPARATOR.join(sections)


def _personal_identity(profile: AgentProfile) -> str:
    sections = ["You are a personal AI assistant managing WhatsApp conversations."]
    if profile.business_description:
        sections.append(f"## Context\n{profile.business_description}")
    return SECTION_SEPARATOR.join(sections)


def _organization_identity(profile: AgentProfile) -> str:
    name = profile.business_name or "the organization"
    sections = [
        f"You are an AI assistant for {name}. You help manage WhatsApp conversations on behalf of this organization."
    ]
    if profile.business_description:
        sections.append(f"## About the Organization\n{profile.business_description}")
    if profile.target_audience:
        sections.append(f"## Audience\n{profile.target_audience}")
    return SECTION_SEPARATOR.join(sections)


IDENTITY_BUILDERS = {
    "business": _business_identity,
    "personal": _personal_identity,
    "organization": _organization_identity,
}


def build_identity(profile: AgentProfile) -> str:
    builder = IDENTITY_BUILDERS.get(profile.use_case or "")
    if builder is None:
        return GENERIC_IDENTITY
    return builder(profile)


def build_style(profile: AgentProfile) -> Optional[str]:
    rules = []
    if profile.tone in TONE_DESCRIPTIONS:
        rules.append(TONE_DESCRIPTIONS[profile.tone])
    if profile.response_length in LENGTH_DESCRIPTIONS:
        rules.append(LENGTH_DESCRIPTIONS[profile.response_length])
    if profile.language_preference:
        if profile.language_preference == "match_customer":
            rules.append("Always respond in the same language the customer uses.")
        else:
            rules.append(f"Respond in {profile.language_preference}.")
    if not rules:
        return None
    return "## Communication Style\n" + "\n".join(rules)


def build_knowledge_section(kb_entries) -> Optional[str]:
    rendered = [f"### {entry.title}\n{entry.content}" for entry in kb_entries]
    if not rendered:
        return None
    return f"## Knowledge Base\n{KNOWLEDGE_BASE_INTRO}\n\n{KB_ENTRY_SEPARATOR.join(rendered)}"


def build_system_prompt(
    profile: AgentProfile,
    kb_entries: Iterable = (),
    overrides: Optional[ChannelOverrides] = None,
) -> str:
    """Render the system prompt.

    Args:
        profile: Effective agent profile (template profile when one is assigned).
        kb_entries: Visible knowledge entries, anything with ``title`` and ``content``.
        overrides: Channel-level custom instructions and greeting override.
    """
    overrides = overrides or ChannelOverrides()
    parts = [build_identity(profile)]

    style = build_style(profile)
    if style:
        parts.append(style)

    if profile.response_rules:
        parts.append(f"## Response Guidelines\n{profile.response_rules}")

    greeting = overrides.greeting_override or profile.greeting_message
    if greeting:
        parts.append(
            "## First Contact Greeting\n"
            f'When this is the first message from a new contact, greet them with: "{greeting}"'
        )

    knowledge = build_knowledge_section(kb_entries)
    if knowledge:
        parts.append(knowledge)

    if overrides.custom_instructions:
        parts.append(f"## Channel-Specific Instructions\n{overrides.custom_instructions}")

    parts.append(CORE_RULES)
    return SECTION_SEPARATOR.join(parts)
