from types import SimpleNamespace

from replyflow.schemas.agent import AgentProfile, ChannelOverrides
from replyflow.services.prompt_builder import CORE_RULES, GENERIC_IDENTITY, build_system_prompt


def _entry(title, content):
    return SimpleNamespace(title=title, content=content)


FULL_PROFILE = AgentProfile(
    use_case="business",
    business_name="Acme Dental",
    business_type="dental clinic",
    business_description="Family dentistry in Berlin Mitte.",
    target_audience="Families and students",
    tone="friendly",
    response_length="concise",
    language_preference="match_customer",
    response_rules="Never quote prices for implants.",
    greeting_message="Welcome to Acme Dental!",
)


class TestIdentity:
    def test_unset_use_case_uses_generic_sentence(self):
        prompt = build_system_prompt(AgentProfile())
        assert prompt == f"{GENERIC_IDENTITY}\n\n{CORE_RULES}"

    def test_business_identity(self):
        prompt = build_system_prompt(FULL_PROFILE)
        assert prompt.startswith(
            "You are an AI assistant for Acme Dental. "
            "You help manage WhatsApp conversations on behalf of this business."
        )
        assert "## About the Business\nFamily dentistry in Berlin Mitte." in prompt
        assert "## Industry\nThis is a dental clinic business." in prompt
        assert "## Target Audience\nFamilies and students" in prompt

    def test_business_without_name(self):
        assert "AI assistant for the business." in build_system_prompt(AgentProfile(use_case="business"))

    def test_personal_identity(self):
        prompt = build_system_prompt(AgentProfile(use_case="personal", business_description="Freelance designer"))
        assert prompt.startswith("You are a personal AI assistant managing WhatsApp conversations.\n\n## Context\n")

    def test_organization_identity(self):
        prompt = build_system_prompt(AgentProfile(use_case="organization", target_audience="Members"))
        assert "AI assistant for the organization." in prompt
        assert "## Audience\nMembers" in prompt


class TestSections:
    def test_section_order(self):
        prompt = build_system_prompt(
            FULL_PROFILE,
            [_entry("Hours", "Mon-Fri 9-17")],
            ChannelOverrides(custom_instructions="Mention the parking garage."),
        )
        headers = [
            "## Communication Style",
            "## Response Guidelines",
            "## First Contact Greeting",
            "## Knowledge Base",
            "## Channel-Specific Instructions",
            "## Core Rules",
        ]
        positions = [prompt.index(header) for header in headers]
        assert positions == sorted(positions)
        assert prompt.endswith(CORE_RULES)

    def test_style_lines(self):
        prompt = build_system_prompt(FULL_PROFILE)
        assert (
            "## Communication Style\n"
            "Be warm, approachable, and personable. Use a conversational but helpful tone.\n"
            "Keep responses short and to the point. Aim for 1-3 sentences when possible.\n"
            "Always respond in the same language the customer uses."
        ) in prompt

    def test_explicit_language(self):
        prompt = build_system_prompt(AgentProfile(language_preference="German"))
        assert "Respond in German." in prompt

    def test_no_stray_headers(self):
        prompt = build_system_prompt(AgentProfile(tone="sarcastic"))
        assert "## Communication Style" not in prompt
        assert "## Knowledge Base" not in prompt
        assert "## First Contact Greeting" not in prompt

    def test_greeting_override_wins(self):
        prompt = build_system_prompt(FULL_PROFILE, overrides=ChannelOverrides(greeting_override="Hi there!"))
        assert 'greet them with: "Hi there!"' in prompt
        assert "Welcome to Acme Dental!" not in prompt


class TestKnowledgeBase:
    def test_entries_separated_by_rule(self):
        prompt = build_system_prompt(AgentProfile(), [_entry("Hours", "9-17"), _entry("Parking", "Garage B")])
        assert "### Hours\n9-17\n\n---\n\n### Parking\nGarage B" in prompt

    def test_deterministic(self):
        entries = [_entry("Hours", "9-17")]
        assert build_system_prompt(FULL_PROFILE, entries) == build_system_prompt(FULL_PROFILE, entries)

    def test_adding_entry_appends_one_subsection(self):
        before = build_system_prompt(FULL_PROFILE, [_entry("Hours", "9-17")])
        after = build_system_prompt(FULL_PROFILE, [_entry("Hours", "9-17"), _entry("Parking", "Garage B")])

        assert after.count("### ") == before.count("### ") + 1
        assert after.replace("\n\n---\n\n### Parking\nGarage B", "") == before
