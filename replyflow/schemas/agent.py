from typing import Optional

from pydantic import BaseModel, ConfigDict


class AgentProfile(BaseModel):
    """Agent persona stored as ``profile_data`` on channels and templates."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    use_case: Optional[str] = None  # business, personal, organization
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_description: Optional[str] = None
    target_audience: Optional[str] = None
    tone: Optional[str] = None  # professional, friendly, casual, formal
    language_preference: Optional[str] = None  # match_customer or a language name
    response_length: Optional[str] = None  # concise, moderate, detailed
    response_rules: Optional[str] = None
    greeting_message: Optional[str] = None


class ChannelOverrides(BaseModel):
    custom_instructions: Optional[str] = None
    greeting_override: Optional[str] = None
