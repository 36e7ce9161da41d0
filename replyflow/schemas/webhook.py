from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidatorFunctionWrapHandler, field_validator


class _Media(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    mime_type: Optional[str] = None
    link: Optional[str] = None


class WhapiText(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    body: Optional[str] = None


class WhapiImage(_Media):
    caption: Optional[str] = None


class WhapiVideo(_Media):
    caption: Optional[str] = None


class WhapiDocument(_Media):
    filename: Optional[str] = None


class WhapiAudio(_Media):
    pass


class WhapiIncomingMessage(BaseModel):
    """A single message as delivered by the Whapi gateway.

    Every field is optional and a value of the wrong shape is dropped to
    None: malformed payloads are degraded by the normalizer, never
    rejected here.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    chat_id: Optional[str] = None
    from_me: Optional[bool] = False
    from_name: Optional[str] = None
    timestamp: Union[int, float, str, None] = None
    type: Optional[str] = None
    text: Optional[WhapiText] = None
    image: Optional[WhapiImage] = None
    video: Optional[WhapiVideo] = None
    document: Optional[WhapiDocument] = None
    audio: Optional[WhapiAudio] = None

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_malformed(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class WhapiStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[str] = None
    status: Optional[str] = None
    timestamp: Union[int, float, str, None] = None
    chat_id: Optional[str] = None

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_malformed(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class WhapiWebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: List[WhapiIncomingMessage] = Field(default_factory=list)
    statuses: List[WhapiStatusUpdate] = Field(default_factory=list)

    @field_validator("messages", "statuses", mode="before")
    @classmethod
    def keep_objects(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class WebhookResponse(BaseModel):
    status: str = "ok"
    processed: int = 0
    duplicates: int = 0
    skipped: int = 0
