from replyflow.schemas.agent import AgentProfile, ChannelOverrides
from replyflow.schemas.conversation import PauseRequest, TakeoverResponse
from replyflow.schemas.webhook import WebhookResponse, WhapiIncomingMessage, WhapiWebhookPayload

__all__ = [
    "AgentProfile",
    "ChannelOverrides",
    "PauseRequest",
    "TakeoverResponse",
    "WebhookResponse",
    "WhapiIncomingMessage",
    "WhapiWebhookPayload",
]
