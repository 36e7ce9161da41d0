from replyflow.services.result import Result
from replyflow.services.state_machine import (
    ConversationStatus,
    InvalidTransitionError,
    can_transition,
    reopen_for_inbound,
    transition,
)

__all__ = [
    "Result",
    "ConversationStatus",
    "InvalidTransitionError",
    "can_transition",
    "reopen_for_inbound",
    "transition",
]
