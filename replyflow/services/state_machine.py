from enum import Enum
from typing import Optional


class ConversationStatus(str, Enum):
    OPEN = "open"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


VALID_TRANSITIONS = {
    ConversationStatus.OPEN: [ConversationStatus.PENDING, ConversationStatus.RESOLVED, ConversationStatus.CLOSED],
    ConversationStatus.PENDING: [ConversationStatus.OPEN, ConversationStatus.RESOLVED, ConversationStatus.CLOSED],
    ConversationStatus.RESOLVED: [ConversationStatus.OPEN, ConversationStatus.CLOSED],
    ConversationStatus.CLOSED: [ConversationStatus.OPEN],
}

REOPENABLE = (ConversationStatus.RESOLVED, ConversationStatus.CLOSED)


class InvalidTransitionError(Exception):
    def __init__(self, from_status: ConversationStatus, to_status: ConversationStatus):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition: {from_status.value} -> {to_status.value}")


def parse_status(value: Optional[str]) -> Optional[ConversationStatus]:
    try:
        return ConversationStatus(value)
    except ValueError:
        return None


def can_transition(from_status: ConversationStatus, to_status: ConversationStatus) -> bool:
    """Check if transition is valid."""
    allowed = VALID_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def transition(from_status: ConversationStatus, to_status: ConversationStatus) -> ConversationStatus:
    """Perform status transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status, to_status)
    return to_status


def reopen_for_inbound(current: Optional[str]) -> str:
    """Status a conversation takes when an inbound message arrives.

    Resolved and closed conversations reopen unconditionally; any other
    status (including unknown values) is left as it is.
    """
    status = parse_status(current)
    if status in REOPENABLE:
        return transition(status, ConversationStatus.OPEN).value
    return current or ConversationStatus.OPEN.value
