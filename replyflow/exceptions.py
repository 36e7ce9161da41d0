from typing import Optional


class ReplyFlowError(Exception):
    """Base class for errors raised by Reply Flow collaborators."""


class CompletionError(ReplyFlowError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class GatewayError(ReplyFlowError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
