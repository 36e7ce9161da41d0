from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from replyflow.exceptions import CompletionError, GatewayError

T = TypeVar("T")

EXCEPTION_CODES = (
    (CompletionError, "completion_failed"),
    (GatewayError, "gateway_failed"),
)


@dataclass
class Result(Generic[T]):
    """Outcome of a reply job step; failures are recorded on the job, not raised."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(ok=True, value=value)

    @staticmethod
    def failure(error: str, code: str = "unknown") -> "Result[T]":
        return Result(ok=False, error=error, error_code=code)

    @staticmethod
    def from_exception(exc: BaseException, code: str = "unknown") -> "Result[T]":
        """Collaborator errors get their own code and carry the HTTP status."""
        for exc_type, exc_code in EXCEPTION_CODES:
            if isinstance(exc, exc_type):
                code = exc_code
                break
        error = f"{type(exc).__name__}: {exc}"
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            error = f"{error} (HTTP {status_code})"
        return Result.failure(error, code)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default
