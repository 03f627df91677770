"""The Result Envelope: the uniform value returned by every SDK operation.

An envelope holds either the deserialized payload or the captured failure,
never both. Callers inspect `is_faulted` or call `unwrap()`, which raises the
captured failure instead of handing back an empty payload.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from .errors import ApiError

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a terminal operation failure."""
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    NETWORK_UNAVAILABLE = "network_unavailable"
    HTTP = "http"
    UNKNOWN = "unknown"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ErrorInfo:
    """Immutable description of why an operation failed."""
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    cause: Optional[BaseException] = None
    attempts: Optional[int] = None

    def describe(self) -> str:
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        return f"{self.kind.value}{status}: {self.message}"

    def with_attempts(self, attempts: int) -> "ErrorInfo":
        return ErrorInfo(
            kind=self.kind,
            message=self.message,
            status_code=self.status_code,
            cause=self.cause,
            attempts=attempts,
        )


@dataclass(frozen=True)
class ResultEnvelope(Generic[T]):
    """Success payload or captured failure for one logical operation."""
    content: Optional[T] = None
    failure: Optional[ErrorInfo] = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.failure is None):
            raise ValueError("ResultEnvelope requires exactly one of content or failure")

    @classmethod
    def success(cls, content: T) -> "ResultEnvelope[T]":
        return cls(content=content)

    @classmethod
    def faulted(cls, failure: ErrorInfo) -> "ResultEnvelope[T]":
        return cls(failure=failure)

    @property
    def is_faulted(self) -> bool:
        return self.failure is not None

    def unwrap(self) -> T:
        """Returns the payload, or raises the captured failure as ApiError.

        Raises:
            ApiError: If the operation failed. The original fault, when there
                is one, is chained as ``__cause__``.
        """
        if self.failure is not None:
            raise ApiError(self.failure) from self.failure.cause
        return self.content  # type: ignore[return-value]
