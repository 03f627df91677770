"""Defines common Value Objects used across the SDK.

These objects represent simple values like endpoints, ids and the retry
policy, ensuring consistency and type safety.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, NewType, Optional

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
AccessToken = NewType("AccessToken", str)      # OAuth bearer token
Endpoint = NewType("Endpoint", str)            # Base API url, e.g. https://www.yammer.com/api/v1
HttpMethod = NewType("HttpMethod", str)        # 'GET', 'POST', 'PUT', 'DELETE'

# === Resource identifiers ===
MessageId = NewType("MessageId", int)
GroupId = NewType("GroupId", int)
UserId = NewType("UserId", int)

DEFAULT_ENDPOINT = Endpoint("https://www.yammer.com/api/v1")

QueryParams = Dict[str, Any]

SUCCESS_STATUS_RANGE = range(200, 300)


def is_success_status(status_code: int) -> bool:
    """True for 2xx status codes."""
    return status_code in SUCCESS_STATUS_RANGE


# --- Retry Policy ---

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY_S = 10.0
DEFAULT_FIRST_UNAUTHORIZED_RETRY_DELAY_S = 0.001


@dataclass(frozen=True)
class RetryPolicy:
    """Value Object representing the retry/backoff configuration.

    Attributes:
        max_attempts: Total number of physical attempts for one logical operation.
        base_delay: Delay in seconds between attempts.
        first_unauthorized_retry_delay: Delay in seconds after a 401 on the
            first attempt (auth-scheme negotiation round trip).
    """
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY_S
    first_unauthorized_retry_delay: float = DEFAULT_FIRST_UNAUTHORIZED_RETRY_DELAY_S

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.first_unauthorized_retry_delay < 0:
            raise ValueError("Retry delays must be non-negative")


# --- Transport-ready request ---

@dataclass(frozen=True)
class HttpRequest:
    """A fully assembled request, ready to be handed to a Transport."""
    method: HttpMethod
    url: str
    params: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def describe(self) -> str:
        """Short form used in log lines (no headers, no body)."""
        return f"{self.method} {self.url}"
