"""Domain Events related to request execution and resilience.

Emitted by the retry-execution engine to an optional event sink so callers
can collect telemetry (attempts, scheduled retries, rate-limit hits).
"""

from dataclasses import dataclass, field
import time
from typing import Callable, Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


EventSink = Callable[[DomainEvent], None]

# --- Specific API Events ---

@dataclass
class RequestAttempted(DomainEvent):
    """Event triggered right before a physical attempt is sent."""
    method: str
    url: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when an attempt returns a success status."""
    method: str
    url: str
    status_code: int
    attempts: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when an operation fails definitively."""
    method: str
    url: str
    error_kind: str
    error_message: str
    attempts: int
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class RateLimitObserved(DomainEvent):
    """Event triggered when the API answers 429 Too Many Requests."""
    method: str
    url: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled after a non-success status."""
    method: str
    url: str
    attempt_number: int
    status_code: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)
