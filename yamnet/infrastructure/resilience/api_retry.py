"""Retry-execution engine: drives the Transport through a bounded retry loop.

Delays are chosen from the status of the previous response:
- 401 on the first attempt: near-immediate retry (auth-scheme negotiation
  takes two round trips, the first legitimately answers 401).
- 429: fixed cooldown of the base delay; a RateLimitObserved event is emitted.
- Any other non-success status: base delay.

Network-level faults are never retried: name resolution failures classify as
NETWORK_UNAVAILABLE, everything else as UNKNOWN with the original cause.
When attempts run out, the last non-success response is handed back so the
response handler classifies it by status code.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from yamnet.domain.events.api_events import (
    DomainEvent, EventSink, RateLimitObserved, RequestAttempted,
    RequestFailed, RequestSucceeded, RetryScheduled,
)
from yamnet.domain.interfaces.transport import Transport, TransportResponse
from yamnet.domain.models.common import HttpRequest, RetryPolicy
from yamnet.domain.models.envelope import ErrorInfo, ErrorKind
from yamnet.domain.models.errors import NameResolutionFault, NetworkFault

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

UNAUTHORIZED = 401
TOO_MANY_REQUESTS = 429


class OperationCancelled(Exception):
    """Raised internally when the caller's cancel event fires."""


@dataclass
class RetryOutcome:
    """Terminal result of the retry loop: a response or a classified failure."""
    attempts: int
    response: Optional[TransportResponse] = None
    failure: Optional[ErrorInfo] = None


class RetryExecutionEngine:
    """Executes one logical request with status-aware retries."""

    def __init__(
        self,
        transport: Transport,
        policy: Optional[RetryPolicy] = None,
        event_sink: Optional[EventSink] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initializes the engine.

        Args:
            transport: Shared transport used for every attempt.
            policy: Retry constants (5 attempts, 10s base delay by default).
            event_sink: Optional callable receiving domain events.
            sleep: Coroutine function used for inter-attempt delays.
        """
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.event_sink = event_sink
        self._sleep = sleep
        logger.info(
            f"RetryExecutionEngine initialized: max_attempts={self.policy.max_attempts}, "
            f"base_delay={self.policy.base_delay}s, "
            f"first_401_delay={self.policy.first_unauthorized_retry_delay}s"
        )

    def compute_delay(self, status_code: int, attempt: int) -> float:
        """Delay to wait after `attempt` (1-based) returned `status_code`."""
        if status_code == UNAUTHORIZED and attempt <= 1:
            return self.policy.first_unauthorized_retry_delay
        return self.policy.base_delay

    async def execute(
        self,
        request: HttpRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RetryOutcome:
        """Runs the retry loop for one request. Never raises for request failures.

        Args:
            request: The assembled request, re-sent unchanged on each attempt.
            cancel_event: When set, the in-flight call or delay is abandoned
                and the outcome carries a CANCELLED failure.

        Returns:
            RetryOutcome holding either the terminal response (success, or the
            last non-success once attempts are exhausted) or a failure.
        """
        target = request.describe()
        attempt = 0
        response: Optional[TransportResponse] = None

        while attempt < self.policy.max_attempts:
            attempt += 1
            self._dispatch(RequestAttempted(method=request.method, url=request.url, attempt_number=attempt))
            logger.debug(f"{target}: attempt {attempt}/{self.policy.max_attempts}")
            start_time = time.perf_counter()

            try:
                response = await self._race(self.transport.send(request), cancel_event)
            except OperationCancelled:
                return self._fail(request, attempt, ErrorInfo(
                    kind=ErrorKind.CANCELLED,
                    message=f"Request cancelled by caller during attempt {attempt}",
                ))
            except NameResolutionFault as e:
                logger.error(f"{target}: endpoint unreachable (name resolution failed): {e}")
                return self._fail(request, attempt, ErrorInfo(
                    kind=ErrorKind.NETWORK_UNAVAILABLE,
                    message=f"Network unavailable: {e}",
                    cause=e,
                ))
            except NetworkFault as e:
                logger.error(f"{target}: non-retryable network fault on attempt {attempt}: {e}")
                return self._fail(request, attempt, ErrorInfo(
                    kind=ErrorKind.UNKNOWN,
                    message=str(e),
                    cause=e,
                ))
            except Exception as e:
                logger.error(f"{target}: unexpected transport error on attempt {attempt}: {e}", exc_info=True)
                return self._fail(request, attempt, ErrorInfo(
                    kind=ErrorKind.UNKNOWN,
                    message=f"Unexpected error: {type(e).__name__}: {e}",
                    cause=e,
                ))

            status = response.status_code
            if response.is_success:
                latency_ms = (time.perf_counter() - start_time) * 1000
                self._dispatch(RequestSucceeded(
                    method=request.method, url=request.url, status_code=status,
                    attempts=attempt, latency_ms=latency_ms,
                ))
                return RetryOutcome(attempts=attempt, response=response)

            if status == TOO_MANY_REQUESTS:
                logger.warning(f"{target}: rate limit exceeded (HTTP 429) on attempt {attempt}")
                self._dispatch(RateLimitObserved(method=request.method, url=request.url, attempt_number=attempt))

            if attempt >= self.policy.max_attempts:
                break

            delay = self.compute_delay(status, attempt)
            # Per-attempt cleanup: this response will never reach the handler.
            await response.release()
            response = None
            logger.warning(
                f"{target}: HTTP {status} on attempt {attempt}/{self.policy.max_attempts}. "
                f"Retrying in {delay:.3f}s..."
            )
            self._dispatch(RetryScheduled(
                method=request.method, url=request.url, attempt_number=attempt,
                status_code=status, delay_seconds=delay,
            ))
            try:
                await self._race(self._sleep(delay), cancel_event)
            except OperationCancelled:
                return self._fail(request, attempt, ErrorInfo(
                    kind=ErrorKind.CANCELLED,
                    message=f"Request cancelled by caller while waiting to retry after attempt {attempt}",
                ))

        last_status = response.status_code if response is not None else None
        logger.error(f"{target}: max attempts ({self.policy.max_attempts}) reached. Last status: {last_status}")
        # RequestFailed for this path is reported by the caller once the response is classified.
        return RetryOutcome(attempts=attempt, response=response)

    def report_failure(self, request: HttpRequest, failure: ErrorInfo) -> None:
        """Emits RequestFailed for a failure classified after the loop returned."""
        self._dispatch(RequestFailed(
            method=request.method, url=request.url, error_kind=failure.kind.value,
            error_message=failure.message, attempts=failure.attempts or 0,
            status_code=failure.status_code,
        ))

    def _fail(self, request: HttpRequest, attempt: int, failure: ErrorInfo) -> RetryOutcome:
        failure = failure.with_attempts(attempt)
        self.report_failure(request, failure)
        return RetryOutcome(attempts=attempt, failure=failure)

    def _dispatch(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self.event_sink is None:
            return
        try:
            self.event_sink(event)
        except Exception as e:
            # Telemetry must not change the outcome of the request.
            logger.warning(f"Event sink raised {type(e).__name__}: {e}")

    @staticmethod
    async def _race(awaitable: Awaitable[Any], cancel_event: Optional[asyncio.Event]) -> Any:
        """Awaits `awaitable` unless `cancel_event` fires first."""
        if cancel_event is None:
            return await awaitable
        if cancel_event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled()

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not work.done():
                work.cancel()

        if work in done:
            return work.result()

        (result,) = await asyncio.gather(work, return_exceptions=True)
        if isinstance(result, TransportResponse):
            await result.release()
        raise OperationCancelled()
