"""The JSON web service client: the caller-facing request API.

Wires the RequestBuilder, RetryExecutionEngine and ResponseHandler around a
shared Transport. Every call returns a ResultEnvelope; nothing is raised to
the caller for request failures.

The client owns its Transport: `aclose()` (or leaving an `async with` block)
releases it exactly once.
"""

import asyncio
import logging
from typing import Any, Optional, Type, TypeVar

from yamnet.domain.events.api_events import EventSink
from yamnet.domain.interfaces.serializer import Deserializer, Serializer
from yamnet.domain.interfaces.transport import Transport
from yamnet.domain.models.common import Endpoint, RetryPolicy
from yamnet.domain.models.envelope import ErrorInfo, ErrorKind, ResultEnvelope
from yamnet.infrastructure.http.request_builder import ParamsLike, RequestBuilder
from yamnet.infrastructure.http.response_handler import ErrorMapper, ResponseHandler, map_response_error
from yamnet.infrastructure.resilience.api_retry import RetryExecutionEngine, Sleeper

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonServiceClient:
    """Executes JSON requests against one API endpoint."""

    def __init__(
        self,
        transport: Transport,
        endpoint: Endpoint,
        serializer: Serializer,
        deserializer: Deserializer,
        policy: Optional[RetryPolicy] = None,
        error_mapper: ErrorMapper = map_response_error,
        event_sink: Optional[EventSink] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.transport = transport
        self.endpoint = endpoint
        self.request_builder = RequestBuilder(endpoint, serializer)
        self.engine = RetryExecutionEngine(transport, policy=policy, event_sink=event_sink, sleep=sleep)
        self.response_handler = ResponseHandler(deserializer, error_mapper)
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def execute(
        self,
        method: str,
        uri: str,
        params: ParamsLike = None,
        body: Optional[Any] = None,
        response_type: Type[T] = dict,  # type: ignore[assignment]
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ResultEnvelope[T]:
        """Executes one logical operation.

        Args:
            method: HTTP method.
            uri: Resource path relative to the endpoint.
            params: Query parameters (mapping or pydantic model).
            body: Request body, serialized with the configured Serializer.
            response_type: Type the success body is deserialized into.
            cancel_event: Caller cancellation signal, honoured while sending
                and while waiting between attempts.
            timeout: Upper bound in seconds for the whole operation, retries
                included.

        Returns:
            A ResultEnvelope with either the payload or the captured failure.
        """
        if self._closed:
            return ResultEnvelope.faulted(ErrorInfo(
                kind=ErrorKind.UNKNOWN,
                message=f"Client is closed; cannot execute {method.upper()} {uri}",
            ))
        try:
            request = self.request_builder.build(method, uri, params=params, body=body)
        except Exception as e:
            logger.error(f"Failed to build request {method.upper()} {uri}: {e}")
            return ResultEnvelope.faulted(ErrorInfo(
                kind=ErrorKind.UNKNOWN,
                message=f"Failed to build request: {e}",
                cause=e,
            ))

        operation = self._run(request, response_type, cancel_event)
        if timeout is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"{request.describe()}: operation timed out after {timeout}s")
            return ResultEnvelope.faulted(ErrorInfo(
                kind=ErrorKind.CANCELLED,
                message=f"Operation timed out after {timeout}s",
                cause=e,
            ))

    async def _run(self, request, response_type, cancel_event) -> ResultEnvelope:
        outcome = await self.engine.execute(request, cancel_event=cancel_event)
        if outcome.failure is not None:
            return ResultEnvelope.faulted(outcome.failure)

        envelope = await self.response_handler.handle(outcome.response, response_type)
        if envelope.failure is not None:
            failure = envelope.failure.with_attempts(outcome.attempts)
            self.engine.report_failure(request, failure)
            return ResultEnvelope.faulted(failure)
        return envelope

    async def get(self, uri: str, params: ParamsLike = None, response_type: Type[T] = dict, **kwargs: Any) -> ResultEnvelope[T]:  # type: ignore[assignment]
        return await self.execute("GET", uri, params=params, response_type=response_type, **kwargs)

    async def post(
        self, uri: str, params: ParamsLike = None, body: Optional[Any] = None,
        response_type: Type[T] = dict, **kwargs: Any,  # type: ignore[assignment]
    ) -> ResultEnvelope[T]:
        return await self.execute("POST", uri, params=params, body=body, response_type=response_type, **kwargs)

    async def put(
        self, uri: str, params: ParamsLike = None, body: Optional[Any] = None,
        response_type: Type[T] = dict, **kwargs: Any,  # type: ignore[assignment]
    ) -> ResultEnvelope[T]:
        return await self.execute("PUT", uri, params=params, body=body, response_type=response_type, **kwargs)

    async def delete(self, uri: str, params: ParamsLike = None, response_type: Type[T] = dict, **kwargs: Any) -> ResultEnvelope[T]:  # type: ignore[assignment]
        return await self.execute("DELETE", uri, params=params, response_type=response_type, **kwargs)

    async def aclose(self) -> None:
        """Releases the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self.transport.aclose()
        logger.info(f"JsonServiceClient for {self.endpoint} closed.")

    async def __aenter__(self) -> "JsonServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
