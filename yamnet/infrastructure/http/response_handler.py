"""Converts terminal HTTP responses into Result Envelopes.

Invariants:
    - The response is released (aclose) exactly once, on every path.
    - A success status never yields an empty payload: a body that cannot be
      deserialized becomes an UNKNOWN failure.
    - Non-success statuses are classified by an error-mapping function.
"""

import logging
from typing import Callable, Type, TypeVar

from yamnet.domain.interfaces.serializer import Deserializer
from yamnet.domain.interfaces.transport import TransportResponse
from yamnet.domain.models.envelope import ErrorInfo, ErrorKind, ResultEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorMapper = Callable[[int, bytes, str], ErrorInfo]

MAX_BODY_EXCERPT = 200

STATUS_KIND_MAP = {
    401: ErrorKind.UNAUTHORIZED,
    429: ErrorKind.RATE_LIMITED,
}


def map_response_error(status_code: int, body: bytes, reason: str = "") -> ErrorInfo:
    """Default error mapping: 429 rate limited, 401 unauthorized, else HTTP."""
    kind = STATUS_KIND_MAP.get(status_code, ErrorKind.HTTP)
    excerpt = body.decode("utf-8", errors="replace").strip()
    if len(excerpt) > MAX_BODY_EXCERPT:
        excerpt = excerpt[:MAX_BODY_EXCERPT] + "..."
    message = f"HTTP {status_code}"
    if reason:
        message += f" {reason}"
    if excerpt:
        message += f": {excerpt}"
    return ErrorInfo(kind=kind, message=message, status_code=status_code)


class ResponseHandler:
    """Deserializes success bodies and classifies failure bodies."""

    def __init__(self, deserializer: Deserializer, error_mapper: ErrorMapper = map_response_error):
        self.deserializer = deserializer
        self.error_mapper = error_mapper

    async def handle(self, response: TransportResponse, target_type: Type[T]) -> ResultEnvelope[T]:
        try:
            try:
                body = await response.read()
            except Exception as e:
                logger.error(f"Failed to read response body (HTTP {response.status_code}): {e}")
                return ResultEnvelope.faulted(ErrorInfo(
                    kind=ErrorKind.UNKNOWN,
                    message=f"Failed to read response body: {e}",
                    status_code=response.status_code,
                    cause=e,
                ))

            if not response.is_success:
                failure = self.error_mapper(response.status_code, body, response.reason_phrase)
                logger.debug(f"Classified HTTP {response.status_code} as {failure.kind.value}")
                return ResultEnvelope.faulted(failure)

            try:
                content = self.deserializer.deserialize(body, target_type)
            except Exception as e:
                logger.error(f"Failed to deserialize HTTP {response.status_code} response: {e}")
                return ResultEnvelope.faulted(ErrorInfo(
                    kind=ErrorKind.UNKNOWN,
                    message=f"Failed to deserialize response: {e}",
                    status_code=response.status_code,
                    cause=e,
                ))
            if content is None:
                return ResultEnvelope.faulted(ErrorInfo(
                    kind=ErrorKind.UNKNOWN,
                    message="Response body deserialized to null",
                    status_code=response.status_code,
                ))
            return ResultEnvelope.success(content)
        finally:
            await response.release()
