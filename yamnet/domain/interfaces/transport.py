"""Interface for the HTTP Transport.

Defines the contract for performing a single HTTP exchange. Implementations
own connection pooling, proxying, credentials and TLS; they are long-lived
and shared by every operation of a client instance, so they must be safe for
concurrent use.
"""

import abc
import logging
from typing import Mapping

from ..models.common import HttpRequest, is_success_status

logger = logging.getLogger(__name__)


class TransportResponse(abc.ABC):
    """A raw HTTP response whose body has not been consumed yet."""

    @property
    @abc.abstractmethod
    def status_code(self) -> int:
        pass

    @property
    @abc.abstractmethod
    def headers(self) -> Mapping[str, str]:
        pass

    @property
    def reason_phrase(self) -> str:
        return ""

    @property
    def is_success(self) -> bool:
        return is_success_status(self.status_code)

    @abc.abstractmethod
    async def read(self) -> bytes:
        """Reads the full response body."""
        pass

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Releases the body stream and returns the connection to the pool."""
        pass

    async def release(self) -> None:
        """aclose() that logs instead of raising; used once the outcome is decided."""
        try:
            await self.aclose()
        except Exception as e:
            logger.warning(f"Failed to release HTTP {self.status_code} response: {type(e).__name__}: {e}")


class Transport(abc.ABC):
    """Abstract Base Class for HTTP exchanges."""

    @abc.abstractmethod
    async def send(self, request: HttpRequest) -> TransportResponse:
        """Sends one request and returns the raw response.

        Args:
            request: The fully assembled request.

        Returns:
            The response, whatever its status code. The caller owns it and
            must call aclose() on it.

        Raises:
            NameResolutionFault: If the endpoint host cannot be resolved.
            NetworkFault: For any other network-level failure (connect error,
                timeout, protocol error).
        """
        pass

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Releases pooled connections. The transport is unusable afterwards."""
        pass
