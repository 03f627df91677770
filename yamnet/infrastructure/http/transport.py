"""Concrete implementation of the Transport interface using httpx.

Hides the specifics of the httpx library: owns one AsyncClient (connection
pool, proxy, credentials, default headers) for the lifetime of a client
instance and translates httpx failures into the domain's NetworkFault types.
"""

import logging
import socket
from typing import Mapping, Optional, Tuple

import httpx

from yamnet.domain.interfaces.transport import Transport, TransportResponse
from yamnet.domain.models.common import AccessToken, HttpRequest
from yamnet.domain.models.errors import NameResolutionFault, NetworkFault

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60.0
USER_AGENT = "yamnet-python"

# Messages the resolver produces on Linux, macOS and Windows when a host is unknown.
_NAME_RESOLUTION_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated with hostname",
    "name resolution",
)


def is_name_resolution_failure(exc: BaseException) -> bool:
    """Walks the exception chain looking for a DNS lookup failure."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        text = str(current).lower()
        if any(marker in text for marker in _NAME_RESOLUTION_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


class HttpxTransportResponse(TransportResponse):
    """Adapter exposing a streamed httpx.Response as a TransportResponse."""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    async def read(self) -> bytes:
        try:
            return await self._response.aread()
        except httpx.TransportError as e:
            raise NetworkFault(f"Failed reading response body: {e}", str(self._response.url)) from e

    async def aclose(self) -> None:
        try:
            await self._response.aclose()
        except httpx.TransportError as e:
            raise NetworkFault(f"Failed releasing response: {e}", str(self._response.url)) from e


class HttpxTransport(Transport):
    """httpx.AsyncClient based transport with bearer-token authorization."""

    def __init__(
        self,
        access_token: AccessToken,
        timeout: float = DEFAULT_TIMEOUT_S,
        proxy: Optional[str] = None,
        credentials: Optional[Tuple[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the underlying httpx client.

        Args:
            access_token: OAuth token sent as 'Authorization: Bearer <token>'.
            timeout: Per-call timeout in seconds.
            proxy: Optional proxy url, e.g. 'http://proxy.local:8080'.
            credentials: Optional (username, password) for basic auth against
                the proxy/endpoint, sent pre-emptively.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
        """
        if not access_token:
            raise ValueError("An access token is required to build the transport")

        auth = httpx.BasicAuth(*credentials) if credentials else None
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {access_token}",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            proxy=proxy,
            auth=auth,
            follow_redirects=True,
            transport=transport,
        )
        self.timeout = timeout
        logger.info(f"HttpxTransport initialized: timeout={timeout}s, proxy={'yes' if proxy else 'no'}")

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def send(self, request: HttpRequest) -> TransportResponse:
        http_request = self._client.build_request(
            request.method,
            request.url,
            params=dict(request.params) or None,
            headers=dict(request.headers),
            content=request.body,
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.TransportError as e:
            if is_name_resolution_failure(e):
                raise NameResolutionFault(f"Cannot resolve host for {request.url}: {e}", request.url) from e
            raise NetworkFault(f"{type(e).__name__} while calling {request.describe()}: {e}", request.url) from e
        return HttpxTransportResponse(response)

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug("HttpxTransport closed.")
