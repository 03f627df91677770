"""YammerClient: the SDK facade.

Owns one JsonServiceClient (and through it the Transport) for its whole
lifetime and exposes the endpoint clients. Close it explicitly with
`aclose()` or use it as an async context manager.
"""

import asyncio
import logging
from typing import Any, Optional, Tuple

import httpx

from yamnet.core.services.group_client import GroupClient
from yamnet.core.services.message_client import MessageClient
from yamnet.core.services.user_client import UserClient
from yamnet.domain.events.api_events import EventSink
from yamnet.domain.models.common import AccessToken, DEFAULT_ENDPOINT, Endpoint, RetryPolicy
from yamnet.infrastructure.http.service_client import JsonServiceClient
from yamnet.infrastructure.http.transport import DEFAULT_TIMEOUT_S, HttpxTransport
from yamnet.infrastructure.resilience.api_retry import Sleeper
from yamnet.infrastructure.serialization.json_serializer import JsonSerializer

logger = logging.getLogger(__name__)


class YammerClient:
    """Entry point of the SDK."""

    def __init__(
        self,
        access_token: AccessToken,
        endpoint: Endpoint = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_S,
        proxy: Optional[str] = None,
        credentials: Optional[Tuple[str, str]] = None,
        policy: Optional[RetryPolicy] = None,
        event_sink: Optional[EventSink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Builds the transport, serializer and service client.

        Args:
            access_token: OAuth bearer token.
            endpoint: API base url.
            timeout: Per-call transport timeout in seconds.
            proxy: Optional proxy url.
            credentials: Optional (username, password) basic credentials.
            policy: Retry policy; defaults to 5 attempts / 10s base delay.
            event_sink: Optional receiver for request telemetry events.
            transport: Optional httpx transport override (tests).
            sleep: Delay coroutine used between attempts.
        """
        serializer = JsonSerializer()
        self.service_client = JsonServiceClient(
            transport=HttpxTransport(
                access_token,
                timeout=timeout,
                proxy=proxy,
                credentials=credentials,
                transport=transport,
            ),
            endpoint=endpoint,
            serializer=serializer,
            deserializer=serializer,
            policy=policy,
            event_sink=event_sink,
            sleep=sleep,
        )
        self.messages = MessageClient(self.service_client)
        self.groups = GroupClient(self.service_client)
        self.users = UserClient(self.service_client)
        logger.info(f"YammerClient initialized for endpoint {endpoint}")

    async def aclose(self) -> None:
        await self.service_client.aclose()

    async def __aenter__(self) -> "YammerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
