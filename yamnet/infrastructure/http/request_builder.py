"""Assembles transport-ready requests from logical operations."""

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel

from yamnet.domain.interfaces.serializer import Serializer
from yamnet.domain.models.common import Endpoint, HttpMethod, HttpRequest

logger = logging.getLogger(__name__)

ParamsLike = Union[Mapping[str, Any], BaseModel, None]


def encode_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def encode_params(params: ParamsLike) -> Dict[str, str]:
    """Flattens a mapping or pydantic model into query-string pairs, skipping None."""
    if params is None:
        return {}
    if isinstance(params, BaseModel):
        params = params.model_dump(by_alias=True, exclude_none=True)
    return {str(k): encode_query_value(v) for k, v in params.items() if v is not None}


class RequestBuilder:
    """Joins endpoint and uri, encodes parameters and serializes the body."""

    def __init__(self, endpoint: Endpoint, serializer: Serializer):
        self.endpoint = Endpoint(endpoint.rstrip("/"))
        self.serializer = serializer

    def build_url(self, uri: str) -> str:
        if uri.startswith(("http://", "https://")):
            return uri
        if not uri.startswith("/"):
            uri = "/" + uri
        return f"{self.endpoint}{uri}"

    def build(
        self,
        method: str,
        uri: str,
        params: ParamsLike = None,
        body: Optional[Any] = None,
    ) -> HttpRequest:
        """Builds an HttpRequest.

        Args:
            method: HTTP method, case-insensitive.
            uri: Path relative to the endpoint (or an absolute url).
            params: Query parameters; None values are dropped.
            body: Object serialized with the configured Serializer.

        Raises:
            SerializationError: If the body cannot be serialized.
        """
        headers = {"Accept": self.serializer.content_type}
        content: Optional[bytes] = None
        if body is not None:
            content = self.serializer.serialize_to_bytes(body)
            headers["Content-Type"] = self.serializer.content_type

        request = HttpRequest(
            method=HttpMethod(method.upper()),
            url=self.build_url(uri),
            params=encode_params(params),
            headers=headers,
            body=content,
        )
        logger.debug(f"Built request {request.describe()} params={dict(request.params)}")
        return request
