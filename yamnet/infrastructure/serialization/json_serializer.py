"""JSON implementation of the Serializer and Deserializer interfaces.

Uses pydantic for both directions so DTOs, plain mappings and standard
containers share one code path:
- Output omits null fields (recursively, for models and mappings alike).
- Input is validated against the requested type; malformed JSON or a shape
  mismatch raises DeserializationError.
"""

import json
import logging
from typing import Any, Dict, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from yamnet.domain.interfaces.serializer import Deserializer, Serializer
from yamnet.domain.models.errors import DeserializationError, SerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"


def _prune_none(value: Any) -> Any:
    """Drops None entries from mappings, recursing into lists and dicts."""
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(v) for v in value]
    return value


class JsonSerializer(Serializer, Deserializer):
    """pydantic backed JSON (de)serializer."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._adapters: Dict[Any, TypeAdapter] = {}

    @property
    def content_type(self) -> str:
        return JSON_CONTENT_TYPE

    def serialize(self, obj: Any) -> str:
        try:
            plain = to_jsonable_python(obj, by_alias=True, exclude_none=True)
        except PydanticSerializationError as e:
            raise SerializationError(f"Cannot serialize {type(obj).__name__}: {e}") from e
        return json.dumps(_prune_none(plain), separators=(",", ":"), ensure_ascii=False)

    def serialize_to_bytes(self, obj: Any) -> bytes:
        return self.serialize(obj).encode(self.encoding)

    def deserialize(self, data: bytes, target_type: Type[T]) -> T:
        if not data.strip():
            # Body-less success responses (201 on join, 200 on like) map to an
            # empty payload when the caller does not expect a document.
            if target_type in (dict, Dict, Dict[str, Any], Any):
                return {}  # type: ignore[return-value]
            raise DeserializationError(
                f"Empty response body cannot be read as {_type_name(target_type)}",
                target_type=target_type,
            )
        try:
            return self._adapter(target_type).validate_json(data)
        except ValidationError as e:
            logger.debug(f"Deserialization into {_type_name(target_type)} failed: {e}")
            raise DeserializationError(
                f"Invalid {_type_name(target_type)} payload: {e.error_count()} validation error(s)",
                target_type=target_type,
            ) from e

    def _adapter(self, target_type: Any) -> TypeAdapter:
        adapter = self._adapters.get(target_type)
        if adapter is None:
            adapter = TypeAdapter(target_type)
            self._adapters[target_type] = adapter
        return adapter


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", repr(target_type))
