"""Interfaces for converting objects to wire bytes and back."""

import abc
from typing import Any, Type, TypeVar

T = TypeVar("T")


class Serializer(abc.ABC):
    """Converts in-memory objects into request bodies."""

    @property
    @abc.abstractmethod
    def content_type(self) -> str:
        """MIME type of the produced bytes, e.g. 'application/json'."""
        pass

    @abc.abstractmethod
    def serialize(self, obj: Any) -> str:
        """Serializes an object to text. Null/absent fields are omitted.

        Raises:
            SerializationError: If the object cannot be represented.
        """
        pass

    def serialize_to_bytes(self, obj: Any) -> bytes:
        return self.serialize(obj).encode("utf-8")


class Deserializer(abc.ABC):
    """Converts response bodies into typed payloads."""

    @abc.abstractmethod
    def deserialize(self, data: bytes, target_type: Type[T]) -> T:
        """Parses bytes into an instance of target_type.

        Raises:
            DeserializationError: If the bytes are malformed or do not match
                target_type.
        """
        pass
