"""Message DTOs and query options for the /messages endpoints."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .user import YammerModel


class MessageQueryThread(str, Enum):
    """How thread messages are returned alongside thread starters."""
    NONE = "none"
    TRUE = "true"          # only the thread starter of each thread
    EXTENDED = "extended"  # thread starter plus the two most recent replies


class MessageQueryTrim(str, Enum):
    """Which side of a reference message id the result is trimmed to."""
    NONE = "none"
    OLDER_THAN = "older_than"
    NEWER_THAN = "newer_than"


class MessageQuery(BaseModel):
    """Query-string options shared by all message feeds."""
    limit: Optional[int] = Field(default=None, ge=1, le=20)
    older_than: Optional[int] = None
    newer_than: Optional[int] = None
    threaded: Optional[str] = None

    @classmethod
    def build(
        cls,
        limit: Optional[int] = None,
        trim: MessageQueryTrim = MessageQueryTrim.NONE,
        reference_id: Optional[int] = None,
        thread: MessageQueryThread = MessageQueryThread.NONE,
    ) -> "MessageQuery":
        """Translates the trim/thread options into API query fields."""
        if trim is not MessageQueryTrim.NONE and reference_id is None:
            raise ValueError(f"trim={trim.value} requires a reference message id")
        return cls(
            limit=limit,
            older_than=reference_id if trim is MessageQueryTrim.OLDER_THAN else None,
            newer_than=reference_id if trim is MessageQueryTrim.NEWER_THAN else None,
            threaded=None if thread is MessageQueryThread.NONE else thread.value,
        )


class MessageBody(YammerModel):
    plain: Optional[str] = None
    parsed: Optional[str] = None
    rich: Optional[str] = None


class LikedBy(YammerModel):
    count: int = 0
    names: List[Dict[str, Any]] = []


class Message(YammerModel):
    id: int
    sender_id: Optional[int] = None
    sender_type: Optional[str] = None
    replied_to_id: Optional[int] = None
    thread_id: Optional[int] = None
    group_id: Optional[int] = None
    network_id: Optional[int] = None
    created_at: Optional[datetime] = None
    message_type: Optional[str] = None
    privacy: Optional[str] = None
    web_url: Optional[str] = None
    url: Optional[str] = None
    body: Optional[MessageBody] = None
    liked_by: Optional[LikedBy] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_yammer_timestamp(cls, value: Any) -> Any:
        # The API uses "2014/01/31 10:15:00 +0000" rather than ISO 8601.
        if isinstance(value, str) and "/" in value[:10]:
            return datetime.strptime(value, "%Y/%m/%d %H:%M:%S %z")
        return value


class MessageEnvelope(YammerModel):
    """Message API response: thread starters plus, optionally, other sections."""
    messages: List[Message] = []
    meta: Optional[Dict[str, Any]] = None
    references: List[Dict[str, Any]] = []
    threaded_extended: Dict[str, List[Message]] = {}


class NewMessage(BaseModel):
    """Request body for POST /messages.json."""
    body: str
    group_id: Optional[int] = None
    replied_to_id: Optional[int] = None
    direct_to_user_ids: Optional[List[int]] = None
    topic1: Optional[str] = None
