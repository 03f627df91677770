"""User DTOs returned by the /users endpoints and embedded in references."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class YammerModel(BaseModel):
    """Base for API payloads: unknown JSON fields are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserIm(YammerModel):
    """The user's instant messaging (IM) contact details."""
    provider: Optional[str] = None
    username: Optional[str] = None


class UserStat(YammerModel):
    followers: Optional[int] = None
    following: Optional[int] = None
    updates: Optional[int] = None


class UserBasicInfo(YammerModel):
    """The subset of user fields present in every user payload."""
    id: int
    activated_at: Optional[datetime] = None
    # TODO: map state and type to enums once the full value sets are documented
    state: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    full_name: Optional[str] = None
    mugshot_url: Optional[str] = None
    mugshot_url_template: Optional[str] = None
    web_url: Optional[str] = None
    url: Optional[str] = None
    job_title: Optional[str] = None
    stats: Optional[UserStat] = None


class UserEmailAddress(YammerModel):
    address: str
    type: Optional[str] = None


class UserContact(YammerModel):
    im: Optional[UserIm] = None
    email_addresses: List[UserEmailAddress] = []


class User(UserBasicInfo):
    """Full user profile (GET /users/current.json, /users/{id}.json)."""
    email: Optional[str] = None
    network_id: Optional[int] = None
    network_name: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None
    contact: Optional[UserContact] = None
