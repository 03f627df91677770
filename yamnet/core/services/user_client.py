"""Yammer user client (GET /users/current.json, /users/{id}.json)."""

from yamnet.core.services.base import ClientBase
from yamnet.domain.models.common import UserId
from yamnet.domain.models.envelope import ResultEnvelope
from yamnet.domain.models.user import User


class UserClient(ClientBase):

    async def get_current(self) -> ResultEnvelope[User]:
        """The user the access token belongs to."""
        return await self.client.get("/users/current.json", response_type=User)

    async def get_by_id(self, user_id: UserId) -> ResultEnvelope[User]:
        return await self.client.get(f"/users/{user_id}.json", response_type=User)
