"""Yammer group membership client.

REST API: POST/DELETE /group_memberships.json?group_id={id}
"""

import logging
from typing import Any, Dict

from yamnet.core.services.base import ClientBase
from yamnet.domain.models.common import GroupId
from yamnet.domain.models.envelope import ResultEnvelope

logger = logging.getLogger(__name__)

BASE_URI = "/group_memberships.json"


class GroupClient(ClientBase):
    """Joins and leaves groups on behalf of the current user."""

    async def join_by_id(self, group_id: GroupId) -> ResultEnvelope[Dict[str, Any]]:
        """Join the group specified by the numeric id."""
        logger.info(f"Joining group {group_id}")
        return await self.client.post(BASE_URI, params={"group_id": group_id})

    async def leave_by_id(self, group_id: GroupId) -> ResultEnvelope[Dict[str, Any]]:
        """Leave the group specified by the numeric id."""
        logger.info(f"Leaving group {group_id}")
        return await self.client.delete(BASE_URI, params={"group_id": group_id})
