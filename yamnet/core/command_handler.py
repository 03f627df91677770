"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), calls the matching
endpoint client and renders the resulting envelope through the UserInterface.
Every handler returns True on success and False when the envelope is faulted.
"""

import logging
from typing import Optional

from yamnet.core.yammer_client import YammerClient
from yamnet.domain.interfaces.user_interface import UserInterface
from yamnet.domain.models.common import GroupId, MessageId, UserId
from yamnet.domain.models.envelope import ResultEnvelope

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the endpoint clients."""

    def __init__(self, client: YammerClient, ui: UserInterface):
        self.client = client
        self.ui = ui

    def _report_failure(self, envelope: ResultEnvelope) -> bool:
        if envelope.is_faulted:
            logger.debug(f"Command failed: {envelope.failure.describe()}")
            self.ui.display_failure(envelope.failure)
            return True
        return False

    async def handle_messages(self, feed: str = "feed", limit: Optional[int] = None) -> bool:
        envelope = await self.client.messages.get_feed_by_name(feed, limit=limit)
        if self._report_failure(envelope):
            return False
        self.ui.display_messages(envelope.unwrap().messages, title=f"{feed} messages")
        return True

    async def handle_current_user(self) -> bool:
        envelope = await self.client.users.get_current()
        if self._report_failure(envelope):
            return False
        self.ui.display_user(envelope.unwrap(), title="Current user")
        return True

    async def handle_user(self, user_id: UserId) -> bool:
        envelope = await self.client.users.get_by_id(user_id)
        if self._report_failure(envelope):
            return False
        self.ui.display_user(envelope.unwrap())
        return True

    async def handle_post(self, body: str, group_id: Optional[GroupId] = None) -> bool:
        envelope = await self.client.messages.post_message(body, group_id=group_id)
        if self._report_failure(envelope):
            return False
        posted = envelope.unwrap().messages
        self.ui.display_info(f"Posted message {posted[0].id}." if posted else "Message posted.")
        return True

    async def handle_join_group(self, group_id: GroupId) -> bool:
        return self._report_action(await self.client.groups.join_by_id(group_id), f"Joined group {group_id}.")

    async def handle_leave_group(self, group_id: GroupId) -> bool:
        return self._report_action(await self.client.groups.leave_by_id(group_id), f"Left group {group_id}.")

    async def handle_like(self, message_id: MessageId) -> bool:
        return self._report_action(await self.client.messages.like_by_id(message_id), f"Liked message {message_id}.")

    async def handle_unlike(self, message_id: MessageId) -> bool:
        return self._report_action(await self.client.messages.unlike_by_id(message_id), f"Unliked message {message_id}.")

    async def handle_delete_message(self, message_id: MessageId) -> bool:
        return self._report_action(await self.client.messages.delete_by_id(message_id), f"Deleted message {message_id}.")

    def _report_action(self, envelope: ResultEnvelope, success_message: str) -> bool:
        if self._report_failure(envelope):
            return False
        self.ui.display_info(success_message)
        return True
