"""Yammer message client.

Maps the message feeds and message actions onto REST resources. All feeds
share the same query options (limit, trim around a reference message id,
threading) and return a MessageEnvelope.
"""

import logging
from typing import Any, Dict, List, Optional

from yamnet.core.services.base import ClientBase
from yamnet.domain.models.common import GroupId, MessageId
from yamnet.domain.models.envelope import ErrorInfo, ErrorKind, ResultEnvelope
from yamnet.domain.models.message import (
    MessageEnvelope, MessageQuery, MessageQueryThread, MessageQueryTrim, NewMessage,
)

logger = logging.getLogger(__name__)

BASE_URI = "/messages"

# Feed name -> resource path
FEED_URIS: Dict[str, str] = {
    "all": f"{BASE_URI}.json",
    "feed": f"{BASE_URI}/my_feed.json",
    "top": f"{BASE_URI}/algo.json",
    "following": f"{BASE_URI}/following.json",
    "sent": f"{BASE_URI}/sent.json",
    "private": f"{BASE_URI}/private.json",
    "received": f"{BASE_URI}/received.json",
}


class MessageClient(ClientBase):
    """Reads message feeds and acts on individual messages."""

    async def get_feed_by_name(
        self,
        feed: str,
        limit: Optional[int] = None,
        trim: MessageQueryTrim = MessageQueryTrim.NONE,
        reference_id: Optional[MessageId] = None,
        thread: MessageQueryThread = MessageQueryThread.NONE,
    ) -> ResultEnvelope[MessageEnvelope]:
        """Fetches one of the named feeds (see FEED_URIS).

        An unknown feed name, a limit outside 1..20 or a trim without a
        reference id yields an UNKNOWN failure; nothing is sent.
        """
        uri = FEED_URIS.get(feed)
        if uri is None:
            return self._invalid_query(f"Unknown feed '{feed}'. Expected one of: {', '.join(FEED_URIS)}")
        try:
            query = MessageQuery.build(limit=limit, trim=trim, reference_id=reference_id, thread=thread)
        except ValueError as e:
            # pydantic's ValidationError is a ValueError too.
            return self._invalid_query(f"Invalid message query: {e}", cause=e)
        logger.debug(f"Fetching '{feed}' feed with {query.model_dump(exclude_none=True)}")
        return await self.client.get(uri, params=query, response_type=MessageEnvelope)

    async def get_all(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                      thread: MessageQueryThread = MessageQueryThread.NONE,
                      reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        """All public messages in the user's network ("All" conversations)."""
        return await self.get_feed_by_name("all", limit, trim, reference_id, thread)

    async def get_feed(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                       thread: MessageQueryThread = MessageQueryThread.NONE,
                       reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        """The user's feed, following the user's "Following"/"Top" selection."""
        return await self.get_feed_by_name("feed", limit, trim, reference_id, thread)

    async def get_top(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                      thread: MessageQueryThread = MessageQueryThread.NONE,
                      reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        """The algorithmic "Top" feed."""
        return await self.get_feed_by_name("top", limit, trim, reference_id, thread)

    async def get_following(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                            thread: MessageQueryThread = MessageQueryThread.NONE,
                            reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        """Conversations involving people, groups and topics the user follows."""
        return await self.get_feed_by_name("following", limit, trim, reference_id, thread)

    async def get_sent(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                       thread: MessageQueryThread = MessageQueryThread.NONE,
                       reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        return await self.get_feed_by_name("sent", limit, trim, reference_id, thread)

    async def get_private(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                          thread: MessageQueryThread = MessageQueryThread.NONE,
                          reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        return await self.get_feed_by_name("private", limit, trim, reference_id, thread)

    async def get_received(self, limit: Optional[int] = None, trim: MessageQueryTrim = MessageQueryTrim.NONE,
                           thread: MessageQueryThread = MessageQueryThread.NONE,
                           reference_id: Optional[MessageId] = None) -> ResultEnvelope[MessageEnvelope]:
        return await self.get_feed_by_name("received", limit, trim, reference_id, thread)

    async def post_message(
        self,
        body: str,
        group_id: Optional[GroupId] = None,
        replied_to_id: Optional[MessageId] = None,
        direct_to_user_ids: Optional[List[int]] = None,
    ) -> ResultEnvelope[MessageEnvelope]:
        """Posts a new message (or a reply when replied_to_id is set)."""
        payload = NewMessage(
            body=body,
            group_id=group_id,
            replied_to_id=replied_to_id,
            direct_to_user_ids=direct_to_user_ids,
        )
        return await self.client.post(f"{BASE_URI}.json", body=payload, response_type=MessageEnvelope)

    async def like_by_id(self, message_id: MessageId) -> ResultEnvelope[Dict[str, Any]]:
        """Marks the message as liked by the current user."""
        return await self.client.post(f"{BASE_URI}/liked_by/current.json", params={"message_id": message_id})

    async def unlike_by_id(self, message_id: MessageId) -> ResultEnvelope[Dict[str, Any]]:
        """Removes the current user's like from the message."""
        return await self.client.delete(f"{BASE_URI}/liked_by/current.json", params={"message_id": message_id})

    @staticmethod
    def _invalid_query(message: str, cause: Optional[Exception] = None) -> ResultEnvelope[MessageEnvelope]:
        logger.error(message)
        return ResultEnvelope.faulted(ErrorInfo(kind=ErrorKind.UNKNOWN, message=message, cause=cause))

    async def delete_by_id(self, message_id: MessageId) -> ResultEnvelope[Dict[str, Any]]:
        """Deletes a message owned by the current user."""
        return await self.client.delete(f"{BASE_URI}/{message_id}")
