"""
Per-(user, conversation) chat message log.

Persisted layout (blob store)
-----------------------------
messages_<user_id>_<conversation_id> : JSON list of {id, role, content, timestamp}

Both ids go through ``key_part`` so distinct (user, conversation) pairs
never share a key.

Messages are kept in insertion order. ``append`` is a load → append → save
cycle held under a lock on the log's key.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from src.core.models import ChatMessage
from src.memory.blob_store import KeyedBlobStore, key_part
from src.memory.locks import KeyedLocks
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RECENT_LIMIT = 10

_MESSAGE_LIST = TypeAdapter(List[ChatMessage])


def messages_key(conversation_id: str, user_id: str) -> str:
    return f"messages_{key_part(user_id)}_{key_part(conversation_id)}"


class MessageStore:
    """Durable, strictly ordered message log per conversation."""

    def __init__(self, blobs: KeyedBlobStore, locks: Optional[KeyedLocks] = None) -> None:
        self.blobs = blobs
        self.locks = locks or KeyedLocks()

    def load(self, conversation_id: str, user_id: str) -> List[ChatMessage]:
        """Return the stored messages in order, or an empty list."""
        data = self.blobs.get(messages_key(conversation_id, user_id))
        if data is None:
            logger.info("No saved messages for conversation %s", conversation_id)
            return []
        try:
            messages = _MESSAGE_LIST.validate_json(data)
        except ValidationError as exc:
            logger.warning("Unreadable messages for conversation %s: %s", conversation_id, exc)
            return []
        logger.info("Loaded %d messages for conversation %s", len(messages), conversation_id)
        return messages

    def save(self, messages: List[ChatMessage], conversation_id: str, user_id: str) -> None:
        """Replace the whole message list."""
        key = messages_key(conversation_id, user_id)
        with self.locks.hold(key):
            self.blobs.set(key, _MESSAGE_LIST.dump_json(list(messages)))
        logger.info("Saved %d messages for conversation %s", len(messages), conversation_id)

    def append(self, message: ChatMessage, conversation_id: str, user_id: str) -> None:
        with self.locks.hold(messages_key(conversation_id, user_id)):
            messages = self.load(conversation_id, user_id)
            messages.append(message)
            self.save(messages, conversation_id, user_id)

    def clear(self, conversation_id: str, user_id: str) -> None:
        key = messages_key(conversation_id, user_id)
        with self.locks.hold(key):
            self.blobs.remove(key)

    def recent(
        self,
        conversation_id: str,
        user_id: str,
        limit: int = DEFAULT_RECENT_LIMIT,
    ) -> List[ChatMessage]:
        """
        Return the last *limit* messages in their original order.

        This is the context window handed to the completion call; fewer than
        *limit* stored messages means all of them are returned.
        """
        if limit <= 0:
            return []
        return self.load(conversation_id, user_id)[-limit:]
