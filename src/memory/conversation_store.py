"""
Per-user conversation list with pin-aware ordering.

Persisted layout (blob store)
-----------------------------
saved_conversations_<user_id>  : JSON list of StoredConversation records
pinned_conversations_<user_id> : JSON list of pinned conversation ids

Every mutation is a full load → modify → save cycle held under a lock on
the affected key. Decode problems never raise: an unreadable list loads as
empty and an entry whose payload does not decode for its kind is dropped.

Usage
-----
    store = ConversationStore(blobs)
    store.upsert(from_character(character), user_id)
    store.set_pinned(character.id, True, user_id)
    conversations = store.load(user_id)    # pinned first, newest first
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set

from pydantic import ValidationError

from src.core.models import (
    RECORD_TYPES,
    Conversation,
    ConversationType,
    StoredConversation,
    utcnow,
)
from src.memory.blob_store import KeyedBlobStore
from src.memory.locks import KeyedLocks
from src.utils.logging import get_logger

logger = get_logger(__name__)

# kind → name of the StoredConversation field holding that variant's payload
_PAYLOAD_FIELDS = {
    ConversationType.CHARACTER: "character_data",
    ConversationType.STORY: "story_data",
    ConversationType.PRIVATE_CHARACTER: "private_character_data",
}


def conversations_key(user_id: str) -> str:
    return f"saved_conversations_{user_id}"


def pinned_key(user_id: str) -> str:
    return f"pinned_conversations_{user_id}"


def sort_conversations(conversations: Iterable[Conversation], pinned_ids: Set[str]) -> List[Conversation]:
    """Pinned before unpinned; within each group newest ``last_message_time`` first."""
    by_recency = sorted(conversations, key=lambda c: c.last_message_time, reverse=True)
    return sorted(by_recency, key=lambda c: c.id not in pinned_ids)


def _to_stored(conversation: Conversation) -> StoredConversation:
    payload = {_PAYLOAD_FIELDS[conversation.type]: conversation.record.model_dump_json()}
    return StoredConversation(
        id=conversation.id,
        name=conversation.name,
        avatar=conversation.avatar,
        background_image=conversation.background_image,
        chat_description=conversation.chat_description,
        greeting_message=conversation.greeting_message,
        last_message=conversation.last_message,
        last_message_time=conversation.last_message_time,
        kind=conversation.type.value,
        **payload,
    )


def _from_stored(stored: StoredConversation) -> Optional[Conversation]:
    """Decode one stored entry, or return None if it is unusable."""
    try:
        kind = ConversationType(stored.kind)
    except ValueError:
        logger.warning("Dropping conversation %s with unknown kind %r", stored.id, stored.kind)
        return None

    payload = getattr(stored, _PAYLOAD_FIELDS[kind])
    if payload is None:
        logger.warning("Dropping conversation %s: no %s payload", stored.id, kind.value)
        return None

    try:
        record = RECORD_TYPES[kind].model_validate_json(payload)
        return Conversation(
            id=stored.id,
            name=stored.name,
            avatar=stored.avatar,
            background_image=stored.background_image,
            chat_description=stored.chat_description,
            greeting_message=stored.greeting_message,
            last_message=stored.last_message,
            last_message_time=stored.last_message_time,
            type=kind,
            record=record,
        )
    except ValidationError as exc:
        logger.warning("Dropping conversation %s: corrupt %s payload (%s)", stored.id, kind.value, exc)
        return None


class ConversationStore:
    """Durable, ordered, per-user conversation list."""

    def __init__(
        self,
        blobs: KeyedBlobStore,
        locks: Optional[KeyedLocks] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.blobs = blobs
        self.locks = locks or KeyedLocks()
        self._clock = clock

    # ── internal ──────────────────────────────────────────────────────────────

    def _read_stored(self, user_id: str) -> List[Conversation]:
        data = self.blobs.get(conversations_key(user_id))
        if data is None:
            logger.info("No saved conversations (user_id: %s)", user_id)
            return []
        try:
            raw_entries = json.loads(data)
        except ValueError:
            logger.warning("Unreadable conversation list for user %s; treating as empty", user_id)
            return []
        if not isinstance(raw_entries, list):
            logger.warning("Conversation list for user %s is not a list; treating as empty", user_id)
            return []

        conversations: List[Conversation] = []
        for raw in raw_entries:
            try:
                stored = StoredConversation.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Dropping malformed conversation entry: %s", exc)
                continue
            conversation = _from_stored(stored)
            if conversation is not None:
                conversations.append(conversation)
        return conversations

    def _write_pinned(self, ids: Set[str], user_id: str) -> None:
        self.blobs.set(pinned_key(user_id), json.dumps(sorted(ids)).encode("utf-8"))

    # ── conversations ─────────────────────────────────────────────────────────

    def load(self, user_id: str) -> List[Conversation]:
        """Return the user's conversations, pinned first then newest first."""
        with self.locks.hold(conversations_key(user_id)):
            conversations = self._read_stored(user_id)
        ordered = sort_conversations(conversations, self.load_pinned_ids(user_id))
        logger.info("Loaded %d conversations (user_id: %s)", len(ordered), user_id)
        return ordered

    def get(self, conversation_id: str, user_id: str) -> Optional[Conversation]:
        """Return a single conversation by id, or None."""
        for conversation in self.load(user_id):
            if conversation.id == conversation_id:
                return conversation
        return None

    def save(self, conversations: List[Conversation], user_id: str) -> None:
        """Replace the user's whole stored conversation list."""
        payload = [_to_stored(c).model_dump(mode="json") for c in conversations]
        with self.locks.hold(conversations_key(user_id)):
            self.blobs.set(conversations_key(user_id), json.dumps(payload).encode("utf-8"))
        logger.info("Saved %d conversations (user_id: %s)", len(conversations), user_id)

    def upsert(self, conversation: Conversation, user_id: str) -> None:
        """Replace the conversation with the same id in place, or add it at the front."""
        with self.locks.hold(conversations_key(user_id)):
            conversations = self.load(user_id)
            for index, existing in enumerate(conversations):
                if existing.id == conversation.id:
                    conversations[index] = conversation
                    break
            else:
                conversations.insert(0, conversation)
            self.save(sort_conversations(conversations, self.load_pinned_ids(user_id)), user_id)

    def update_last_message(self, conversation_id: str, message: str, user_id: str) -> None:
        """Set the preview text and stamp it with the current time; no-op for unknown ids."""
        with self.locks.hold(conversations_key(user_id)):
            conversations = self.load(user_id)
            for index, existing in enumerate(conversations):
                if existing.id == conversation_id:
                    conversations[index] = existing.model_copy(
                        update={"last_message": message, "last_message_time": self._clock()}
                    )
                    break
            else:
                logger.info("update_last_message: conversation %s not found", conversation_id)
                return
            self.save(sort_conversations(conversations, self.load_pinned_ids(user_id)), user_id)

    def delete(self, conversation_id: str, user_id: str) -> None:
        """Remove the conversation and unpin it (two writes, not a transaction)."""
        with self.locks.hold(conversations_key(user_id)):
            conversations = [c for c in self.load(user_id) if c.id != conversation_id]
            self.save(conversations, user_id)
        self.set_pinned(conversation_id, False, user_id)

    # ── pins ──────────────────────────────────────────────────────────────────

    def load_pinned_ids(self, user_id: str) -> Set[str]:
        data = self.blobs.get(pinned_key(user_id))
        if data is None:
            return set()
        try:
            ids = json.loads(data)
        except ValueError:
            logger.warning("Unreadable pinned set for user %s; treating as empty", user_id)
            return set()
        if not isinstance(ids, list):
            return set()
        return {str(i) for i in ids}

    def is_pinned(self, conversation_id: str, user_id: str) -> bool:
        return conversation_id in self.load_pinned_ids(user_id)

    def set_pinned(self, conversation_id: str, pinned: bool, user_id: str) -> None:
        with self.locks.hold(pinned_key(user_id)):
            ids = self.load_pinned_ids(user_id)
            if pinned:
                ids.add(conversation_id)
            else:
                ids.discard(conversation_id)
            self._write_pinned(ids, user_id)
