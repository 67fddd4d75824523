"""Build conversations from catalog records."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from .models import (
    Character,
    ChatRecord,
    Conversation,
    ConversationType,
    PrivateCharacter,
    Story,
    utcnow,
)

PLACEHOLDER_MESSAGE = "Start conversation"


def from_character(character: Character, now: Optional[datetime] = None) -> Conversation:
    return Conversation(
        id=character.id,
        name=character.name,
        avatar=character.avatar,
        background_image=character.background_image,
        chat_description=character.chat_description,
        greeting_message=character.greeting_message,
        last_message=PLACEHOLDER_MESSAGE,
        last_message_time=now or utcnow(),
        type=ConversationType.CHARACTER,
        record=character,
    )


def from_story(story: Story, now: Optional[datetime] = None) -> Conversation:
    """Stories are shown under their character's name with the cover as avatar."""
    return Conversation(
        id=story.id,
        name=story.character_name,
        avatar=story.cover,
        background_image=story.background_image,
        chat_description=story.chat_description,
        greeting_message=story.greeting_message,
        last_message=PLACEHOLDER_MESSAGE,
        last_message_time=now or utcnow(),
        type=ConversationType.STORY,
        record=story,
    )


def from_private_character(character: PrivateCharacter, now: Optional[datetime] = None) -> Conversation:
    return Conversation(
        id=character.id,
        name=character.name,
        avatar=character.avatar or "",
        background_image=character.background_image,
        chat_description=character.chat_description,
        greeting_message=character.greeting_message,
        last_message=PLACEHOLDER_MESSAGE,
        last_message_time=now or utcnow(),
        type=ConversationType.PRIVATE_CHARACTER,
        record=character,
    )


def from_record(record: ChatRecord, now: Optional[datetime] = None) -> Conversation:
    """Dispatch to the builder matching *record*'s type."""
    if isinstance(record, Character):
        return from_character(record, now)
    if isinstance(record, Story):
        return from_story(record, now)
    if isinstance(record, PrivateCharacter):
        return from_private_character(record, now)
    raise TypeError(f"Unsupported chat record: {type(record).__name__}")
