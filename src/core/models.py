"""
Chat Data Models

Records served by the character catalog (characters, stories, private
characters), the user account, chat messages and conversations.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time used for all stored timestamps."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC so that all values stay comparable.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Character(BaseModel):
    """
    A public AI character from the catalog.
    """
    id: str = Field(default_factory=_new_id, description="Unique character identifier")
    name: str = Field(description="Display name")
    avatar: str = Field(description="Avatar image URL")
    popularity: int = Field(default=0, description="Number of chats")
    tags: List[str] = Field(default_factory=list, description="Personality tags")
    description: str = Field(default="", description="Profile description")
    gender: str = Field(default="female", description="'male' or 'female'")
    category: str = Field(default="featured", description="'featured', 'story' or 'private'")
    background_image: Optional[str] = Field(None, description="Chat background image URL")
    chat_description: Optional[str] = Field(None, description="Introduction shown in the chat screen")
    greeting_message: Optional[str] = Field(None, description="First assistant message of a new chat")
    gallery: Optional[List[str]] = Field(None, description="Image and video URLs")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Luna",
                "avatar": "https://example.com/luna.png",
                "popularity": 482000,
                "tags": ["playful", "leo"],
                "description": "A night-owl bartender with a secret.",
                "gender": "female",
                "category": "featured",
            }
        }
    )


class Story(BaseModel):
    """
    A story-driven chat; the user talks to the story's main character.
    """
    id: str = Field(default_factory=_new_id, description="Unique story identifier")
    title: str = Field(description="Story title")
    cover: str = Field(description="Cover image URL")
    popularity: int = Field(default=0)
    description: str = Field(default="")
    category: str = Field(default="story")
    character_name: str = Field(default="", description="Name of the character the user talks to")
    gender: str = Field(default="female")
    background_image: Optional[str] = None
    chat_description: Optional[str] = None
    greeting_message: Optional[str] = None
    gallery: Optional[List[str]] = None

    @property
    def name(self) -> str:
        return self.character_name


class PrivateCharacter(BaseModel):
    """
    A character created by (and visible to) a single user.
    """
    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = Field(None, description="Owner user id")
    name: str
    avatar: Optional[str] = None
    description: str = ""
    gender: str = "female"
    background_image: Optional[str] = None
    chat_description: Optional[str] = None
    greeting_message: Optional[str] = None
    gallery: Optional[List[str]] = None


ChatRecord = Union[Character, Story, PrivateCharacter]


class User(BaseModel):
    """
    A user account with its diamonds balance.
    """
    id: str = Field(default_factory=_new_id)
    username: str
    email: str
    age: int
    gender: str
    avatar: Optional[str] = None
    level: int = Field(default=1)
    diamonds: int = Field(default=30, ge=0, description="Virtual currency balance")


class ChatMessage(BaseModel):
    """
    A single message of a conversation.
    """
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def as_prompt_message(self) -> Dict[str, str]:
        """Return the ``{"role", "content"}`` dict the completion API expects."""
        return {"role": self.role, "content": self.content}


class ConversationType(str, Enum):
    """Which kind of record a conversation wraps"""
    CHARACTER = "character"
    STORY = "story"
    PRIVATE_CHARACTER = "privateCharacter"


RECORD_TYPES: Dict[ConversationType, type] = {
    ConversationType.CHARACTER: Character,
    ConversationType.STORY: Story,
    ConversationType.PRIVATE_CHARACTER: PrivateCharacter,
}


class Conversation(BaseModel):
    """
    A chat thread with one character, story or private character.

    ``type`` is the discriminant and ``record`` the full record of that
    variant; ``id`` always equals ``record.id``.
    """
    id: str
    name: str
    avatar: str
    background_image: Optional[str] = None
    chat_description: Optional[str] = None
    greeting_message: Optional[str] = None
    last_message: str
    last_message_time: datetime
    type: ConversationType
    record: ChatRecord

    @field_validator("last_message_time")
    @classmethod
    def normalize_last_message_time(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="before")
    @classmethod
    def decode_record(cls, data: Any) -> Any:
        # Parse a raw record dict with the model named by the discriminant,
        # never by guessing among the union members.
        if isinstance(data, dict) and isinstance(data.get("record"), dict):
            conv_type = ConversationType(data.get("type"))
            data = dict(data)
            data["record"] = RECORD_TYPES[conv_type].model_validate(data["record"])
        return data

    @model_validator(mode="after")
    def check_variant(self) -> "Conversation":
        if type(self.record) is not RECORD_TYPES[self.type]:
            raise ValueError(
                f"record of type {type(self.record).__name__} does not match kind {self.type.value}"
            )
        if self.record.id != self.id:
            raise ValueError("conversation id must equal the wrapped record id")
        return self


class StoredConversation(BaseModel):
    """
    Persisted shape of a conversation.

    ``kind`` names the variant and exactly the matching ``*_data`` field
    holds the JSON text of the wrapped record.
    """
    id: str
    name: str
    avatar: str
    background_image: Optional[str] = None
    chat_description: Optional[str] = None
    greeting_message: Optional[str] = None
    last_message: str
    last_message_time: datetime
    kind: str
    character_data: Optional[str] = None
    story_data: Optional[str] = None
    private_character_data: Optional[str] = None
