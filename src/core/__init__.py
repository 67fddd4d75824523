"""Core data models and conversation builders"""

from .models import (
    Character,
    Story,
    PrivateCharacter,
    ChatRecord,
    User,
    ChatMessage,
    Conversation,
    ConversationType,
    StoredConversation,
)
from .conversations import (
    PLACEHOLDER_MESSAGE,
    from_character,
    from_story,
    from_private_character,
    from_record,
)

__all__ = [
    "Character",
    "Story",
    "PrivateCharacter",
    "ChatRecord",
    "User",
    "ChatMessage",
    "Conversation",
    "ConversationType",
    "StoredConversation",
    # Builders
    "PLACEHOLDER_MESSAGE",
    "from_character",
    "from_story",
    "from_private_character",
    "from_record",
]
