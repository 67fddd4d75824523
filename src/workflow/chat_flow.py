"""
Chat Flow Orchestration

Ties the stores, the diamonds ledger and the chat agent together for the
two things a user does in a chat screen: open a conversation and send a
message.
"""

from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..agents.chat_agent.chat_agent import ChatAgentError
from ..core.conversations import from_record
from ..core.models import ChatMessage, ChatRecord, Conversation
from ..memory.account_store import AccountStore
from ..memory.conversation_store import ConversationStore
from ..memory.message_store import DEFAULT_RECENT_LIMIT, MessageStore
from ..utils.logging import get_logger

logger = get_logger(__name__)

ReplyFn = Callable[[ChatRecord, str, Iterable[ChatMessage]], str]


class ChatStatus(str, Enum):
    """Result of sending a chat message"""
    OK = "ok"
    FAILED = "failed"
    INSUFFICIENT_DIAMONDS = "insufficient_diamonds"


class ChatOutcome(BaseModel):
    """
    What happened when a user sent a message
    """
    status: ChatStatus = Field(description="Outcome of the send")
    user_message: Optional[ChatMessage] = Field(None, description="The stored user message")
    reply: Optional[ChatMessage] = Field(None, description="The stored assistant reply")
    error: Optional[str] = Field(None, description="Failure detail when status is not OK")
    diamonds: int = Field(default=0, description="Balance after the send")


class ChatOrchestrator:
    """
    Runs conversation-level operations against explicitly injected stores.

    The reply function is usually ``send_message`` from the chat agent; tests
    pass a stub.
    """

    def __init__(
        self,
        conversations: ConversationStore,
        messages: MessageStore,
        accounts: AccountStore,
        reply_fn: ReplyFn,
        history_limit: int = DEFAULT_RECENT_LIMIT,
    ):
        self.conversations = conversations
        self.messages = messages
        self.accounts = accounts
        self.reply_fn = reply_fn
        self.history_limit = history_limit

    def open_conversation(self, record: ChatRecord, user_id: str) -> Tuple[Conversation, List[ChatMessage]]:
        """
        Open (or re-open) the chat with *record*.

        An existing conversation keeps its last message and time while its
        display fields are refreshed from *record*. A conversation with no
        messages yet gets the record's greeting as its first assistant message.
        """
        fresh = from_record(record)
        existing = self.conversations.get(fresh.id, user_id)
        if existing is not None:
            fresh = fresh.model_copy(update={
                "last_message": existing.last_message,
                "last_message_time": existing.last_message_time,
            })
        self.conversations.upsert(fresh, user_id)

        history = self.messages.load(fresh.id, user_id)
        if not history and fresh.greeting_message:
            greeting = ChatMessage(role="assistant", content=fresh.greeting_message)
            self.messages.append(greeting, fresh.id, user_id)
            history = [greeting]
        return fresh, history

    def send(self, conversation_id: str, text: str, user_id: str) -> ChatOutcome:
        """
        Send *text* in the conversation and store the character's reply.

        The chat cost is charged before anything is written; when the user
        cannot afford it nothing is stored. A failed completion keeps the
        user's message (and its preview) but stores no reply.

        Raises
        ------
        ValueError
            If *text* is blank.
        LookupError
            If the conversation does not exist for this user.
        """
        if not text or not text.strip():
            raise ValueError("Message must be a non-empty string.")
        conversation = self.conversations.get(conversation_id, user_id)
        if conversation is None:
            raise LookupError(f"Unknown conversation: {conversation_id}")

        cost = self.accounts.chat_cost()
        if not self.accounts.spend_diamonds(user_id, cost):
            return ChatOutcome(
                status=ChatStatus.INSUFFICIENT_DIAMONDS,
                error=f"Each chat message costs {cost} diamonds. Please top up to continue.",
                diamonds=self.accounts.balance(user_id),
            )

        # History is taken before the new message is stored, so the message
        # reaches the model once.
        history = self.messages.recent(conversation_id, user_id, limit=self.history_limit)
        user_message = ChatMessage(role="user", content=text)
        self.messages.append(user_message, conversation_id, user_id)
        self.conversations.update_last_message(conversation_id, text, user_id)

        try:
            reply_text = self.reply_fn(conversation.record, text, history)
        except ChatAgentError as exc:
            logger.error("Reply failed for conversation %s: %s", conversation_id, exc)
            return ChatOutcome(
                status=ChatStatus.FAILED,
                user_message=user_message,
                error=str(exc),
                diamonds=self.accounts.balance(user_id),
            )

        reply = ChatMessage(role="assistant", content=reply_text)
        self.messages.append(reply, conversation_id, user_id)
        self.conversations.update_last_message(conversation_id, reply_text, user_id)
        return ChatOutcome(
            status=ChatStatus.OK,
            user_message=user_message,
            reply=reply,
            diamonds=self.accounts.balance(user_id),
        )

    def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        """Delete the conversation, its pin and its message log."""
        self.conversations.delete(conversation_id, user_id)
        self.messages.clear(conversation_id, user_id)
