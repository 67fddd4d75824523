"""Core logic for the character chat agent.

Sends the character's system prompt, the recent conversation history and
the new user message to DeepSeek and returns the generated reply.
"""

from typing import Iterable, Optional

from openai import OpenAIError

from .client import get_client, MODEL, TEMPERATURE, MAX_TOKENS
from .prompts import build_system_prompt
from src.core.models import ChatMessage, ChatRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ChatAgentError(Exception):
    """The completion call failed or returned no usable reply."""


def send_message(
    record: ChatRecord,
    message: str,
    history: Optional[Iterable[ChatMessage]] = None,
) -> str:
    """
    Generate the character's reply to *message*.

    Parameters
    ----------
    record : Character | Story | PrivateCharacter
        Who the user is talking to; selects the system prompt.
    message : str
        The new user message.
    history : iterable of ChatMessage, optional
        Prior messages, oldest first (the context window).

    Returns
    -------
    str
        The reply text.

    Raises
    ------
    ValueError
        If *message* is empty.
    ChatAgentError
        If the completion call cannot be made or returns no content.
    """
    if not message or not message.strip():
        raise ValueError("Message must be a non-empty string.")

    messages = [{"role": "system", "content": build_system_prompt(record)}]
    messages.extend(m.as_prompt_message() for m in (history or []))
    messages.append({"role": "user", "content": message.strip()})

    logger.info("Chat agent sending %d messages for %s", len(messages), record.id)
    try:
        response = get_client().chat.completions.create(
            model=MODEL,
            messages=messages,
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
    except (OpenAIError, EnvironmentError) as exc:
        logger.error("Chat completion failed: %s", exc, exc_info=True)
        raise ChatAgentError(str(exc)) from exc

    if not response.choices or not response.choices[0].message.content:
        raise ChatAgentError("Invalid response: no reply content")
    answer = response.choices[0].message.content
    logger.info("Chat agent returning reply (first 80 chars): %s", answer[:80])
    return answer
