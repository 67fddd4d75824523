"""Agents package — the character chat agent.

  send_message            chat_agent               Character/story replies via DeepSeek
"""

from .chat_agent.chat_agent import ChatAgentError, send_message

__all__ = [
    "ChatAgentError",
    "send_message",
]
