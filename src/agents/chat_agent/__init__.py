"""Character Chat Agent — in-character replies via the DeepSeek chat API."""
from .chat_agent import ChatAgentError, send_message

__all__ = ["ChatAgentError", "send_message"]
