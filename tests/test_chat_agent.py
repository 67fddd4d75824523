"""Unit tests for the chat agent and its prompts (DeepSeek client mocked)."""

from unittest.mock import MagicMock, patch

import pytest
from openai import OpenAIError


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def _luna():
    from src.core.models import Character
    return Character(
        name="Luna",
        avatar="https://img/luna.png",
        description="a night-owl bartender",
        tags=["playful", "leo"],
    )


class TestPrompts:

    def test_character_prompt_includes_tags(self):
        from src.agents.chat_agent.prompts import build_system_prompt
        prompt = build_system_prompt(_luna())
        assert prompt.startswith("You are Luna, a night-owl bartender.")
        assert "playful, leo" in prompt

    def test_story_prompt_names_story(self):
        from src.agents.chat_agent.prompts import build_system_prompt
        from src.core.models import Story
        story = Story(title="Heist", cover="c", character_name="Vex", chat_description="Vault night.")
        prompt = build_system_prompt(story)
        assert 'You are Vex from the story "Heist"' in prompt
        assert "Vault night." in prompt

    def test_private_prompt(self):
        from src.agents.chat_agent.prompts import build_system_prompt
        from src.core.models import PrivateCharacter
        prompt = build_system_prompt(PrivateCharacter(name="Iris", description="a librarian"))
        assert prompt.startswith("You are Iris, a librarian.")

    def test_unsupported_record(self):
        from src.agents.chat_agent.prompts import build_system_prompt
        with pytest.raises(TypeError):
            build_system_prompt(object())


class TestSendMessage:

    def test_returns_reply(self):
        from src.agents.chat_agent.chat_agent import send_message
        with patch("src.agents.chat_agent.chat_agent.get_client") as mock_get:
            mock_get.return_value.chat.completions.create.return_value = _completion("Hey there!")
            assert send_message(_luna(), "Hi") == "Hey there!"

    def test_message_layout(self):
        from src.agents.chat_agent.chat_agent import send_message
        from src.core.models import ChatMessage
        history = [
            ChatMessage(role="assistant", content="Welcome in."),
            ChatMessage(role="user", content="Thanks"),
        ]
        with patch("src.agents.chat_agent.chat_agent.get_client") as mock_get:
            create = mock_get.return_value.chat.completions.create
            create.return_value = _completion("ok")
            send_message(_luna(), "What's good?", history)
            messages = create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "assistant", "user", "user"]
        assert messages[-1]["content"] == "What's good?"
        assert create.call_args.kwargs["model"] == "deepseek-chat"

    def test_empty_message_raises(self):
        from src.agents.chat_agent.chat_agent import send_message
        with pytest.raises(ValueError):
            send_message(_luna(), "   ")

    def test_api_error_wrapped(self):
        from src.agents.chat_agent.chat_agent import ChatAgentError, send_message
        with patch("src.agents.chat_agent.chat_agent.get_client") as mock_get:
            mock_get.return_value.chat.completions.create.side_effect = OpenAIError("rate limited")
            with pytest.raises(ChatAgentError):
                send_message(_luna(), "Hi")

    def test_missing_api_key_wrapped(self):
        from src.agents.chat_agent.chat_agent import ChatAgentError, send_message
        with patch("src.agents.chat_agent.chat_agent.get_client",
                   side_effect=EnvironmentError("DEEPSEEK_API_KEY is not set")):
            with pytest.raises(ChatAgentError):
                send_message(_luna(), "Hi")

    def test_empty_content_raises(self):
        from src.agents.chat_agent.chat_agent import ChatAgentError, send_message
        with patch("src.agents.chat_agent.chat_agent.get_client") as mock_get:
            mock_get.return_value.chat.completions.create.return_value = _completion(None)
            with pytest.raises(ChatAgentError):
                send_message(_luna(), "Hi")

    def test_no_choices_raises(self):
        from src.agents.chat_agent.chat_agent import ChatAgentError, send_message
        with patch("src.agents.chat_agent.chat_agent.get_client") as mock_get:
            response = MagicMock()
            response.choices = []
            mock_get.return_value.chat.completions.create.return_value = response
            with pytest.raises(ChatAgentError):
                send_message(_luna(), "Hi")


class TestClient:

    def test_missing_key_raises(self, monkeypatch):
        from src.agents.chat_agent.client import get_client
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        with pytest.raises(EnvironmentError):
            get_client()
