"""Unit tests for src/core/models.py and src/core/conversations.py"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError


NOW = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


class TestBuilders:

    def test_from_character(self):
        from src.core.conversations import PLACEHOLDER_MESSAGE, from_character
        from src.core.models import Character, ConversationType
        luna = Character(name="Luna", avatar="https://img/luna.png", greeting_message="Hi")
        conv = from_character(luna, now=NOW)
        assert conv.id == luna.id
        assert conv.name == "Luna"
        assert conv.greeting_message == "Hi"
        assert conv.last_message == PLACEHOLDER_MESSAGE
        assert conv.last_message_time == NOW
        assert conv.type == ConversationType.CHARACTER

    def test_from_story_uses_character_name_and_cover(self):
        from src.core.conversations import from_story
        from src.core.models import Story
        story = Story(title="Heist", cover="https://img/heist.png", character_name="Vex")
        conv = from_story(story, now=NOW)
        assert conv.name == "Vex"
        assert conv.avatar == "https://img/heist.png"
        assert conv.type.value == "story"

    def test_from_private_character_without_avatar(self):
        from src.core.conversations import from_private_character
        from src.core.models import PrivateCharacter
        conv = from_private_character(PrivateCharacter(name="Iris"), now=NOW)
        assert conv.avatar == ""
        assert conv.type.value == "privateCharacter"

    def test_from_record_dispatches(self):
        from src.core.conversations import from_record
        from src.core.models import PrivateCharacter, Story
        assert from_record(Story(title="T", cover="c")).type.value == "story"
        assert from_record(PrivateCharacter(name="P")).type.value == "privateCharacter"

    def test_default_time_is_aware(self):
        from src.core.conversations import from_record
        from src.core.models import PrivateCharacter
        assert from_record(PrivateCharacter(name="P")).last_message_time.tzinfo is not None


class TestConversationValidation:

    def _data(self, **overrides):
        data = {
            "id": "s1",
            "name": "Vex",
            "avatar": "c",
            "last_message": "x",
            "last_message_time": "2026-03-01T10:00:00Z",
            "type": "story",
            "record": {"id": "s1", "title": "Heist", "cover": "c", "character_name": "Vex"},
        }
        data.update(overrides)
        return data

    def test_record_decoded_by_type(self):
        from src.core.models import Conversation, Story
        conv = Conversation.model_validate(self._data())
        assert isinstance(conv.record, Story)

    def test_private_record_not_mistaken_for_character(self):
        from src.core.models import Conversation, PrivateCharacter
        conv = Conversation.model_validate(self._data(
            id="p1",
            type="privateCharacter",
            record={"id": "p1", "name": "Iris", "avatar": "a"},
        ))
        assert isinstance(conv.record, PrivateCharacter)

    def test_mismatched_id_rejected(self):
        from src.core.models import Conversation
        with pytest.raises(ValidationError):
            Conversation.model_validate(self._data(id="other"))

    def test_mismatched_variant_rejected(self):
        from src.core.models import Character, Conversation, ConversationType
        with pytest.raises(ValidationError):
            Conversation(
                id="c1", name="n", avatar="a", last_message="x", last_message_time=NOW,
                type=ConversationType.STORY,
                record=Character(id="c1", name="n", avatar="a"),
            )

    def test_naive_time_becomes_utc(self):
        from src.core.models import Conversation
        conv = Conversation.model_validate(self._data(last_message_time="2026-03-01T10:00:00"))
        assert conv.last_message_time == NOW


class TestSchemaExamples:

    def test_character_schema_carries_example(self):
        from src.core.models import Character
        assert Character.model_json_schema()["example"]["name"] == "Luna"


class TestUser:

    def test_default_balance(self):
        from src.core.models import User
        assert User(username="a", email="a@example.com", age=20, gender="male").diamonds == 30

    def test_negative_balance_rejected(self):
        from src.core.models import User
        with pytest.raises(ValidationError):
            User(username="a", email="a@example.com", age=20, gender="male", diamonds=-1)
