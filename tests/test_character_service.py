"""Unit tests for src/catalog/character_service.py (Supabase client mocked)."""

from unittest.mock import MagicMock

import pytest


def _row(name: str, **extra) -> dict:
    return {"id": f"id-{name}", "name": name, "avatar": f"https://img/{name}.png", **extra}


@pytest.fixture
def cache():
    from src.memory.cache import CacheLayer
    return CacheLayer(ttl_seconds=300)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def service(cache, client):
    from src.catalog.character_service import CharacterService
    return CharacterService(cache, client_factory=lambda: client)


def _failing_factory():
    raise EnvironmentError("SUPABASE_URL is not set")


class TestFetchCharacters:

    def test_returns_rows_as_characters(self, service, client):
        query = client.table.return_value.select.return_value.eq.return_value.order.return_value
        query.execute.return_value.data = [_row("Luna", popularity=10), _row("Kai", popularity=5)]
        result = service.fetch_characters("featured")
        assert [c.name for c in result] == ["Luna", "Kai"]
        client.table.assert_called_with("characters")
        client.table.return_value.select.return_value.eq.assert_called_with("category", "featured")

    def test_second_call_served_from_cache(self, service, client):
        query = client.table.return_value.select.return_value.eq.return_value.order.return_value
        query.execute.return_value.data = [_row("Luna")]
        service.fetch_characters("featured")
        service.fetch_characters("featured")
        assert query.execute.call_count == 1

    def test_failure_falls_back_to_samples(self, cache):
        from src.catalog.character_service import CharacterService
        from src.catalog.sample_data import FEATURED_CHARACTERS
        service = CharacterService(cache, client_factory=_failing_factory)
        assert service.fetch_characters("featured") == FEATURED_CHARACTERS

    def test_fallback_is_not_cached(self, cache):
        from src.catalog.character_service import CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        service.fetch_characters("featured")
        assert cache.get_characters("featured") is None

    def test_unknown_category_fallback_is_empty(self, cache):
        from src.catalog.character_service import CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        assert service.fetch_characters("anime") == []

    def test_private_category_fallback(self, cache):
        from src.catalog.character_service import CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        assert [c.name for c in service.fetch_characters("private")] == ["Iris"]

    def test_fallback_ids_are_stable(self, cache):
        from src.catalog.character_service import CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        first = [c.id for c in service.fetch_characters("featured")]
        assert first == ["sample-luna", "sample-kai", "sample-momo"]
        assert [c.id for c in service.fetch_characters("featured")] == first

    def test_sample_ids_are_unique(self):
        from src.catalog import sample_data
        records = sample_data.FEATURED_CHARACTERS + sample_data.PRIVATE_CHARACTERS + sample_data.STORIES
        ids = [r.id for r in records]
        assert len(set(ids)) == len(ids)


class TestFetchStories:

    def test_returns_stories(self, service, client):
        query = client.table.return_value.select.return_value.order.return_value
        query.execute.return_value.data = [{"id": "s1", "title": "Heist", "cover": "https://img/h.png"}]
        stories = service.fetch_stories()
        assert stories[0].title == "Heist"
        assert service.cache.get_stories() == stories

    def test_failure_falls_back(self, cache):
        from src.catalog.character_service import CharacterService
        from src.catalog.sample_data import STORIES
        service = CharacterService(cache, client_factory=_failing_factory)
        assert service.fetch_stories() == STORIES


class TestPrivateCharacters:

    def test_fetch_for_user(self, service, client):
        query = client.table.return_value.select.return_value.eq.return_value.order.return_value
        query.execute.return_value.data = [_row("Iris", user_id="u1")]
        result = service.fetch_private_characters("u1")
        assert result[0].user_id == "u1"

    def test_fetch_failure_returns_empty(self, cache):
        from src.catalog.character_service import CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        assert service.fetch_private_characters("u1") == []

    def test_create_stamps_owner_and_invalidates(self, service, client, cache):
        from src.core.models import PrivateCharacter
        cache.put_private_characters([], "u1")
        client.table.return_value.insert.return_value.execute.return_value.data = [
            _row("Nova", user_id="u1")
        ]
        created = service.create_private_character(PrivateCharacter(name="Nova"), "u1")
        assert created.user_id == "u1"
        inserted = client.table.return_value.insert.call_args[0][0]
        assert inserted["user_id"] == "u1"
        assert cache.get_private_characters("u1") is None

    def test_delete_invalidates_user_cache(self, service, client, cache):
        cache.put_private_characters([], "u1")
        service.delete_private_character("p1", "u1")
        client.table.assert_called_with("private_characters")
        assert cache.get_private_characters("u1") is None

    def test_create_failure_raises(self, cache):
        from src.catalog.character_service import CatalogError, CharacterService
        from src.core.models import PrivateCharacter
        service = CharacterService(cache, client_factory=_failing_factory)
        with pytest.raises(CatalogError):
            service.create_private_character(PrivateCharacter(name="Nova"), "u1")


class TestSearchAndWrites:

    def test_search_characters(self, service, client):
        query = client.table.return_value.select.return_value.or_.return_value
        query.execute.return_value.data = [_row("Luna")]
        assert [c.name for c in service.search_characters("lu")] == ["Luna"]
        assert "lu" in client.table.return_value.select.return_value.or_.call_args[0][0]

    def test_search_failure_raises(self, cache):
        from src.catalog.character_service import CatalogError, CharacterService
        service = CharacterService(cache, client_factory=_failing_factory)
        with pytest.raises(CatalogError):
            service.search_stories("x")

    def test_create_character_invalidates_category(self, service, client, cache):
        from src.core.models import Character
        cache.put_characters([], "featured")
        client.table.return_value.insert.return_value.execute.return_value.data = [_row("Zed")]
        service.create_character(Character(name="Zed", avatar="https://img/zed.png"))
        assert cache.get_characters("featured") is None

    def test_create_user_failure_raises(self, cache):
        from src.catalog.character_service import CatalogError, CharacterService
        from src.core.models import User
        service = CharacterService(cache, client_factory=_failing_factory)
        with pytest.raises(CatalogError):
            service.create_user(User(username="a", email="a@example.com", age=20, gender="male"))
