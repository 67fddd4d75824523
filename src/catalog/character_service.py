"""
Remote character catalog (Supabase) behind the TTL cache.

Tables used: ``characters``, ``stories``, ``private_characters``, ``users``.

Listing calls (characters by category, stories, a user's private
characters) never raise: on a remote failure they return built-in sample
data (or an empty list). Search and write calls raise ``CatalogError`` so
the caller can decide what to show.
"""
from __future__ import annotations

from typing import Callable, List

from src.core.models import Character, PrivateCharacter, Story, User
from src.memory.cache import CacheLayer
from src.utils.logging import get_logger

from . import sample_data
from .supabase_client import get_client

logger = get_logger(__name__)


class CatalogError(Exception):
    """A remote catalog call failed."""


def _fallback_characters(category: str) -> List[Character]:
    if category == "featured":
        return list(sample_data.FEATURED_CHARACTERS)
    if category == "private":
        return list(sample_data.PRIVATE_CHARACTERS)
    return []


class CharacterService:
    """Fetches catalog records, consulting the cache first."""

    def __init__(self, cache: CacheLayer, client_factory: Callable = get_client) -> None:
        self.cache = cache
        self._client_factory = client_factory

    def _table(self, name: str):
        return self._client_factory().table(name)

    # ── listings (fallback, never raise) ──────────────────────────────────────

    def fetch_characters(self, category: str) -> List[Character]:
        """Return characters in *category*, most popular first."""
        cached = self.cache.get_characters(category)
        if cached is not None:
            logger.info("Using cached characters for category: %s", category)
            return cached
        try:
            response = (
                self._table("characters")
                .select("*")
                .eq("category", category)
                .order("popularity", desc=True)
                .execute()
            )
            characters = [Character.model_validate(row) for row in response.data]
        except Exception as exc:
            logger.error("Failed to fetch characters (category: %s): %s", category, exc, exc_info=True)
            return _fallback_characters(category)
        logger.info("Fetched %d characters (category: %s)", len(characters), category)
        self.cache.put_characters(characters, category)
        return characters

    def fetch_stories(self) -> List[Story]:
        cached = self.cache.get_stories()
        if cached is not None:
            logger.info("Using cached stories")
            return cached
        try:
            response = (
                self._table("stories")
                .select("*")
                .order("popularity", desc=True)
                .execute()
            )
            stories = [Story.model_validate(row) for row in response.data]
        except Exception as exc:
            logger.error("Failed to fetch stories: %s", exc, exc_info=True)
            return list(sample_data.STORIES)
        logger.info("Fetched %d stories", len(stories))
        self.cache.put_stories(stories)
        return stories

    def fetch_private_characters(self, user_id: str) -> List[PrivateCharacter]:
        cached = self.cache.get_private_characters(user_id)
        if cached is not None:
            logger.info("Using cached private characters for user %s", user_id)
            return cached
        try:
            response = (
                self._table("private_characters")
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            characters = [PrivateCharacter.model_validate(row) for row in response.data]
        except Exception as exc:
            logger.error("Failed to fetch private characters (user %s): %s", user_id, exc, exc_info=True)
            return []
        self.cache.put_private_characters(characters, user_id)
        return characters

    # ── search ────────────────────────────────────────────────────────────────

    def search_characters(self, query: str) -> List[Character]:
        try:
            response = (
                self._table("characters")
                .select("*")
                .or_(f"name.ilike.*{query}*,description.ilike.*{query}*")
                .execute()
            )
            return [Character.model_validate(row) for row in response.data]
        except Exception as exc:
            logger.error("Character search failed for %r: %s", query, exc)
            raise CatalogError(f"Character search failed: {exc}") from exc

    def search_stories(self, query: str) -> List[Story]:
        try:
            response = (
                self._table("stories")
                .select("*")
                .or_(f"title.ilike.*{query}*,description.ilike.*{query}*")
                .execute()
            )
            return [Story.model_validate(row) for row in response.data]
        except Exception as exc:
            logger.error("Story search failed for %r: %s", query, exc)
            raise CatalogError(f"Story search failed: {exc}") from exc

    # ── writes ────────────────────────────────────────────────────────────────

    def create_character(self, character: Character) -> Character:
        try:
            response = self._table("characters").insert(character.model_dump(mode="json")).execute()
            created = Character.model_validate(response.data[0])
        except Exception as exc:
            logger.error("Failed to create character %s: %s", character.name, exc)
            raise CatalogError(f"Could not create character: {exc}") from exc
        self.cache.invalidate_characters(created.category)
        logger.info("Created character: %s", created.name)
        return created

    def create_private_character(self, character: PrivateCharacter, user_id: str) -> PrivateCharacter:
        """Insert *character* owned by *user_id* and drop that user's cached list."""
        owned = character.model_copy(update={"user_id": user_id})
        try:
            response = self._table("private_characters").insert(owned.model_dump(mode="json")).execute()
            created = PrivateCharacter.model_validate(response.data[0])
        except Exception as exc:
            logger.error("Failed to create private character %s: %s", character.name, exc)
            raise CatalogError(f"Could not create private character: {exc}") from exc
        self.cache.invalidate_private_characters(user_id)
        logger.info("Created private character: %s (user %s)", created.name, user_id)
        return created

    def delete_private_character(self, character_id: str, user_id: str) -> None:
        try:
            self._table("private_characters").delete().eq("id", character_id).eq("user_id", user_id).execute()
        except Exception as exc:
            logger.error("Failed to delete private character %s: %s", character_id, exc)
            raise CatalogError(f"Could not delete private character: {exc}") from exc
        self.cache.invalidate_private_characters(user_id)

    def create_user(self, user: User) -> User:
        try:
            response = self._table("users").insert(user.model_dump(mode="json")).execute()
            return User.model_validate(response.data[0])
        except Exception as exc:
            logger.error("Failed to create user %s: %s", user.username, exc)
            raise CatalogError(f"Could not create user: {exc}") from exc

    def delete_user(self, user_id: str) -> None:
        try:
            self._table("users").delete().eq("id", user_id).execute()
        except Exception as exc:
            logger.error("Failed to delete user %s: %s", user_id, exc)
            raise CatalogError(f"Could not delete user: {exc}") from exc

