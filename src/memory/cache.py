"""
In-memory TTL cache in front of the remote character catalog.

One logical key → payload map covers all three namespaces:

    characters_<category>   list[Character]
    stories                 list[Story]
    private_<user_id>       list[PrivateCharacter]

Entries are never evicted in the background; a read simply treats an entry
older than the TTL as absent.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.core.models import Character, PrivateCharacter, Story
from src.utils.config import get_section
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0

STORIES_KEY = "stories"


def characters_key(category: str) -> str:
    return f"characters_{category}"


def private_characters_key(user_id: str) -> str:
    return f"private_{user_id}"


class CacheLayer:
    """Time-expiring cache keyed by string."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds is None:
            ttl_seconds = float(get_section("cache").get("ttl_seconds", DEFAULT_TTL_SECONDS))
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    # ── generic API ───────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[Any]:
        """Return the payload for *key* while it is fresh, else None."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        payload, stored_at = entry
        if self._clock() - stored_at < self.ttl_seconds:
            return payload
        return None

    def put(self, key: str, payload: Any) -> None:
        with self._lock:
            self._entries[key] = (payload, self._clock())

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Cache cleared")

    # ── typed helpers ─────────────────────────────────────────────────────────

    def get_characters(self, category: str) -> Optional[List[Character]]:
        return self.get(characters_key(category))

    def put_characters(self, characters: List[Character], category: str) -> None:
        self.put(characters_key(category), list(characters))

    def invalidate_characters(self, category: str) -> None:
        self.invalidate(characters_key(category))

    def get_stories(self) -> Optional[List[Story]]:
        return self.get(STORIES_KEY)

    def put_stories(self, stories: List[Story]) -> None:
        self.put(STORIES_KEY, list(stories))

    def get_private_characters(self, user_id: str) -> Optional[List[PrivateCharacter]]:
        return self.get(private_characters_key(user_id))

    def put_private_characters(self, characters: List[PrivateCharacter], user_id: str) -> None:
        self.put(private_characters_key(user_id), list(characters))

    def invalidate_private_characters(self, user_id: str) -> None:
        self.invalidate(private_characters_key(user_id))
