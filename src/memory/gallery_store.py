"""Gallery items a user has unlocked with diamonds, per character/story profile."""
from __future__ import annotations

import json
from typing import Optional, Set

from src.memory.account_store import AccountStore
from src.memory.blob_store import KeyedBlobStore, key_part
from src.memory.locks import KeyedLocks
from src.utils.logging import get_logger

logger = get_logger(__name__)


def gallery_key(profile_id: str, user_id: str) -> str:
    return f"unlocked_gallery_{key_part(profile_id)}_{key_part(user_id)}"


class GalleryStore:
    """Set of unlocked media URLs per (profile, user)."""

    def __init__(self, blobs: KeyedBlobStore, locks: Optional[KeyedLocks] = None) -> None:
        self.blobs = blobs
        self.locks = locks or KeyedLocks()

    def unlocked(self, profile_id: str, user_id: str) -> Set[str]:
        data = self.blobs.get(gallery_key(profile_id, user_id))
        if data is None:
            return set()
        try:
            urls = json.loads(data)
        except ValueError:
            logger.warning("Unreadable gallery unlocks for %s/%s", profile_id, user_id)
            return set()
        return {str(u) for u in urls} if isinstance(urls, list) else set()

    def is_unlocked(self, profile_id: str, url: str, user_id: str) -> bool:
        return url in self.unlocked(profile_id, user_id)

    def unlock(self, profile_id: str, url: str, user_id: str, accounts: AccountStore) -> bool:
        """
        Unlock *url* for the user, charging the gallery cost once.

        Already-unlocked items return True without charging. Returns False
        when the user cannot afford the unlock.
        """
        key = gallery_key(profile_id, user_id)
        with self.locks.hold(key):
            urls = self.unlocked(profile_id, user_id)
            if url in urls:
                return True
            if not accounts.spend_diamonds(user_id, accounts.gallery_cost()):
                return False
            urls.add(url)
            self.blobs.set(key, json.dumps(sorted(urls)).encode("utf-8"))
        logger.info("Unlocked gallery item for profile %s (user %s)", profile_id, user_id)
        return True
