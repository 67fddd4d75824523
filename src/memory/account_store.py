"""
User accounts and the diamonds balance.

Persisted layout (blob store)
-----------------------------
user_<user_id> : JSON User record

Diamonds gate chat messages (``chat_cost``) and gallery unlocks
(``gallery_cost``). Spending never raises: an unaffordable or invalid spend
simply returns False and leaves the balance untouched.

Usage
-----
    accounts = AccountStore(blobs)
    user = accounts.create_user("shawn", "shawn@example.com", 26, "male")
    if accounts.spend_diamonds(user.id, accounts.chat_cost()):
        ...
"""
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from src.core.models import User
from src.memory.blob_store import KeyedBlobStore
from src.memory.locks import KeyedLocks
from src.utils.config import get_section
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DIAMONDS = 30
CHAT_COST = 2
GALLERY_COST = 50


def user_key(user_id: str) -> str:
    return f"user_{user_id}"


class AccountStore:
    """Blob-backed user records and diamonds ledger."""

    def __init__(self, blobs: KeyedBlobStore, locks: Optional[KeyedLocks] = None) -> None:
        """
        Parameters
        ----------
        blobs : KeyedBlobStore
            Storage for the serialized user records.
        locks : KeyedLocks, optional
            Shared per-key locks; a private set is created when omitted.
        """
        self.blobs = blobs
        self.locks = locks or KeyedLocks()
        economy = get_section("economy")
        self.default_diamonds = int(economy.get("default_diamonds", DEFAULT_DIAMONDS))
        self._chat_cost = int(economy.get("chat_cost", CHAT_COST))
        self._gallery_cost = int(economy.get("gallery_cost", GALLERY_COST))

    # ── users ─────────────────────────────────────────────────────────────────

    def create_user(
        self,
        username: str,
        email: str,
        age: int,
        gender: str,
        avatar: Optional[str] = None,
    ) -> User:
        """Create and persist a user starting with the default diamonds balance."""
        user = User(
            username=username,
            email=email,
            age=age,
            gender=gender,
            avatar=avatar,
            level=1,
            diamonds=self.default_diamonds,
        )
        self.save_user(user)
        logger.info("Created user %s (%s)", user.username, user.id)
        return user

    def save_user(self, user: User) -> None:
        self.blobs.set(user_key(user.id), user.model_dump_json().encode("utf-8"))

    def load_user(self, user_id: str) -> Optional[User]:
        """Return the stored user, or None when absent or unreadable."""
        data = self.blobs.get(user_key(user_id))
        if data is None:
            return None
        try:
            return User.model_validate_json(data)
        except ValidationError as exc:
            logger.warning("Unreadable user record %s: %s", user_id, exc)
            return None

    def delete_user(self, user_id: str) -> None:
        with self.locks.hold(user_key(user_id)):
            self.blobs.remove(user_key(user_id))

    def update_profile(self, user_id: str, username: str, age: int, gender: str) -> Optional[User]:
        """Change profile fields, keeping id, email, level and balance."""
        with self.locks.hold(user_key(user_id)):
            user = self.load_user(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={"username": username, "age": age, "gender": gender})
            self.save_user(updated)
            return updated

    # ── diamonds ──────────────────────────────────────────────────────────────

    def chat_cost(self) -> int:
        return self._chat_cost

    def gallery_cost(self) -> int:
        return self._gallery_cost

    def balance(self, user_id: str) -> int:
        """Return the current diamonds balance (0 for unknown users)."""
        user = self.load_user(user_id)
        return user.diamonds if user else 0

    def spend_diamonds(self, user_id: str, amount: int) -> bool:
        """
        Deduct *amount* diamonds if the user can afford it.

        Returns
        -------
        bool
            True when the deduction happened; False for a non-positive
            amount, an unknown user or an insufficient balance.
        """
        if amount <= 0:
            return False
        with self.locks.hold(user_key(user_id)):
            user = self.load_user(user_id)
            if user is None or user.diamonds < amount:
                logger.info("Spend of %d diamonds refused for user %s", amount, user_id)
                return False
            self.save_user(user.model_copy(update={"diamonds": user.diamonds - amount}))
        return True

    def add_diamonds(self, user_id: str, amount: int) -> Optional[int]:
        """Credit *amount* diamonds and return the new balance (None for unknown users)."""
        with self.locks.hold(user_key(user_id)):
            user = self.load_user(user_id)
            if user is None:
                return None
            if amount <= 0:
                return user.diamonds
            new_balance = user.diamonds + amount
            self.save_user(user.model_copy(update={"diamonds": new_balance}))
        return new_balance
