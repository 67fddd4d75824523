"""Local chat state: blob storage, TTL cache, conversations, messages, accounts."""
from .blob_store import KeyedBlobStore, SQLiteBlobStore, InMemoryBlobStore
from .cache import CacheLayer
from .conversation_store import ConversationStore
from .message_store import MessageStore
from .account_store import AccountStore
from .gallery_store import GalleryStore
from .locks import KeyedLocks

__all__ = [
    "KeyedBlobStore",
    "SQLiteBlobStore",
    "InMemoryBlobStore",
    "CacheLayer",
    "ConversationStore",
    "MessageStore",
    "AccountStore",
    "GalleryStore",
    "KeyedLocks",
]
