"""
Main Entry Point for the Character Chat Backend

Builds the service graph (storage, cache, catalog, chat flow) as explicit
instances so the HTTP layer and tests can inject their own.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .agents.chat_agent.chat_agent import send_message
from .agents.chat_agent.client import HISTORY_LIMIT
from .catalog.character_service import CharacterService
from .catalog.supabase_client import get_client as get_supabase_client
from .memory.account_store import AccountStore
from .memory.blob_store import KeyedBlobStore, SQLiteBlobStore
from .memory.cache import CacheLayer
from .memory.conversation_store import ConversationStore
from .memory.gallery_store import GalleryStore
from .memory.locks import KeyedLocks
from .memory.message_store import MessageStore
from .utils.config import get_section
from .utils.logging import DATE_FORMAT, LOG_FORMAT, resolve_level
from .workflow.chat_flow import ChatOrchestrator, ReplyFn


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure root logging for the application.

    Args:
        level: Logging level (default: CHATBOT_LOG_LEVEL, then config, then INFO)
    """
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


@dataclass
class Services:
    """Everything the HTTP layer needs, wired together."""
    blobs: KeyedBlobStore
    cache: CacheLayer
    catalog: CharacterService
    conversations: ConversationStore
    messages: MessageStore
    accounts: AccountStore
    gallery: GalleryStore
    chat: ChatOrchestrator


def build_services(
    blobs: Optional[KeyedBlobStore] = None,
    reply_fn: ReplyFn = send_message,
    catalog_client_factory: Callable = get_supabase_client,
    cache: Optional[CacheLayer] = None,
) -> Services:
    """
    Create the service graph.

    Args:
        blobs: Blob store to persist into (defaults to SQLite at the configured path)
        reply_fn: Function generating character replies
        catalog_client_factory: Factory returning a Supabase client
        cache: Catalog cache (defaults to one with the configured TTL)
    """
    if blobs is None:
        db_path = os.environ.get("CHATBOT_DB_PATH") or get_section("storage").get("db_path")
        if db_path:
            db_path = Path(__file__).resolve().parents[1] / db_path
        blobs = SQLiteBlobStore(db_path)

    locks = KeyedLocks()
    cache = cache or CacheLayer()
    conversations = ConversationStore(blobs, locks)
    messages = MessageStore(blobs, locks)
    accounts = AccountStore(blobs, locks)

    return Services(
        blobs=blobs,
        cache=cache,
        catalog=CharacterService(cache, catalog_client_factory),
        conversations=conversations,
        messages=messages,
        accounts=accounts,
        gallery=GalleryStore(blobs, locks),
        chat=ChatOrchestrator(
            conversations=conversations,
            messages=messages,
            accounts=accounts,
            reply_fn=reply_fn,
            history_limit=HISTORY_LIMIT,
        ),
    )
