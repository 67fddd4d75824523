"""Supabase client initialisation for the character catalog."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from supabase import Client, create_client

load_dotenv()


@lru_cache(maxsize=1)
def get_client() -> Client:
    """Return a cached Supabase client built from SUPABASE_URL / SUPABASE_KEY."""
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if not url or not key:
        raise EnvironmentError(
            "SUPABASE_URL and SUPABASE_KEY must be set. "
            "Add them to your environment or to a .env file in the project root."
        )
    return create_client(url, key)
