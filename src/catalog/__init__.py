"""Remote character catalog (Supabase) with sample-data fallback."""
from .character_service import CatalogError, CharacterService

__all__ = ["CatalogError", "CharacterService"]
