"""
Módulo de base de datos.

Provee acceso a Supabase y el adapter de perfiles de match.
"""

from homerunn.database.supabase_client import get_supabase_client, SupabaseClient
from homerunn.database.repositories import BaseRepository, ProfileRepository

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "BaseRepository",
    "ProfileRepository",
]
