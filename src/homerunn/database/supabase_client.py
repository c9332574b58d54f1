"""
Cliente de Supabase para el store de perfiles.

Un único cliente por proceso; los repositorios lo reciben inyectado o
lo toman de get_supabase_client().
"""

from functools import lru_cache

import structlog
from supabase import create_client, Client

from homerunn.config import Settings, get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Envuelve el cliente de Supabase y expone solo lo que usan los repositorios."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        """Query builder de postgrest para la tabla."""
        return self._client.table(name)


def _resolve_key(settings: Settings) -> str:
    # El service key saltea RLS: los perfiles se escriben desde el backend
    if settings.supabase_service_key:
        return settings.supabase_service_key
    if settings.supabase_key:
        return settings.supabase_key
    raise ValueError("Falta SUPABASE_KEY (o SUPABASE_SERVICE_KEY) en el entorno")


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Cliente de Supabase cacheado para todo el proceso.

    Raises:
        ValueError: Si falta la URL o la key del proyecto
    """
    settings = get_settings()
    if not settings.supabase_url:
        raise ValueError("Falta SUPABASE_URL en el entorno")

    client = create_client(settings.supabase_url, _resolve_key(settings))
    logger.info(
        "Cliente de Supabase inicializado",
        url=settings.supabase_url,
        service_key=bool(settings.supabase_service_key),
    )
    return SupabaseClient(client)
