"""
Repositorios para operaciones sobre Supabase.

El store es un colaborador externo: lectura y escritura de un documento
por usuario, last-writer-wins. El cliente de supabase es bloqueante, así
que cada llamada corre en un thread; los errores de red se reintentan
sin frenar el event loop y, si persisten, se reportan como
ProfileUnavailable.
"""

import asyncio
from typing import Callable, Optional, TypeVar

import structlog
from pydantic import ValidationError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from homerunn.config import Settings, get_settings
from homerunn.database.supabase_client import get_supabase_client, SupabaseClient
from homerunn.exceptions import ProfileUnavailable
from homerunn.models import DislikedListing, UserProfile
from homerunn.models.profile import utcnow_iso

logger = structlog.get_logger()

T = TypeVar("T")


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client


class ProfileRepository(BaseRepository):
    """Repositorio de perfiles de match (un documento por usuario)."""

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        settings: Optional[Settings] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        super().__init__(client)
        self.settings = settings or get_settings()
        self.table_name = self.settings.profiles_table
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)

    async def _with_retry(
        self, user_id: str, operation: str, call: Callable[[], T]
    ) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.store_retry_attempts),
            wait=self._retry_wait,
            reraise=True,
        )
        try:
            return await retrying(asyncio.to_thread, call)
        except Exception as e:
            logger.error(
                "Error accediendo al store de perfiles",
                user_id=user_id,
                operation=operation,
                error=str(e),
            )
            raise ProfileUnavailable(user_id, operation) from e

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """
        Obtiene el perfil de un usuario.

        Returns:
            UserProfile, o None si el usuario todavía no tiene perfil

        Raises:
            ProfileUnavailable: Si el store falla o el documento es ilegible
        """
        response = await self._with_retry(
            user_id,
            "get_profile",
            lambda: (
                self.client.table(self.table_name)
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            ),
        )
        if not response.data:
            return None

        try:
            profile = UserProfile.model_validate(response.data[0])
        except ValidationError as e:
            logger.error("Perfil corrupto en el store", user_id=user_id, error=str(e))
            raise ProfileUnavailable(user_id, "get_profile") from e

        if profile.user_id is None:
            profile.user_id = user_id
        return profile

    async def set_profile(self, user_id: str, profile: UserProfile) -> UserProfile:
        """
        Guarda (upsert) el perfil de un usuario.

        Raises:
            ProfileUnavailable: Si el store falla
        """
        data = profile.to_db_dict()
        data["user_id"] = user_id
        data["updated_at"] = utcnow_iso()

        await self._with_retry(
            user_id,
            "set_profile",
            lambda: (
                self.client.table(self.table_name)
                .upsert(data, on_conflict="user_id")
                .execute()
            ),
        )
        logger.debug(
            "Perfil guardado",
            user_id=user_id,
            signature=profile.current_signature,
            swipes=profile.global_swipe_count,
        )
        return profile.model_copy(update={"user_id": user_id})

    async def get_or_create_profile(self, user_id: str) -> UserProfile:
        """Obtiene el perfil existente o crea y persiste uno por defecto."""
        existing = await self.get_profile(user_id)
        if existing is not None:
            return existing

        logger.info("Perfil inexistente, se crea uno por defecto", user_id=user_id)
        return await self.set_profile(user_id, UserProfile.default(user_id))

    async def save_disliked_listings(
        self, user_id: str, disliked: list[DislikedListing]
    ) -> None:
        """
        Reescribe solo la lista de descartados del perfil.

        No toca el contador ni los histogramas, así una poda no pisa un
        feedback escrito por otro proceso entre la lectura y la escritura.

        Raises:
            ProfileUnavailable: Si el store falla
        """
        data = {
            "disliked_listings": [entry.model_dump(mode="json") for entry in disliked],
            "updated_at": utcnow_iso(),
        }
        await self._with_retry(
            user_id,
            "save_disliked_listings",
            lambda: (
                self.client.table(self.table_name)
                .update(data)
                .eq("user_id", user_id)
                .execute()
            ),
        )
        logger.debug("Descartados actualizados", user_id=user_id, count=len(disliked))
