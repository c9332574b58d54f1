"""
Motor de matching entre usuarios y propiedades.

Orquesta el flujo completo:
- Feedback: swipe -> PreferenceLearner -> perfil persistido
- Feed: batch de listings + perfil -> cooldown -> ranking -> resultados
"""

import asyncio
import weakref
from dataclasses import dataclass
from typing import Iterable, Optional, Union

import structlog

from homerunn.config import Settings, get_settings
from homerunn.database import ProfileRepository
from homerunn.exceptions import ProfileUnavailable
from homerunn.matching.learner import apply_feedback
from homerunn.matching.ranking import (
    RankOptions,
    listing_signature,
    prune_expired_dislikes,
    rank,
)
from homerunn.matching.scoring import match_score, signature_similarity
from homerunn.models import FeedbackDirection, Listing, Signature, UserProfile

logger = structlog.get_logger()


@dataclass
class MatchResult:
    """Resultado de matching para un listing."""

    listing_id: Optional[str]
    listing: Listing
    signature: Signature
    match_score: int  # 0 a 150, el que ordena el feed
    similarity: int  # 0 a 100, firma del usuario vs firma del listing


class MatchingEngine:
    """
    Motor de matching basado en firmas.

    Los eventos de un mismo usuario se serializan con un lock por
    usuario: el aprendizaje no es conmutativo y una escritura perdida
    corrompe el perfil en silencio.
    """

    def __init__(
        self,
        profile_repo: Optional[ProfileRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.profile_repo = profile_repo or ProfileRepository(settings=self.settings)
        # Un lock vive mientras alguien lo usa o lo espera
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def _load_profile(self, user_id: str) -> UserProfile:
        profile = await self.profile_repo.get_profile(user_id)
        if profile is None:
            return UserProfile.default(user_id)
        return profile

    async def record_feedback(
        self,
        user_id: str,
        listing: Union[Listing, dict],
        direction: Union[FeedbackDirection, str],
    ) -> UserProfile:
        """
        Registra un swipe y persiste el perfil actualizado.

        Args:
            user_id: UUID del usuario
            listing: Listing swipeado (o dict crudo de la API)
            direction: dislike/like/love o el gesto left/right/top

        Returns:
            Perfil actualizado

        Raises:
            ProfileUnavailable: Si el store no responde
            ValueError: Si el listing no tiene id o la dirección es inválida
        """
        if not isinstance(listing, Listing):
            listing = Listing.model_validate(listing)
        direction = FeedbackDirection.parse(direction)
        signature = listing_signature(listing)

        async with self._lock_for(user_id):
            profile = await self._load_profile(user_id)
            updated = apply_feedback(profile, listing.id, signature, direction)
            saved = await self.profile_repo.set_profile(user_id, updated)

        logger.info(
            "Feedback registrado",
            user_id=user_id,
            listing_id=listing.id,
            direction=direction.value,
            signature=saved.current_signature,
            swipes=saved.global_swipe_count,
        )
        return saved

    async def build_feed(
        self,
        user_id: str,
        listings: Iterable[Union[Listing, dict]],
        respect_stable_cards: Optional[bool] = None,
        always_show_ids: Iterable[str] = (),
    ) -> list[MatchResult]:
        """
        Filtra y ordena un batch de listings para el feed de un usuario.

        Si el store de perfiles no responde, el feed sale sin
        personalización (perfil en cero) en lugar de fallar.

        Args:
            user_id: UUID del usuario
            listings: Batch de listings en el orden recibido
            respect_stable_cards: None = usar el default de settings
            always_show_ids: IDs que saltean el cooldown

        Returns:
            Lista de MatchResult en el orden del feed
        """
        batch = [
            item if isinstance(item, Listing) else Listing.model_validate(item)
            for item in listings
        ]
        options = RankOptions(
            cooldown_swipes=self.settings.cooldown_swipes,
            respect_stable_cards=(
                self.settings.respect_stable_cards
                if respect_stable_cards is None
                else respect_stable_cards
            ),
            always_show_ids=frozenset(always_show_ids),
        )

        async with self._lock_for(user_id):
            try:
                profile = await self._load_profile(user_id)
                personalized = True
            except ProfileUnavailable:
                logger.warning(
                    "Perfil no disponible, feed sin personalización", user_id=user_id
                )
                profile = UserProfile.default(user_id)
                personalized = False

            ordered = rank(batch, profile, options)

            if personalized:
                await self._prune_dislikes(user_id, profile, options.cooldown_swipes)

        user_signature = profile.signature
        results = []
        for listing in ordered:
            signature = listing_signature(listing)
            results.append(
                MatchResult(
                    listing_id=listing.id,
                    listing=listing,
                    signature=signature,
                    match_score=match_score(user_signature, signature),
                    similarity=signature_similarity(user_signature, signature),
                )
            )

        logger.info(
            "Feed construido",
            user_id=user_id,
            received=len(batch),
            returned=len(results),
            ranked=not options.respect_stable_cards,
        )
        return results

    async def _prune_dislikes(
        self, user_id: str, profile: UserProfile, cooldown_swipes: int
    ) -> None:
        pruned = prune_expired_dislikes(profile, cooldown_swipes)
        if pruned is profile:
            return

        removed = len(profile.disliked_listings) - len(pruned.disliked_listings)
        try:
            await self.profile_repo.save_disliked_listings(
                user_id, pruned.disliked_listings
            )
            logger.info("Descartes vencidos podados", user_id=user_id, removed=removed)
        except ProfileUnavailable:
            # Se reintenta en el próximo feed
            logger.warning("No se pudo guardar el perfil podado", user_id=user_id)
