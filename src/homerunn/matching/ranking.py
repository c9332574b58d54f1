"""
Pipeline de ranking del feed de swipes.

1. Cooldown: un listing descartado no vuelve hasta que pasen
   `cooldown_swipes` swipes desde el descarte. Los listings marcados
   "mostrar siempre" saltean este filtro.
2. Modo cartas estables (default): solo filtra, conserva el orden.
   Las cartas ya visibles en el mazo no se reordenan; el caller
   rankea solo la cola que todavía no se renderizó.
3. Modo rankeado: ordena por match_score descendente, estable ante
   empates.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from homerunn.config import DEFAULT_COOLDOWN_SWIPES, DEFAULT_RESPECT_STABLE_CARDS
from homerunn.exceptions import MalformedSignature
from homerunn.matching.encoder import encode
from homerunn.matching.scoring import match_score
from homerunn.models import Listing, Signature, UserProfile

logger = structlog.get_logger()


@dataclass
class RankOptions:
    """Opciones del pipeline de ranking."""

    cooldown_swipes: int = DEFAULT_COOLDOWN_SWIPES
    respect_stable_cards: bool = DEFAULT_RESPECT_STABLE_CARDS
    always_show_ids: frozenset[str] = field(default_factory=frozenset)


def listing_signature(listing: Listing) -> Signature:
    """
    Firma de un listing: la precalculada si es válida, si no se codifica.
    """
    if listing.signature:
        try:
            return Signature.parse(listing.signature)
        except MalformedSignature as e:
            logger.warning(
                "Firma precalculada inválida, se recalcula",
                listing_id=listing.id,
                error=str(e),
            )
    return encode(listing)


def in_cooldown(
    listing_id: Optional[str], profile: UserProfile, cooldown_swipes: int
) -> bool:
    """True si el listing fue descartado hace menos de `cooldown_swipes` swipes."""
    if listing_id is None:
        return False
    entry = profile.find_disliked(listing_id)
    if entry is None:
        return False
    swipes_since = profile.global_swipe_count - entry.disliked_at_swipe_count
    return swipes_since < cooldown_swipes


def filter_cooldown(
    listings: Sequence[Listing],
    profile: UserProfile,
    options: RankOptions,
) -> list[Listing]:
    """Aplica el filtro de cooldown conservando el orden original."""
    kept = []
    for listing in listings:
        if listing.always_show or listing.id in options.always_show_ids:
            kept.append(listing)
            continue
        if in_cooldown(listing.id, profile, options.cooldown_swipes):
            continue
        kept.append(listing)
    return kept


def rank(
    listings: Sequence[Listing],
    profile: Optional[UserProfile],
    options: Optional[RankOptions] = None,
) -> list[Listing]:
    """
    Filtra y (opcionalmente) ordena un batch de listings para un usuario.

    Args:
        listings: Batch de listings en el orden en que llegaron
        profile: Perfil del usuario (None = sin personalización)
        options: Opciones de ranking

    Returns:
        Lista de listings filtrada y ordenada
    """
    options = options or RankOptions()
    profile = profile or UserProfile.default()

    filtered = filter_cooldown(listings, profile, options)

    if options.respect_stable_cards:
        return filtered

    user_signature = profile.signature
    scored = [
        (match_score(user_signature, listing_signature(listing)), listing)
        for listing in filtered
    ]
    # sort() es estable: los empates conservan el orden original
    scored.sort(key=lambda pair: pair[0], reverse=True)

    distribution = Counter(score for score, _ in scored)
    logger.debug(
        "Distribución de match scores",
        user_id=profile.user_id,
        signature=str(user_signature),
        distribution=dict(sorted(distribution.items(), reverse=True)),
    )
    return [listing for _, listing in scored]


def prune_expired_dislikes(profile: UserProfile, cooldown_swipes: int) -> UserProfile:
    """
    Quita de los descartados las entradas cuyo cooldown ya venció.

    Devuelve el mismo perfil si no hay nada que podar.
    """
    remaining = [
        entry
        for entry in profile.disliked_listings
        if profile.global_swipe_count - entry.disliked_at_swipe_count < cooldown_swipes
    ]
    if len(remaining) == len(profile.disliked_listings):
        return profile
    pruned = profile.model_copy(deep=True)
    pruned.disliked_listings = remaining
    return pruned
