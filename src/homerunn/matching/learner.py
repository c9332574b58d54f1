"""
Aprendizaje online de preferencias a partir de swipes.

Cada feedback suma o resta puntos al símbolo del listing en el
histograma de cada slot, y la firma del usuario pasa a ser el argmax
de cada histograma. No hay entrenamiento: es una suma por slot.

La actualización no es conmutativa (depende del estado previo), así
que los eventos de un mismo usuario se aplican de a uno y en orden.
"""

from typing import Optional, Union

import structlog

from homerunn.models import (
    SIGNATURE_LENGTH,
    SLOTS,
    DislikedListing,
    FeedbackDirection,
    Signature,
    UserProfile,
)
from homerunn.models.profile import utcnow_iso
from homerunn.models.signature import ordinal_position

logger = structlog.get_logger()

# Puntos por símbolo según la acción (los puntajes nunca bajan de 0)
FEEDBACK_DELTAS = {
    FeedbackDirection.DISLIKE: -1,
    FeedbackDirection.LIKE: 1,
    FeedbackDirection.LOVE: 3,
}


def apply_feedback(
    profile: UserProfile,
    listing_id: str,
    listing_signature: Union[Signature, str],
    direction: Union[FeedbackDirection, str],
) -> UserProfile:
    """
    Aplica un evento de feedback y devuelve el perfil actualizado.

    El perfil recibido no se modifica. Todos los pasos (contador, listas,
    histogramas, firma) se aplican sobre una copia y se devuelven juntos.

    Args:
        profile: Perfil actual del usuario
        listing_id: ID del listing swipeado
        listing_signature: Firma del listing
        direction: dislike/like/love (o el gesto left/right/top)

    Returns:
        Nuevo UserProfile

    Raises:
        MalformedSignature: Si la firma del listing es inválida
        ValueError: Si falta el listing_id o la dirección no existe
    """
    signature = Signature.parse(listing_signature)
    direction = FeedbackDirection.parse(direction)
    if not listing_id:
        raise ValueError("listing_id es requerido para registrar feedback")

    updated = profile.model_copy(deep=True)

    # 1) Reloj lógico
    updated.global_swipe_count += 1
    if direction is FeedbackDirection.DISLIKE:
        updated.swipe_counts.left += 1
    elif direction is FeedbackDirection.LIKE:
        updated.swipe_counts.right += 1
    else:
        updated.swipe_counts.up += 1

    # 2) Listas: un id vive en una sola
    _move_listing(updated, listing_id, direction)

    # 3) Histogramas
    delta = FEEDBACK_DELTAS[direction]
    for slot, symbol in enumerate(signature):
        histogram = updated.slot_histograms[slot]
        histogram[symbol] = max(0, histogram.get(symbol, 0) + delta)

    # 4) Firma
    updated.current_signature = str(
        recompute_signature(updated.slot_histograms, profile.signature, signature)
    )
    updated.updated_at = utcnow_iso()

    logger.debug(
        "Firma de usuario actualizada",
        user_id=updated.user_id,
        signature=updated.current_signature,
        slot0=updated.slot_histograms[0],
    )
    return updated


def _move_listing(
    profile: UserProfile, listing_id: str, direction: FeedbackDirection
) -> None:
    profile.disliked_listings = [
        entry for entry in profile.disliked_listings if entry.listing_id != listing_id
    ]
    profile.liked_listings = [i for i in profile.liked_listings if i != listing_id]
    profile.loved_listings = [i for i in profile.loved_listings if i != listing_id]

    if direction is FeedbackDirection.DISLIKE:
        profile.disliked_listings.append(
            DislikedListing(
                listing_id=listing_id,
                disliked_at_swipe_count=profile.global_swipe_count,
            )
        )
    elif direction is FeedbackDirection.LIKE:
        profile.liked_listings.append(listing_id)
    else:
        profile.loved_listings.append(listing_id)


def preferred_symbol(histogram: dict[str, int], slot: int) -> Optional[str]:
    """
    Símbolo con el puntaje estrictamente más alto del slot.

    Empates: gana el de menor posición en el alfabeto ordinal, así el
    resultado no depende del orden de las claves al persistir.
    Devuelve None si no hay ningún puntaje positivo.
    """
    alphabet = SLOTS[slot].alphabet
    best_symbol = None
    best_score = 0
    for symbol, score in histogram.items():
        if len(symbol) != 1 or symbol not in alphabet or score <= 0:
            continue
        if score > best_score or (
            score == best_score
            and ordinal_position(symbol) < ordinal_position(best_symbol)
        ):
            best_symbol = symbol
            best_score = score
    return best_symbol


def recompute_signature(
    histograms: list[dict[str, int]],
    previous: Optional[Signature],
    listing_signature: Signature,
) -> Signature:
    """
    Recalcula la firma del usuario a partir de los histogramas.

    Un slot sin puntajes positivos conserva el símbolo previo; si no hay
    firma previa, toma el del listing.
    """
    symbols = []
    for slot in range(SIGNATURE_LENGTH):
        symbol = preferred_symbol(histograms[slot], slot)
        if symbol is None:
            symbol = previous[slot] if previous is not None else listing_signature[slot]
        symbols.append(symbol)
    return Signature("".join(symbols))
