"""
Funciones de scoring entre firmas.

Hay dos funciones distintas y no se deben mezclar:

- signature_similarity: firma vs firma, ponderada por slot, 0 a 100.
- match_score: usuario vs listing, sin pesos, 0 a 150. Es la que usa
  el ranking del feed.
"""

from typing import Union

from homerunn.models import SIGNATURE_LENGTH, SLOTS, Signature, ordinal_distance

SignatureLike = Union[Signature, str]

MAX_SIMILARITY = 100

# Puntos de match_score por distancia ordinal
MATCH_POINTS = {0: 10, 1: 5, 2: 3}
MAX_MATCH_SCORE = MATCH_POINTS[0] * SIGNATURE_LENGTH


def signature_similarity(sig_a: SignatureLike, sig_b: SignatureLike) -> int:
    """
    Similitud ponderada entre dos firmas (0-100).

    Match exacto suma el peso completo del slot. En slots ordinales un
    paso de distancia suma la mitad; tipo, HOA, pool, inversión, smart
    home y escuelas solo puntúan con match exacto.

    Raises:
        MalformedSignature: Si alguna firma es inválida
    """
    a = Signature.parse(sig_a)
    b = Signature.parse(sig_b)

    score = 0.0
    for slot, slot_def in enumerate(SLOTS):
        distance = ordinal_distance(a[slot], b[slot])
        if distance == 0:
            score += slot_def.weight
        elif distance == 1 and slot_def.ordinal:
            score += slot_def.weight * 0.5

    # Redondeo half-up (round() de Python redondea al par)
    return int(score + 0.5)


def match_score(user_signature: SignatureLike, listing_signature: SignatureLike) -> int:
    """
    Score de ranking entre la firma del usuario y la de un listing (0-150).

    Por slot: exacto 10, a un paso 5, a dos pasos 3, más lejos 0.

    Raises:
        MalformedSignature: Si alguna firma es inválida
    """
    user = Signature.parse(user_signature)
    listing = Signature.parse(listing_signature)

    return sum(
        MATCH_POINTS.get(ordinal_distance(u, s), 0)
        for u, s in zip(user, listing)
    )
