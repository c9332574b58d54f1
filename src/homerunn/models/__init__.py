"""
Modelos de datos del sistema.

- Signature: firma categórica de 15 slots
- Listing: propiedad que llega de la API de listings
- UserProfile: perfil de preferencias aprendido por swipes
"""

from homerunn.models.signature import (
    ORDINAL_ALPHABET,
    SIGNATURE_LENGTH,
    SLOT_NAMES,
    SLOTS,
    Signature,
    SlotSpec,
    ordinal_distance,
)
from homerunn.models.listing import Listing
from homerunn.models.profile import (
    DislikedListing,
    FeedbackDirection,
    SwipeCounts,
    UserProfile,
)

__all__ = [
    # Firma
    "Signature",
    "SlotSpec",
    "SLOTS",
    "SLOT_NAMES",
    "SIGNATURE_LENGTH",
    "ORDINAL_ALPHABET",
    "ordinal_distance",
    # Listing
    "Listing",
    # Perfil
    "UserProfile",
    "DislikedListing",
    "SwipeCounts",
    "FeedbackDirection",
]
