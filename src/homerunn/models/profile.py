"""
Perfil de preferencias aprendido por usuario.

Contiene la firma inferida, los histogramas por slot que la sostienen,
las listas de listings descartados/likeados/amados y el contador global
de swipes que funciona como reloj lógico del cooldown.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from homerunn.models.signature import SIGNATURE_LENGTH, Signature


class FeedbackDirection(str, Enum):
    """Acción del usuario sobre una carta."""

    DISLIKE = "dislike"
    LIKE = "like"
    LOVE = "love"

    @classmethod
    def parse(cls, value) -> "FeedbackDirection":
        """
        Acepta el nombre de la acción o el gesto de swipe.

        left -> dislike, right -> like, top/up -> love.

        Raises:
            ValueError: Si la dirección no se reconoce
        """
        if isinstance(value, FeedbackDirection):
            return value
        key = str(value).strip().lower()
        if key in _SWIPE_GESTURES:
            return _SWIPE_GESTURES[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Dirección de feedback desconocida: {value!r}") from None


_SWIPE_GESTURES = {
    "left": FeedbackDirection.DISLIKE,
    "right": FeedbackDirection.LIKE,
    "top": FeedbackDirection.LOVE,
    "up": FeedbackDirection.LOVE,
}


class DislikedListing(BaseModel):
    """Listing descartado con el swipe count en que se descartó."""

    model_config = ConfigDict(populate_by_name=True)

    listing_id: str = Field(
        ..., validation_alias=AliasChoices("listing_id", "listingId", "id")
    )
    disliked_at_swipe_count: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices(
            "disliked_at_swipe_count", "dislikedAtSwipeCount"
        ),
    )


class SwipeCounts(BaseModel):
    """Contadores por gesto. El total vive en UserProfile.global_swipe_count."""

    model_config = ConfigDict(populate_by_name=True)

    left: int = Field(0, ge=0, validation_alias=AliasChoices("left", "LeftSwipes"))
    right: int = Field(0, ge=0, validation_alias=AliasChoices("right", "RightSwipes"))
    up: int = Field(0, ge=0, validation_alias=AliasChoices("up", "UpSwipes"))


def _empty_histograms() -> list[dict[str, int]]:
    return [{} for _ in range(SIGNATURE_LENGTH)]


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserProfile(BaseModel):
    """
    Perfil de match de un usuario.

    Solo el PreferenceLearner lo modifica; se persiste con el
    ProfileRepository.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, description="UUID del usuario")

    current_signature: str = Field(
        default_factory=lambda: str(Signature.zero()),
        validation_alias=AliasChoices(
            "current_signature", "currentMetric", "CurrentMetric"
        ),
        description="Firma con el gusto inferido del usuario",
    )
    slot_histograms: list[dict[str, int]] = Field(
        default_factory=_empty_histograms,
        validation_alias=AliasChoices(
            "slot_histograms", "digitPreferences", "DigitPreferences"
        ),
        description="Por slot: símbolo -> puntaje acumulado",
    )

    disliked_listings: list[DislikedListing] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "disliked_listings", "dislikedProperties", "DislikedProperties"
        ),
    )
    liked_listings: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "liked_listings", "likedProperties", "LikedProperties"
        ),
    )
    loved_listings: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "loved_listings", "lovedProperties", "LovedProperties"
        ),
    )

    global_swipe_count: int = Field(
        0,
        ge=0,
        validation_alias=AliasChoices(
            "global_swipe_count", "globalSwipeCount", "GlobalSwipeCount"
        ),
        description="Reloj lógico del cooldown, nunca se resetea",
    )
    swipe_counts: SwipeCounts = Field(
        default_factory=SwipeCounts,
        validation_alias=AliasChoices("swipe_counts", "swipeCount", "SwipeCount"),
    )

    updated_at: str = Field(
        default_factory=utcnow_iso,
        validation_alias=AliasChoices("updated_at", "lastUpdated", "LastUpdated"),
    )

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_document(cls, data):
        """
        Normaliza documentos viejos antes de validar.

        - Firma legacy (currentMetric) sin histogramas: la firma vuelve a cero.
        - Histogramas con largo distinto de 15: se reinician.
        - Descartados guardados como id suelto: arrancan su cooldown ahora.
        - LastUpdated como datetime: se pasa a ISO.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        histogram_key = _first_key(
            data, ("slot_histograms", "digitPreferences", "DigitPreferences")
        )
        if histogram_key is None:
            for key in ("currentMetric", "CurrentMetric"):
                data.pop(key, None)
        elif not isinstance(data[histogram_key], list) or len(
            data[histogram_key]
        ) != SIGNATURE_LENGTH:
            data[histogram_key] = _empty_histograms()

        count_key = _first_key(
            data, ("global_swipe_count", "globalSwipeCount", "GlobalSwipeCount")
        )
        if count_key is not None and data[count_key] is None:
            data.pop(count_key)
            count_key = None
        swipe_count = data[count_key] if count_key is not None else 0

        disliked_key = _first_key(
            data, ("disliked_listings", "dislikedProperties", "DislikedProperties")
        )
        if disliked_key is not None:
            data[disliked_key] = [
                {"listing_id": entry, "disliked_at_swipe_count": swipe_count}
                if isinstance(entry, str)
                else entry
                for entry in data[disliked_key] or []
            ]

        updated_key = _first_key(data, ("updated_at", "lastUpdated", "LastUpdated"))
        if updated_key is not None and isinstance(data[updated_key], datetime):
            data[updated_key] = data[updated_key].isoformat()

        return data

    @field_validator("current_signature", mode="before")
    @classmethod
    def _validate_signature(cls, value):
        # MalformedSignature es ValueError: pydantic lo reporta como ValidationError
        return str(Signature.parse(value))

    @field_validator("slot_histograms")
    @classmethod
    def _validate_histograms(cls, value: list[dict[str, int]]):
        if len(value) != SIGNATURE_LENGTH:
            raise ValueError(
                f"slot_histograms debe tener {SIGNATURE_LENGTH} entradas, tiene {len(value)}"
            )
        return value

    @classmethod
    def default(cls, user_id: Optional[str] = None) -> "UserProfile":
        """Perfil vacío: firma en cero, sin historial, contador en 0."""
        return cls(user_id=user_id)

    @property
    def signature(self) -> Signature:
        return Signature.parse(self.current_signature)

    def find_disliked(self, listing_id: str) -> Optional[DislikedListing]:
        """Entrada de descarte de un listing, si existe."""
        for entry in self.disliked_listings:
            if entry.listing_id == listing_id:
                return entry
        return None

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para upsert en Supabase."""
        return self.model_dump(mode="json")


def _first_key(data: dict, candidates: tuple[str, ...]) -> Optional[str]:
    for key in candidates:
        if key in data:
            return key
    return None
