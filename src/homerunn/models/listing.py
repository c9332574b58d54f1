"""
Modelo de Listing.

Los listings los provee la API de MLS (campos PascalCase como ListPrice)
o la app ya normalizados (price, beds, sqft...). El modelo acepta ambos
formatos y tolera atributos faltantes o sucios: el encoder resuelve
cualquier None con su bucket por defecto.
"""

import math
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).replace(",", "").replace("$", "").strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class Listing(BaseModel):
    """Propiedad candidata para el feed de swipes."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("id", "ListingKey", "ListingId", "listingId"),
        description="ID del listing en el MLS",
    )

    # Atributos que consume el encoder
    price: Optional[float] = Field(
        None, validation_alias=AliasChoices("price", "ListPrice")
    )
    beds: Optional[float] = Field(
        None, validation_alias=AliasChoices("beds", "BedroomsTotal")
    )
    sqft: Optional[float] = Field(
        None, validation_alias=AliasChoices("sqft", "LivingArea")
    )
    year_built: Optional[int] = Field(
        None, validation_alias=AliasChoices("year_built", "yearBuilt", "YearBuilt")
    )
    lot_size: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("lot_size", "lotSize", "LotSizeSquareFeet"),
    )
    property_type: str = Field(
        "", validation_alias=AliasChoices("property_type", "propertyType", "PropertyType")
    )
    property_subtype: str = Field(
        "",
        validation_alias=AliasChoices(
            "property_subtype", "propertySubType", "PropertySubType"
        ),
    )

    # Firma precalculada (opcional)
    signature: Optional[str] = Field(
        None, validation_alias=AliasChoices("signature", "propertyMatchMetric")
    )

    # Flags "mostrar siempre": saltean el cooldown
    bypass_filtering: bool = Field(
        False, validation_alias=AliasChoices("bypass_filtering", "bypassFiltering")
    )
    force_display: bool = Field(
        False, validation_alias=AliasChoices("force_display", "forceDisplay")
    )
    is_redo_card: bool = Field(
        False, validation_alias=AliasChoices("is_redo_card", "isRedoCard")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("price", "beds", "sqft", "lot_size", mode="before")
    @classmethod
    def _coerce_number(cls, value):
        return _to_number(value)

    @field_validator("year_built", mode="before")
    @classmethod
    def _coerce_year(cls, value):
        number = _to_number(value)
        return int(number) if number is not None else None

    @field_validator("property_type", "property_subtype", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return str(value) if value is not None else ""

    @field_validator("signature", mode="before")
    @classmethod
    def _coerce_signature(cls, value):
        return str(value) if value else None

    @field_validator("bypass_filtering", "force_display", "is_redo_card", mode="before")
    @classmethod
    def _coerce_flag(cls, value):
        # Flags nulos o ilegibles cuentan como apagados
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in ("true", "1", "yes")

    @property
    def always_show(self) -> bool:
        """True si el caller pidió mostrarlo sin importar el cooldown."""
        return self.bypass_filtering or self.force_display or self.is_redo_card
