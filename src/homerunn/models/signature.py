"""
Firma categórica de 15 slots.

Cada posición es un bucket ordinal de un atributo de la propiedad.
Los símbolos se ordenan según ORDINAL_ALPHABET: dígitos 0-9 y, solo
para el slot de precio, letras A-L. Buckets contiguos son símbolos
contiguos, así la distancia ordinal da crédito parcial.
"""

from dataclasses import dataclass
from typing import Iterator, Union

from homerunn.exceptions import MalformedSignature

SIGNATURE_LENGTH = 15

ORDINAL_ALPHABET = "0123456789ABCDEFGHIJKL"
DIGITS = ORDINAL_ALPHABET[:10]

_POSITIONS = {symbol: index for index, symbol in enumerate(ORDINAL_ALPHABET)}


@dataclass(frozen=True)
class SlotSpec:
    """Definición de un slot: nombre, peso en similitud y alfabeto legal."""

    name: str
    weight: int
    ordinal: bool  # True = da crédito parcial a un paso de distancia
    alphabet: str = DIGITS


SLOTS: tuple[SlotSpec, ...] = (
    SlotSpec("price", 15, True, ORDINAL_ALPHABET),
    SlotSpec("bedrooms", 15, True),
    SlotSpec("square_footage", 15, True),
    SlotSpec("age", 5, True),
    SlotSpec("property_type", 10, False),
    SlotSpec("lot_size", 5, True),
    SlotSpec("garage", 5, True),
    SlotSpec("condition", 10, True),
    SlotSpec("hoa", 5, False),
    SlotSpec("pool", 3, False),
    SlotSpec("investment", 2, False),
    SlotSpec("smart_home", 2, False),
    SlotSpec("outdoor", 3, True),
    SlotSpec("climate", 3, True),
    SlotSpec("schools", 2, False),
)

SLOT_NAMES: tuple[str, ...] = tuple(slot.name for slot in SLOTS)


def ordinal_position(symbol: str) -> int:
    """Posición del símbolo en ORDINAL_ALPHABET."""
    return _POSITIONS[symbol]


def ordinal_distance(a: str, b: str) -> int:
    """Distancia ordinal entre dos símbolos (9 y A son adyacentes)."""
    return abs(_POSITIONS[a] - _POSITIONS[b])


@dataclass(frozen=True)
class Signature:
    """
    Firma inmutable de 15 símbolos.

    Se construye siempre via `Signature.parse` para validar largo y
    alfabeto por slot; nunca se trunca ni se rellena.
    """

    symbols: str

    def __post_init__(self):
        _validate(self.symbols)

    @classmethod
    def parse(cls, value: Union["Signature", str]) -> "Signature":
        """
        Convierte un string (o una Signature) en Signature validada.

        Raises:
            MalformedSignature: Si el largo o algún símbolo es inválido
        """
        if isinstance(value, Signature):
            return value
        return cls(value)

    @classmethod
    def zero(cls) -> "Signature":
        """Firma por defecto de un perfil nuevo."""
        return cls("0" * SIGNATURE_LENGTH)

    def __str__(self) -> str:
        return self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def __getitem__(self, slot: int) -> str:
        return self.symbols[slot]

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)


def _validate(value) -> None:
    if not isinstance(value, str):
        raise MalformedSignature(value, "se esperaba un string")
    if len(value) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            value, f"largo {len(value)}, se esperaban {SIGNATURE_LENGTH}"
        )
    for slot, (symbol, slot_def) in enumerate(zip(value, SLOTS)):
        if symbol not in slot_def.alphabet:
            raise MalformedSignature(
                value, f"símbolo {symbol!r} ilegal para {slot_def.name}", slot=slot
            )
