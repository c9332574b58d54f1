"""
Encoder de firmas de propiedades.

Reduce un listing a una firma de 15 símbolos. Es una función total:
cada atributo faltante cae en su bucket por defecto y el encoder nunca
falla, para que el feed no se trabe con datos sucios del MLS.

Los slots 7-9 y 11-14 no tienen dato directo en el MLS y se estiman a
partir de subtipo, año, lote y precio. Pool (10) y escuelas (15) quedan
fijos en su centinela hasta tener datos reales.
"""

from typing import Optional, Sequence, Union

from homerunn.models import SLOT_NAMES, Listing, Signature

# Buckets ordinales: (límite superior exclusivo, símbolo); el último es el default
_PRICE_SYMBOLS = "123456789ABCDEFGHIJKL"
_PRICE_STEP = 100_000

_BEDS_BUCKETS = ((3, "1"), (4, "2"), (5, "3"))
_SQFT_BUCKETS = ((1000, "1"), (2000, "2"), (3000, "3"))
_AGE_BUCKETS = ((1950, "1"), (1980, "2"), (2000, "3"), (2015, "4"))
_LOT_BUCKETS = ((5000, "1"), (10000, "2"), (20000, "3"))

# Estimadores: (límite inferior exclusivo, símbolo), de mayor a menor
_RECENCY_BUCKETS = ((2015, "4"), (2000, "3"), (1980, "2"))
_OUTDOOR_BUCKETS = ((20000, "4"), (10000, "3"), (5000, "2"))

# Tipo: se busca por substring en el subtipo y después en el tipo
_TYPE_RULES = (
    ("1", ("Single Family",)),
    ("2", ("Condo", "Townhouse")),
    ("3", ("Multi-Family",)),
    ("4", ("Mobile",)),
    ("5", ("Land",)),
)
UNKNOWN_TYPE = "9"

POOL_SENTINEL = "0"
SCHOOLS_SENTINEL = "0"


def _below(value: float, buckets: Sequence[tuple[float, str]], default: str) -> str:
    for bound, symbol in buckets:
        if value < bound:
            return symbol
    return default


def _above(value: float, buckets: Sequence[tuple[float, str]], default: str) -> str:
    for bound, symbol in buckets:
        if value > bound:
            return symbol
    return default


def price_symbol(price: float) -> str:
    index = max(0, int(price // _PRICE_STEP))
    return _PRICE_SYMBOLS[min(index, len(_PRICE_SYMBOLS) - 1)]


def property_type_symbol(property_type: str, property_subtype: str) -> str:
    for text in (property_subtype, property_type):
        if not text:
            continue
        for symbol, needles in _TYPE_RULES:
            if any(needle in text for needle in needles):
                return symbol
    return UNKNOWN_TYPE


def _garage_symbol(subtype: str) -> str:
    if "Single Family" in subtype:
        return "2"  # se asume garage para 1 auto
    if "Condo" in subtype:
        return "1"  # se asume cochera cubierta
    return "0"


def _hoa_symbol(subtype: str) -> str:
    if "Condo" in subtype or "Townhouse" in subtype:
        return "3"  # expensas moderadas
    if "Single Family" in subtype:
        return "1"
    return "0"


def _investment_symbol(subtype: str, price: float, sqft: float) -> str:
    if (
        "Multi-Family" in subtype
        or "Land" in subtype
        or (price < 300_000 and sqft > 1000)
    ):
        return "1"
    return "0"


def encode(listing: Optional[Union[Listing, dict]]) -> Signature:
    """
    Calcula la firma de un listing.

    Args:
        listing: Listing o dict crudo de la API (None da la firma en cero)

    Returns:
        Signature de 15 símbolos, siempre válida
    """
    if listing is None:
        return Signature.zero()
    if not isinstance(listing, Listing):
        listing = Listing.model_validate(listing)

    price = listing.price or 0
    beds = listing.beds or 0
    sqft = listing.sqft or 0
    year = listing.year_built or 0
    lot = listing.lot_size or 0
    subtype = listing.property_subtype

    symbols = [
        price_symbol(price),
        _below(beds, _BEDS_BUCKETS, "4"),
        _below(sqft, _SQFT_BUCKETS, "4"),
        _below(year, _AGE_BUCKETS, "5"),
        property_type_symbol(listing.property_type, subtype),
        _below(lot, _LOT_BUCKETS, "4"),
        _garage_symbol(subtype),
        _above(year, _RECENCY_BUCKETS, "1"),  # condición
        _hoa_symbol(subtype),
        POOL_SENTINEL,
        _investment_symbol(subtype, price, sqft),
        "1" if year > 2015 else "0",  # smart home
        _above(lot, _OUTDOOR_BUCKETS, "1"),
        _above(year, _RECENCY_BUCKETS, "1"),  # climatización
        SCHOOLS_SENTINEL,
    ]
    return Signature("".join(symbols))


_PRICE_LABELS = {
    "1": "$0-$100,000",
    "2": "$100,000-$200,000",
    "3": "$200,000-$300,000",
    "4": "$300,000-$400,000",
    "5": "$400,000-$500,000",
    "6": "$500,000-$600,000",
    "7": "$600,000-$700,000",
    "8": "$700,000-$800,000",
    "9": "$800,000-$900,000",
    "A": "$900,000-$1M",
    "B": "$1M-$1.1M",
    "C": "$1.1M-$1.2M",
    "D": "$1.2M-$1.3M",
    "E": "$1.3M-$1.4M",
    "F": "$1.4M-$1.5M",
    "G": "$1.5M-$1.6M",
    "H": "$1.6M-$1.7M",
    "I": "$1.7M-$1.8M",
    "J": "$1.8M-$1.9M",
    "K": "$1.9M-$2M",
    "L": "$2M+",
}

# slot -> (labels, texto si el símbolo no está mapeado)
SLOT_LABELS: dict[str, tuple[dict[str, str], str]] = {
    "price": (_PRICE_LABELS, "Unknown price range"),
    "bedrooms": (
        {"1": "0-2 bedrooms", "2": "3 bedrooms", "3": "4 bedrooms", "4": "5+ bedrooms"},
        "Unknown bedroom count",
    ),
    "square_footage": (
        {
            "1": "Under 1,000 sq ft",
            "2": "1,000-2,000 sq ft",
            "3": "2,000-3,000 sq ft",
            "4": "3,000+ sq ft",
        },
        "Unknown square footage",
    ),
    "age": (
        {
            "1": "Built before 1950",
            "2": "Built 1950-1979",
            "3": "Built 1980-1999",
            "4": "Built 2000-2014",
            "5": "Built 2015 or newer",
        },
        "Unknown age",
    ),
    "property_type": (
        {
            "1": "Single-Family Home",
            "2": "Condo/Townhouse",
            "3": "Multi-Family",
            "4": "Mobile Home",
            "5": "Land",
            "9": "Other Property Type",
        },
        "Unknown property type",
    ),
    "lot_size": (
        {
            "1": "Small lot (under 5,000 sq ft)",
            "2": "Medium lot (5,000-10,000 sq ft)",
            "3": "Large lot (10,000-20,000 sq ft)",
            "4": "Very large lot (20,000+ sq ft)",
        },
        "Unknown lot size",
    ),
    "garage": (
        {
            "0": "No garage information",
            "1": "No garage/carport",
            "2": "1-car garage",
            "3": "2-car garage",
            "4": "3+ car garage",
        },
        "Unknown garage information",
    ),
    "condition": (
        {
            "1": "Needs work",
            "2": "Some updates needed",
            "3": "Move-in ready",
            "4": "Fully updated/new construction",
        },
        "Unknown condition",
    ),
    "hoa": (
        {
            "0": "No HOA information",
            "1": "No HOA",
            "2": "Low HOA fees (under $100/month)",
            "3": "Moderate HOA fees ($100-$300/month)",
            "4": "High HOA fees ($300+/month)",
        },
        "Unknown HOA information",
    ),
    "pool": ({"0": "No pool", "1": "Has pool"}, "Unknown pool information"),
    "investment": (
        {
            "0": "Not primarily an investment property",
            "1": "Potential investment opportunity",
        },
        "Unknown investment potential",
    ),
    "smart_home": (
        {"0": "No smart home features", "1": "Has smart home features"},
        "Unknown smart home features",
    ),
    "outdoor": (
        {
            "1": "Minimal outdoor space",
            "2": "Small yard",
            "3": "Large yard/good views",
            "4": "Exceptional outdoor space/views",
        },
        "Unknown outdoor features",
    ),
    "climate": (
        {
            "1": "Basic/older systems",
            "2": "Standard heating/cooling",
            "3": "Energy efficient systems",
            "4": "Smart climate control",
        },
        "Unknown heating/cooling",
    ),
    "schools": (
        {
            "0": "No school rating information",
            "1": "Lower-rated schools (under 5/10)",
            "2": "Medium-rated schools (5-7/10)",
            "3": "High-rated schools (8+/10)",
        },
        "Unknown school information",
    ),
}


def describe_signature(signature: Union[Signature, str]) -> dict[str, str]:
    """
    Descripción legible de cada slot de una firma.

    Raises:
        MalformedSignature: Si la firma es inválida
    """
    signature = Signature.parse(signature)
    description = {}
    for name, symbol in zip(SLOT_NAMES, signature):
        labels, unknown = SLOT_LABELS[name]
        description[name] = labels.get(symbol, unknown)
    return description
