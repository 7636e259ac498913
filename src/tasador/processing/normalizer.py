"""
Normalización de campos numéricos.

Convierte los textos del scraper ("3+1", "$650,000") en números.
Un texto que queda vacío tras limpiar es un valor faltante (None),
nunca cero.
"""

import re
from typing import Iterable, Optional

from tasador.models import NormalizedListing, RawListing


def parse_room_count(text: Optional[str]) -> Optional[int]:
    """
    Dormitorios/baños: se conserva el primer dígito.

    "3+1" (3 dormitorios + 1 de servicio) -> 3
    """
    cleaned = re.sub(r"[^\d+]", "", text or "")
    if not cleaned or not cleaned[0].isdigit():
        return None
    return int(cleaned[0])


def parse_price(text: Optional[str]) -> Optional[int]:
    """Precio: se eliminan símbolos y separadores."""
    cleaned = re.sub(r"[^\d]", "", text or "")
    if not cleaned:
        return None
    price = int(cleaned)
    return price if price > 0 else None


def normalize_listing(raw: RawListing) -> NormalizedListing:
    return NormalizedListing(
        address=raw.address,
        listing_type=raw.listing_type,
        n_beds=parse_room_count(raw.n_beds_text),
        n_baths=parse_room_count(raw.n_baths_text),
        price=parse_price(raw.price_text),
    )


def normalize_listings(raws: Iterable[RawListing]) -> list[NormalizedListing]:
    return [normalize_listing(raw) for raw in raws]
