"""
Limpieza de los campos de texto del scraper.
"""

from tasador.processing.normalizer import (
    normalize_listing,
    normalize_listings,
    parse_price,
    parse_room_count,
)

__all__ = [
    "normalize_listing",
    "normalize_listings",
    "parse_price",
    "parse_room_count",
]
