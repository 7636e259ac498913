"""
Modelos de datos del sistema.

Etapas del dataset:
- RawListing (texto crudo del scraper)
- NormalizedListing (campos numéricos)
- EnrichedListing (geocodificado, dataset canónico)
"""

from tasador.models.listing import (
    ListingType,
    RawListing,
    NormalizedListing,
    EnrichedListing,
)
from tasador.models.metadata import CategoryMetadata, NumericRange

__all__ = [
    # Listings
    "ListingType",
    "RawListing",
    "NormalizedListing",
    "EnrichedListing",
    # Artefactos
    "CategoryMetadata",
    "NumericRange",
]
