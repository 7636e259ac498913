"""
Modelos de listings en cada etapa del pipeline.

- RawListing: texto tal cual sale del scraper
- NormalizedListing: campos numéricos limpios
- EnrichedListing: listing normalizado + atributos geocodificados
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ListingType(str, Enum):
    """Categorías de búsqueda del portal."""

    CONDO = "condo"
    DETACHED = "detached"
    TOWNHOME = "townhome"
    CONDO_TOWNHOME = "condo_townhome"


class RawListing(BaseModel):
    """
    Anuncio crudo extraído de una página de resultados.

    Preserva los textos originales para poder re-normalizar
    sin volver a scrapear.
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Dirección como texto libre")
    n_beds_text: str = Field("", description="Dormitorios, ej: '3+1'")
    n_baths_text: str = Field("", description="Baños, ej: '2'")
    price_text: str = Field("", description="Precio, ej: '$650,000'")
    listing_type: ListingType = Field(..., description="Categoría de búsqueda")


class NormalizedListing(BaseModel):
    """Listing con dormitorios, baños y precio numéricos (None = faltante)."""

    model_config = ConfigDict(frozen=True)

    address: str
    listing_type: ListingType
    n_beds: Optional[int] = Field(None, ge=0)
    n_baths: Optional[int] = Field(None, ge=0)
    price: Optional[int] = Field(None, gt=0, description="Precio en dólares")


class EnrichedListing(NormalizedListing):
    """Listing normalizado con los campos obtenidos por geocodificación."""

    formatted_address: Optional[str] = None
    street_number: Optional[str] = None
    route: Optional[str] = None
    locality: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
