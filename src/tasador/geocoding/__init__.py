"""
Módulo de geocodificación.

Cliente de Google Geocoding, parser de respuestas y pipeline de enriquecimiento.
"""

from tasador.geocoding.client import GeocodeClient, GeocodeResponse, RateLimiter
from tasador.geocoding.parser import GeocodeField, parse_geocode_field, parse_geocode_fields
from tasador.geocoding.cache import GeocodeCache
from tasador.geocoding.enrichment import (
    EnrichmentPipeline,
    EnrichmentResult,
    enrich_listing,
)

__all__ = [
    # Cliente
    "GeocodeClient",
    "GeocodeResponse",
    "RateLimiter",
    # Parser
    "GeocodeField",
    "parse_geocode_field",
    "parse_geocode_fields",
    # Pipeline
    "GeocodeCache",
    "EnrichmentPipeline",
    "EnrichmentResult",
    "enrich_listing",
]
