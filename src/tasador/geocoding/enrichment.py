"""
Pipeline de enriquecimiento.

Geocodifica la dirección de cada listing normalizado, extrae los campos
de ubicación, descarta los que no quedan en Canadá y recién entonces
extrae el código postal de los sobrevivientes.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from tasador.config import Settings, get_settings
from tasador.geocoding.cache import GeocodeCache
from tasador.geocoding.client import GeocodeClient, GeocodeResponse
from tasador.geocoding.parser import GeocodeField, parse_geocode_field, parse_geocode_fields
from tasador.models import EnrichedListing, NormalizedListing

logger = structlog.get_logger()

ENRICHMENT_FIELDS = (
    GeocodeField.STREET_NUMBER,
    GeocodeField.ROUTE,
    GeocodeField.LOCALITY,
    GeocodeField.FORMATTED_ADDRESS,
    GeocodeField.LATITUDE,
    GeocodeField.LONGITUDE,
)

PROGRESS_EVERY = 100


@dataclass
class EnrichmentResult:
    """Listings enriquecidos que pasaron el filtro de país y contadores del batch."""

    listings: list[EnrichedListing] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def enrich_listing(listing: NormalizedListing, payload: Optional[dict]) -> EnrichedListing:
    """Combina un listing con los campos de su respuesta de geocodificación."""
    fields = parse_geocode_fields(payload, ENRICHMENT_FIELDS)
    return EnrichedListing(**listing.model_dump(), **fields)


def in_country(listing: EnrichedListing, country_token: str) -> bool:
    return bool(listing.formatted_address) and country_token in listing.formatted_address


class EnrichmentPipeline:
    """
    Enriquece listings normalizados con geocodificación.

    Las respuestas exitosas se guardan en el checkpoint a medida que llegan,
    así un batch interrumpido se retoma consultando solo lo que falta.
    """

    def __init__(
        self,
        client: GeocodeClient,
        settings: Optional[Settings] = None,
        cache: Optional[GeocodeCache] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else GeocodeCache()

    async def _lookup(self, address: str) -> GeocodeResponse:
        response = await self.client.geocode(address)
        self.cache.put(response)
        return response

    async def geocode_addresses(
        self, addresses: Iterable[str], stats: Optional[dict] = None
    ) -> dict[str, GeocodeResponse]:
        """
        Geocodifica direcciones únicas, usando el checkpoint cuando existe.

        Args:
            addresses: Direcciones (pueden repetirse)
            stats: Diccionario donde acumular contadores (opcional)

        Returns:
            {dirección: GeocodeResponse}
        """
        stats = stats if stats is not None else {}
        unique = list(dict.fromkeys(addresses))
        responses: dict[str, GeocodeResponse] = {}
        pending: list[str] = []

        for address in unique:
            cached = self.cache.get(address)
            if cached is not None:
                responses[address] = cached
            else:
                pending.append(address)

        stats["unique_addresses"] = len(unique)
        stats["cached"] = len(responses)
        stats["geocoded"] = 0
        stats["failed"] = 0

        logger.info(
            "Geocodificando direcciones",
            unique=len(unique),
            cached=len(responses),
            pending=len(pending),
        )

        for done, future in enumerate(
            asyncio.as_completed([self._lookup(a) for a in pending]), start=1
        ):
            response = await future
            responses[response.address] = response
            if response.failed:
                stats["failed"] += 1
            else:
                stats["geocoded"] += 1
            if done % PROGRESS_EVERY == 0:
                logger.info("Progreso de geocodificación", done=done, total=len(pending))

        return responses

    async def run(self, listings: Iterable[NormalizedListing]) -> EnrichmentResult:
        """
        Ejecuta el enriquecimiento completo.

        Returns:
            EnrichmentResult con los listings que pasaron el filtro de país
        """
        listings = list(listings)
        started = time.perf_counter()
        stats: dict = {"total": len(listings)}

        responses = await self.geocode_addresses(
            (listing.address for listing in listings), stats=stats
        )

        token = self.settings.country_token
        kept: list[EnrichedListing] = []
        for listing in listings:
            payload = responses[listing.address].payload
            enriched = enrich_listing(listing, payload)
            if not in_country(enriched, token):
                continue
            # Código postal solo para los que sobreviven al filtro
            postal_code = parse_geocode_field(payload, GeocodeField.POSTAL_CODE)
            kept.append(enriched.model_copy(update={"postal_code": postal_code}))

        stats["kept"] = len(kept)
        stats["dropped"] = len(listings) - len(kept)
        stats["elapsed_seconds"] = round(time.perf_counter() - started, 2)

        logger.info("Enriquecimiento completado", **stats)
        return EnrichmentResult(listings=kept, stats=stats)
