"""
Script para geocodificar el dataset de listings.

Re-ejecutarlo tras una interrupción solo consulta las direcciones
que no están en el checkpoint.

Uso:
    python -m tasador.scripts.run_enrichment
    python -m tasador.scripts.run_enrichment --limit 50
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import structlog

from tasador.config import Settings, get_settings
from tasador.exceptions import ConfigError
from tasador.geocoding import EnrichmentPipeline, GeocodeCache, GeocodeClient
from tasador.logging_config import configure_logging
from tasador.models import NormalizedListing
from tasador.storage import load_listings, save_listings

logger = structlog.get_logger()


async def run_enrichment(
    input_path: Optional[Path] = None,
    output: Optional[Path] = None,
    limit: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> dict:
    """
    Geocodifica, filtra por país y guarda el dataset enriquecido.

    Args:
        input_path: CSV de listings normalizados
        output: CSV enriquecido de salida
        limit: Procesar solo los primeros N listings

    Returns:
        Estadísticas de la ejecución
    """
    settings = settings or get_settings()
    input_path = input_path or settings.listings_path
    output = output or settings.enriched_path

    # Falla acá, antes de leer nada, si falta la API key
    client = GeocodeClient(settings)

    listings = load_listings(input_path, NormalizedListing)
    if limit:
        listings = listings[:limit]

    cache = GeocodeCache(settings.geocode_cache_path)
    async with client:
        pipeline = EnrichmentPipeline(client, settings, cache=cache)
        result = await pipeline.run(listings)

    save_listings(result.listings, output)
    return result.stats


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Geocodifica listings scrapeados")
    parser.add_argument("--input", type=Path, default=None, help="CSV de listings")
    parser.add_argument("--output", type=Path, default=None, help="CSV enriquecido")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Máximo de listings a procesar (None = sin límite)",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        asyncio.run(
            run_enrichment(
                input_path=args.input,
                output=args.output,
                limit=args.limit,
                settings=settings,
            )
        )
        sys.exit(0)
    except ConfigError as e:
        logger.error("Configuración inválida", error=str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Geocodificación interrumpida, el checkpoint queda guardado")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en geocodificación", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
