"""
Script para ejecutar el scraping de listings.

Uso:
    python -m tasador.scripts.run_scraper
    python -m tasador.scripts.run_scraper --categories condo,detached
    python -m tasador.scripts.run_scraper --max-pages 5 --output data/listings.csv
    python -m tasador.scripts.run_scraper --restart
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import structlog

from tasador.config import Settings, get_settings
from tasador.logging_config import configure_logging
from tasador.models import ListingType, RawListing
from tasador.processing import normalize_listings
from tasador.scrapers import BasePageFetcher, ListingAggregator, PageFetcher, ScrapeCheckpoint
from tasador.storage import save_listings

logger = structlog.get_logger()


def parse_categories(value: Optional[str]) -> Optional[list[ListingType]]:
    """'condo,detached' -> [ListingType.CONDO, ListingType.DETACHED]"""
    if not value:
        return None
    return [ListingType(item.strip()) for item in value.split(",") if item.strip()]


async def scrape_listings(
    settings: Settings,
    categories: Optional[list[ListingType]] = None,
    max_pages: Optional[int] = None,
    checkpoint: Optional[ScrapeCheckpoint] = None,
    fetcher: Optional[BasePageFetcher] = None,
) -> tuple[list[RawListing], dict]:
    """Scrapea las categorías pedidas con un único browser (o el fetcher dado)."""
    if fetcher is not None:
        aggregator = ListingAggregator(fetcher, settings, checkpoint=checkpoint)
        result = await aggregator.scrape_all(categories=categories, max_pages=max_pages)
        return result.listings, result.stats()

    async with PageFetcher(settings) as browser_fetcher:
        aggregator = ListingAggregator(browser_fetcher, settings, checkpoint=checkpoint)
        result = await aggregator.scrape_all(categories=categories, max_pages=max_pages)
    return result.listings, result.stats()


async def run_scraper(
    categories: Optional[list[ListingType]] = None,
    max_pages: Optional[int] = None,
    output: Optional[Path] = None,
    settings: Optional[Settings] = None,
    restart: bool = False,
    fetcher: Optional[BasePageFetcher] = None,
) -> dict:
    """
    Scrapea, normaliza y guarda el dataset de listings.

    Las páginas se guardan en un checkpoint a medida que se descargan.
    Si la corrida se corta, la siguiente retoma desde ahí. El checkpoint
    se elimina una vez guardado el dataset.

    Args:
        categories: Categorías a scrapear (None = todas)
        max_pages: Cota de páginas por categoría (None = la de settings)
        output: CSV de salida (default: settings.listings_path)
        restart: Descartar el checkpoint de una corrida anterior
        fetcher: Fetcher a usar (default: PageFetcher con Playwright)

    Returns:
        Estadísticas de la ejecución
    """
    settings = settings or get_settings()
    output = output or settings.listings_path

    checkpoint = ScrapeCheckpoint(settings.scrape_checkpoint_path)
    if restart:
        checkpoint.clear()

    raw_listings, stats = await scrape_listings(
        settings, categories, max_pages, checkpoint=checkpoint, fetcher=fetcher
    )
    normalized = normalize_listings(raw_listings)
    stats["without_price"] = sum(1 for listing in normalized if listing.price is None)

    save_listings(normalized, output)
    checkpoint.clear()
    logger.info("Scraping completado", output=str(output), **stats)
    return stats


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Scraper de listings inmobiliarios")
    parser.add_argument(
        "--categories",
        type=str,
        default=None,
        help="Categorías separadas por coma (condo,detached,townhome,condo_townhome)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Máximo de páginas por categoría (default: el de settings)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV de salida",
    )
    parser.add_argument(
        "--restart",
        action="store_true",
        help="Ignora el checkpoint de una corrida interrumpida y empieza de cero",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        categories = parse_categories(args.categories)
    except ValueError as e:
        parser.error(f"Categoría inválida: {e}")

    try:
        asyncio.run(
            run_scraper(
                categories=categories,
                max_pages=args.max_pages,
                output=args.output,
                settings=settings,
                restart=args.restart,
            )
        )
        sys.exit(0)
    except KeyboardInterrupt:
        logger.info("Scraping interrumpido, el checkpoint queda guardado")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en scraper", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
