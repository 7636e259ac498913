"""
Pipeline completo: scraping -> geocodificación -> entrenamiento.

Uso:
    python -m tasador.scripts.run_pipeline
    python -m tasador.scripts.run_pipeline --categories condo --max-pages 3
"""

import argparse
import asyncio
import sys

import structlog

from tasador.config import get_settings
from tasador.exceptions import ConfigError
from tasador.geocoding import GeocodeClient
from tasador.logging_config import configure_logging
from tasador.scripts.run_enrichment import run_enrichment
from tasador.scripts.run_scraper import parse_categories, run_scraper
from tasador.scripts.run_training import run_training

logger = structlog.get_logger()


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Pipeline completo de tasador")
    parser.add_argument("--categories", type=str, default=None, help="Categorías a scrapear")
    parser.add_argument("--max-pages", type=int, default=None, help="Páginas por categoría")
    parser.add_argument(
        "--skip-scraping",
        action="store_true",
        help="Reutiliza el dataset de listings existente",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        categories = parse_categories(args.categories)
    except ValueError as e:
        parser.error(f"Categoría inválida: {e}")

    try:
        # Validar configuración antes de scrapear durante horas
        GeocodeClient(settings)

        if not args.skip_scraping:
            asyncio.run(
                run_scraper(
                    categories=categories,
                    max_pages=args.max_pages,
                    settings=settings,
                )
            )
        stats = asyncio.run(run_enrichment(settings=settings))
        path = run_training(settings=settings)
        logger.info("Pipeline completado", artifacts=str(path), **stats)
        sys.exit(0)
    except ConfigError as e:
        logger.error("Configuración inválida", error=str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Pipeline interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en pipeline", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
