"""
Agregador de listings.

Recorre las páginas de búsqueda de cada categoría, descarga y
parsea cada página y concatena todo en un único dataset crudo.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from tasador.config import Settings, get_settings
from tasador.models import ListingType, RawListing
from tasador.scrapers.checkpoint import ScrapeCheckpoint
from tasador.scrapers.extractor import extract_listings
from tasador.scrapers.fetcher import BasePageFetcher

logger = structlog.get_logger()

URL_TEMPLATE = "{base}/mls/?{category_code}..........{page_index}..$"


def build_page_url(base_url: str, category_code: str, page: int) -> str:
    """Construye la URL de una página de búsqueda."""
    return URL_TEMPLATE.format(
        base=base_url.rstrip("/"),
        category_code=category_code,
        page_index=page,
    )


@dataclass
class ScrapeResult:
    """Resultado de una sesión de scraping."""

    listings: list[RawListing] = field(default_factory=list)
    pages_fetched: int = 0
    pages_failed: int = 0
    pages_empty: int = 0
    pages_resumed: int = 0

    def __add__(self, other: "ScrapeResult") -> "ScrapeResult":
        return ScrapeResult(
            listings=self.listings + other.listings,
            pages_fetched=self.pages_fetched + other.pages_fetched,
            pages_failed=self.pages_failed + other.pages_failed,
            pages_empty=self.pages_empty + other.pages_empty,
            pages_resumed=self.pages_resumed + other.pages_resumed,
        )

    def stats(self) -> dict:
        return {
            "listings": len(self.listings),
            "pages_fetched": self.pages_fetched,
            "pages_failed": self.pages_failed,
            "pages_empty": self.pages_empty,
            "pages_resumed": self.pages_resumed,
        }


class ListingAggregator:
    """
    Scrapea las cuatro categorías del portal.

    Las páginas de una categoría se descargan en ventanas de
    `scrape_concurrency` páginas simultáneas. La paginación termina en
    la primera página vacía o al alcanzar el máximo de la categoría.

    Cada página descargada se guarda en el checkpoint apenas se parsea;
    las que ya están ahí no se vuelven a descargar.
    """

    def __init__(
        self,
        fetcher: BasePageFetcher,
        settings: Optional[Settings] = None,
        checkpoint: Optional[ScrapeCheckpoint] = None,
    ):
        self.fetcher = fetcher
        self.settings = settings or get_settings()
        self.checkpoint = checkpoint if checkpoint is not None else ScrapeCheckpoint()

    def category_code(self, listing_type: ListingType) -> str:
        return getattr(self.settings, f"category_code_{listing_type.value}")

    def max_pages_for(self, listing_type: ListingType) -> int:
        return getattr(self.settings, f"max_pages_{listing_type.value}")

    async def _scrape_page(
        self, listing_type: ListingType, page: int
    ) -> Optional[list[RawListing]]:
        """Descarga y parsea una página. None si falló."""
        url = build_page_url(
            self.settings.listing_base_url, self.category_code(listing_type), page
        )
        html = await self.fetcher.fetch(url)
        if html is None:
            return None

        try:
            listings = extract_listings(html, listing_type)
        except Exception as e:
            logger.error(
                "Error parseando página",
                listing_type=listing_type.value,
                page=page,
                error=str(e),
            )
            return None

        self.checkpoint.put(listing_type, page, listings)
        return listings

    async def scrape_category(
        self, listing_type: ListingType, max_pages: Optional[int] = None
    ) -> ScrapeResult:
        """
        Scrapea todas las páginas de una categoría.

        Args:
            listing_type: Categoría a scrapear
            max_pages: Cota de páginas (default: la de settings para la categoría)

        Returns:
            ScrapeResult con los listings y contadores de páginas
        """
        if max_pages is None:
            max_pages = self.max_pages_for(listing_type)
        window = self.settings.scrape_concurrency
        result = ScrapeResult()

        logger.info(
            "Iniciando scraping",
            listing_type=listing_type.value,
            max_pages=max_pages,
        )

        for start in range(1, max_pages + 1, window):
            pages = list(range(start, min(start + window, max_pages + 1)))
            outcomes = dict.fromkeys(pages)
            pending = []
            for page in pages:
                saved = self.checkpoint.get(listing_type, page)
                if saved is None:
                    pending.append(page)
                else:
                    outcomes[page] = saved
                    result.pages_resumed += 1

            fetched = await asyncio.gather(
                *(self._scrape_page(listing_type, page) for page in pending)
            )
            outcomes.update(zip(pending, fetched))

            reached_end = False
            for page, listings in outcomes.items():
                if listings is None:
                    result.pages_failed += 1
                    continue
                result.pages_fetched += 1
                if not listings:
                    result.pages_empty += 1
                    reached_end = True
                    continue
                result.listings.extend(listings)

            # Si hubo una página vacía no hay más resultados
            if reached_end:
                logger.info(
                    "No más listings en categoría",
                    listing_type=listing_type.value,
                    last_page=pages[-1],
                )
                break

        logger.info(
            "Categoría completada",
            listing_type=listing_type.value,
            **result.stats(),
        )
        return result

    async def scrape_all(
        self,
        categories: Optional[Iterable[ListingType]] = None,
        max_pages: Optional[int] = None,
    ) -> ScrapeResult:
        """Scrapea las categorías pedidas (default: todas) y concatena."""
        total = ScrapeResult()
        for listing_type in categories or list(ListingType):
            total = total + await self.scrape_category(listing_type, max_pages=max_pages)
        return total
