"""
Módulo de scrapers.

Descarga y parsea las páginas de búsqueda del portal.
"""

from tasador.scrapers.fetcher import BasePageFetcher, PageFetcher
from tasador.scrapers.extractor import extract_listings
from tasador.scrapers.checkpoint import ScrapeCheckpoint
from tasador.scrapers.aggregator import ListingAggregator, ScrapeResult, build_page_url

__all__ = [
    "BasePageFetcher",
    "PageFetcher",
    "extract_listings",
    "ScrapeCheckpoint",
    "ListingAggregator",
    "ScrapeResult",
    "build_page_url",
]
