"""
Extracción de listings desde el HTML de una página de resultados.
"""

import re

import structlog
from bs4 import BeautifulSoup, Tag

from tasador.models import ListingType, RawListing

logger = structlog.get_logger()

# Selectores CSS de las tarjetas de resultados.
# Si el portal cambia el layout, la página simplemente devuelve 0 listings.
SELECTORS = {
    "card": "div.listing-card",
    "address": ".listing-card__address",
    "beds": ".listing-card__beds",
    "baths": ".listing-card__baths",
    "price": ".listing-card__price",
}


def _clean_text(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _node_text(card: Tag, selector: str) -> str:
    """Texto de un nodo dentro de la tarjeta, o '' si no existe."""
    node = card.select_one(selector)
    if node is None:
        return ""
    return _clean_text(node.get_text(" "))


def extract_listings(html: str, listing_type: ListingType) -> list[RawListing]:
    """
    Parsea una página de resultados.

    Args:
        html: HTML completo de la página
        listing_type: Categoría con la que se etiquetan los listings

    Returns:
        Lista de RawListing (vacía si no hay tarjetas)
    """
    soup = BeautifulSoup(html, "html.parser")
    listings: list[RawListing] = []

    for card in soup.select(SELECTORS["card"]):
        address = _node_text(card, SELECTORS["address"])
        if not address:
            continue
        listings.append(
            RawListing(
                address=address,
                n_beds_text=_node_text(card, SELECTORS["beds"]),
                n_baths_text=_node_text(card, SELECTORS["baths"]),
                price_text=_node_text(card, SELECTORS["price"]),
                listing_type=listing_type,
            )
        )

    logger.debug(
        "Listings extraídos de página",
        listing_type=listing_type.value,
        count=len(listings),
    )
    return listings
