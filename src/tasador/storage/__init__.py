"""
Persistencia de datasets.
"""

from tasador.storage.dataset import (
    listings_to_frame,
    load_frame,
    load_listings,
    save_frame,
    save_listings,
)

__all__ = [
    "listings_to_frame",
    "load_frame",
    "load_listings",
    "save_frame",
    "save_listings",
]
