"""
Checkpoint de páginas scrapeadas.

Archivo JSONL append-only: una línea por página descargada con éxito
(incluidas las vacías, que marcan el fin de una categoría). Un scraping
interrumpido se retoma descargando solo las páginas que faltan.
"""

import json
from pathlib import Path
from typing import Optional

import structlog

from tasador.models import ListingType, RawListing

logger = structlog.get_logger()


class ScrapeCheckpoint:
    """Listings por (categoría, página), persistidos en JSONL."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._pages: dict[tuple[str, int], list[RawListing]] = {}
        self._needs_newline = False
        if self.path and self.path.exists():
            self._load()

    def _load(self):
        skipped = 0
        with self.path.open(encoding="utf-8") as fh:
            for line in fh:
                self._needs_newline = not line.endswith("\n")
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                    key = (entry["listing_type"], int(entry["page"]))
                    self._pages[key] = [
                        RawListing.model_validate(item) for item in entry["listings"]
                    ]
                except (ValueError, KeyError, TypeError):
                    # Línea truncada por una interrupción
                    skipped += 1
        logger.info(
            "Checkpoint de scraping cargado",
            path=str(self.path),
            pages=len(self._pages),
            skipped=skipped,
        )

    def __contains__(self, key: tuple[ListingType, int]) -> bool:
        listing_type, page = key
        return (listing_type.value, page) in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def get(self, listing_type: ListingType, page: int) -> Optional[list[RawListing]]:
        return self._pages.get((listing_type.value, page))

    def put(self, listing_type: ListingType, page: int, listings: list[RawListing]):
        """Guarda una página descargada y parseada."""
        self._pages[(listing_type.value, page)] = list(listings)
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(
            {
                "listing_type": listing_type.value,
                "page": page,
                "listings": [listing.model_dump(mode="json") for listing in listings],
            }
        )
        with self.path.open("a", encoding="utf-8") as fh:
            if self._needs_newline:
                fh.write("\n")
                self._needs_newline = False
            fh.write(line + "\n")
            fh.flush()

    def clear(self):
        """Descarta el checkpoint (el scraping terminó y el dataset ya se guardó)."""
        self._pages.clear()
        self._needs_newline = False
        if self.path is not None and self.path.exists():
            self.path.unlink()
            logger.info("Checkpoint de scraping eliminado", path=str(self.path))
