"""
Checkpoint de respuestas de geocodificación.

Archivo JSONL append-only: una línea por dirección geocodificada.
Permite cortar un batch largo y retomarlo consultando solo las
direcciones que faltan.
"""

import json
from pathlib import Path
from typing import Optional

import structlog

from tasador.geocoding.client import GeocodeResponse

logger = structlog.get_logger()


class GeocodeCache:
    """Respuestas exitosas por dirección, persistidas en JSONL."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._responses: dict[str, dict] = {}
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
                    self._responses[entry["address"]] = entry["payload"]
                except (ValueError, KeyError, TypeError):
                    # Línea truncada por una interrupción
                    skipped += 1
        logger.info(
            "Checkpoint de geocodificación cargado",
            path=str(self.path),
            entries=len(self._responses),
            skipped=skipped,
        )

    def __contains__(self, address: str) -> bool:
        return address in self._responses

    def __len__(self) -> int:
        return len(self._responses)

    def get(self, address: str) -> Optional[GeocodeResponse]:
        payload = self._responses.get(address)
        if payload is None:
            return None
        return GeocodeResponse(address=address, payload=payload)

    def put(self, response: GeocodeResponse):
        """Guarda una respuesta exitosa. Las fallidas no se guardan para reintentarlas."""
        if response.failed:
            return
        self._responses[response.address] = response.payload
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps({"address": response.address, "payload": response.payload})
        with self.path.open("a", encoding="utf-8") as fh:
            if self._needs_newline:
                fh.write("\n")
                self._needs_newline = False
            fh.write(line + "\n")
            fh.flush()
