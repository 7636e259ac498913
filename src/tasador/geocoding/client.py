"""
Cliente de Google Geocoding.

Una consulta por dirección. Consume cuota de la API, así que todas
las consultas comparten un rate limiter y un límite de concurrencia.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from tasador.config import Settings, get_settings
from tasador.exceptions import TransportError

logger = structlog.get_logger()

# Estados de la API que vale la pena reintentar
RETRYABLE_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}
SUCCESS_STATUSES = {"OK", "ZERO_RESULTS"}


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


@dataclass(frozen=True)
class GeocodeResponse:
    """Respuesta cruda del proveedor para una dirección, o el error si falló."""

    address: str
    payload: Optional[dict] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.payload is None


class RateLimiter:
    """Garantiza un intervalo mínimo entre llamadas, compartido entre tareas."""

    def __init__(self, min_interval: float):
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_call = 0.0

    async def wait(self):
        async with self._lock:
            delay = self._last_call + self.min_interval - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)
            self._last_call = time.monotonic()


class GeocodeClient:
    """
    Geocodifica direcciones con la API REST de Google.

    Uso:
        async with GeocodeClient(settings) as client:
            response = await client.geocode("123 Main St")

    geocode() nunca lanza: los errores de red/HTTP se devuelven
    como GeocodeResponse con `error`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        # Falla al construir si no hay API key
        self._api_key = self.settings.require_geocoding_api_key()
        self._http = http_client
        self._owns_http = http_client is None
        self._limiter = RateLimiter(self.settings.geocode_min_interval_seconds)
        self._semaphore = asyncio.Semaphore(self.settings.geocode_concurrency)

    async def __aenter__(self):
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.geocode_timeout_seconds)
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    def build_query(self, address: str) -> str:
        """Agrega el sufijo de región a la dirección."""
        return f"{address.strip()}{self.settings.geocode_region_suffix}"

    async def _request(self, query: str) -> dict:
        """Hace una consulta y devuelve el JSON si el estado es OK/ZERO_RESULTS."""
        if self._http is None:
            raise RuntimeError("Cliente no inicializado. Usa 'async with client:'")

        try:
            response = await self._http.get(
                self.settings.geocode_url,
                params={"address": query, "key": self._api_key},
                timeout=self.settings.geocode_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Error de red geocodificando: {e}") from e

        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} de la API de geocodificación",
                retryable=response.status_code >= 500 or response.status_code == 429,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"JSON inválido de la API: {e}", retryable=False) from e

        status = payload.get("status", "") if isinstance(payload, dict) else ""
        if status in SUCCESS_STATUSES:
            return payload
        message = payload.get("error_message", "") if isinstance(payload, dict) else ""
        raise TransportError(
            f"Geocoding status={status or 'desconocido'}: {message}".strip(),
            retryable=status in RETRYABLE_STATUSES,
        )

    async def geocode(self, address: str) -> GeocodeResponse:
        """
        Geocodifica una dirección.

        Args:
            address: Dirección como texto libre (sin región)

        Returns:
            GeocodeResponse con el payload crudo, o con `error` si falló
        """
        query = self.build_query(address)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.geocode_max_attempts),
            wait=wait_exponential(multiplier=self.settings.retry_backoff_seconds, max=30),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        started = time.perf_counter()
        try:
            async with self._semaphore:
                async for attempt in retrying:
                    with attempt:
                        await self._limiter.wait()
                        payload = await self._request(query)
        except (TransportError, RetryError) as e:
            logger.warning("Geocodificación fallida", address=address, error=str(e))
            return GeocodeResponse(address=address, error=str(e))

        logger.debug(
            "Dirección geocodificada",
            address=address,
            status=payload.get("status"),
            elapsed=round(time.perf_counter() - started, 3),
        )
        return GeocodeResponse(address=address, payload=payload)
