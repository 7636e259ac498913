"""
Descarga de páginas de resultados.

Usa Playwright (Chromium headless) porque el portal renderiza
los resultados con JavaScript.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Optional

import structlog
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    async_playwright,
)
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


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


class BasePageFetcher(ABC):
    """Interfaz común: una URL entra, HTML (o None si falló) sale."""

    @abstractmethod
    async def fetch(self, url: str) -> Optional[str]:
        """
        Descarga una página de resultados.

        Args:
            url: URL completa de la página de búsqueda

        Returns:
            HTML de la página o None si la descarga falló
        """
        pass


class PageFetcher(BasePageFetcher):
    """
    Fetcher basado en Playwright.

    Implementa navegación con timeout, reintentos acotados y
    delay aleatorio para evitar rate limiting.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self):
        """Context manager entry: inicializa el browser."""
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: cierra el browser."""
        await self._close_browser()

    async def _init_browser(self):
        """Inicializa Playwright y el browser."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=True,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
                "--no-sandbox",
            ],
        )
        self._context = await self._browser.new_context(
            viewport={"width": 1920, "height": 1080},
            user_agent=(
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                "AppleWebKit/537.36 (KHTML, like Gecko) "
                "Chrome/120.0.0.0 Safari/537.36"
            ),
            locale="en-CA",
            timezone_id="America/Toronto",
        )
        # Bloquear recursos innecesarios para acelerar
        await self._context.route(
            "**/*.{png,jpg,jpeg,gif,svg,ico,woff,woff2}",
            lambda route: route.abort(),
        )
        logger.info("Browser inicializado")

    async def _close_browser(self):
        """Cierra el browser y libera recursos."""
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()
            logger.info("Browser cerrado")
        except PlaywrightError as e:
            logger.warning(f"Error cerrando browser: {e}")

    async def _random_delay(self):
        """Aplica un delay aleatorio para evitar rate limiting."""
        delay = random.uniform(
            self.settings.scrape_delay_min,
            self.settings.scrape_delay_max,
        )
        await asyncio.sleep(delay)

    async def _load(self, url: str) -> str:
        """Navega a la URL y devuelve el HTML renderizado."""
        if not self._context:
            raise RuntimeError("Browser no inicializado. Usa 'async with fetcher:'")

        page = await self._context.new_page()
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.page_timeout_seconds * 1000,
            )
            if response is None:
                raise TransportError(f"Sin respuesta HTTP para {url}")
            if response.status >= 400:
                raise TransportError(
                    f"HTTP {response.status} para {url}",
                    retryable=response.status >= 500 or response.status == 429,
                )
            await self._random_delay()
            return await page.content()
        except PlaywrightError as e:
            # Incluye timeouts de navegación
            raise TransportError(f"Error navegando a {url}: {e}") from e
        finally:
            await page.close()

    async def fetch(self, url: str) -> Optional[str]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.fetch_max_attempts),
            wait=wait_exponential(multiplier=self.settings.retry_backoff_seconds, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._load(url)
        except (TransportError, RetryError) as e:
            logger.warning("Página descartada", url=url, error=str(e))
            return None
        return None
