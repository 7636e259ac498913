"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tasador.exceptions import ConfigError

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> tasador/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Geocodificación
    google_maps_api_key: Optional[str] = Field(
        None, description="API key de Google Geocoding (GOOGLE_MAPS_API_KEY)"
    )
    geocode_url: str = Field(
        "https://maps.googleapis.com/maps/api/geocode/json",
        description="Endpoint REST de geocodificación",
    )
    geocode_region_suffix: str = Field(
        ", ON, Canada",
        description="Sufijo agregado a cada dirección para desambiguar la región",
    )
    country_token: str = Field(
        "Canada", description="Marca de país que debe aparecer en formatted_address"
    )
    geocode_timeout_seconds: float = Field(15.0, gt=0, description="Timeout por consulta")
    geocode_max_attempts: int = Field(3, ge=1, description="Intentos por dirección")
    geocode_concurrency: int = Field(8, ge=1, description="Consultas simultáneas")
    geocode_min_interval_seconds: float = Field(
        0.05, ge=0.0, description="Intervalo mínimo entre consultas (rate limit compartido)"
    )

    # Scraping
    listing_base_url: str = Field(
        "https://www.torontorealestateboard.com",
        description="URL base del portal de búsqueda de listings",
    )
    category_code_condo: str = Field("c", description="Código de búsqueda para condos")
    category_code_detached: str = Field("d", description="Código de búsqueda para casas")
    category_code_townhome: str = Field("t", description="Código de búsqueda para townhomes")
    category_code_condo_townhome: str = Field(
        "ct", description="Código de búsqueda para condo townhomes"
    )
    max_pages_condo: int = Field(300, ge=1, description="Máximo de páginas de condos")
    max_pages_detached: int = Field(50, ge=1, description="Máximo de páginas de casas")
    max_pages_townhome: int = Field(50, ge=1, description="Máximo de páginas de townhomes")
    max_pages_condo_townhome: int = Field(
        50, ge=1, description="Máximo de páginas de condo townhomes"
    )
    scrape_concurrency: int = Field(4, ge=1, description="Páginas descargadas en paralelo")
    scrape_delay_min: float = Field(1.0, description="Delay mínimo entre requests (segundos)")
    scrape_delay_max: float = Field(3.0, description="Delay máximo entre requests (segundos)")
    page_timeout_seconds: float = Field(60.0, gt=0, description="Timeout de navegación")
    fetch_max_attempts: int = Field(3, ge=1, description="Intentos por página")
    retry_backoff_seconds: float = Field(
        1.0, ge=0.0, description="Multiplicador del backoff exponencial entre reintentos"
    )

    # Datos y artefactos
    data_dir: Path = Field(_PROJECT_ROOT / "data", description="Directorio de datasets")
    artifacts_dir: Path = Field(
        _PROJECT_ROOT / "artifacts", description="Directorio de artefactos del modelo"
    )

    # Modelo (gradient boosting)
    model_max_depth: int = Field(6, ge=1, description="Profundidad máxima de los árboles")
    model_learning_rate: float = Field(0.05, gt=0, description="Learning rate")
    model_n_estimators: int = Field(600, ge=1, description="Cantidad de iteraciones")
    model_subsample: float = Field(0.8, gt=0, le=1, description="Submuestreo de filas")
    model_colsample_bytree: float = Field(0.8, gt=0, le=1, description="Submuestreo de columnas")
    model_test_size: float = Field(0.2, gt=0, lt=1, description="Fracción de hold-out")
    model_random_state: int = Field(42, description="Semilla")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")

    @property
    def listings_path(self) -> Path:
        return self.data_dir / "listings.csv"

    @property
    def enriched_path(self) -> Path:
        return self.data_dir / "enriched_listings.csv"

    @property
    def geocode_cache_path(self) -> Path:
        return self.data_dir / "geocode_cache.jsonl"

    @property
    def scrape_checkpoint_path(self) -> Path:
        return self.data_dir / "scrape_checkpoint.jsonl"

    def require_geocoding_api_key(self) -> str:
        """
        Devuelve la API key de geocodificación o falla con un mensaje accionable.

        Raises:
            ConfigError: Si GOOGLE_MAPS_API_KEY no está configurada
        """
        key = (self.google_maps_api_key or "").strip()
        if not key:
            raise ConfigError(
                "GOOGLE_MAPS_API_KEY es requerida para geocodificar. "
                "Configura la variable de entorno o agrégala al archivo .env."
            )
        return key


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
TARGET_LOCALITIES = [
    "Toronto",
    "Mississauga",
    "Vaughan",
    "Brampton",
    "Markham",
    "Richmond Hill",
    "Oakville",
    "Hamilton",
    "Burlington",
    "Barrie",
    "Oshawa",
    "Newmarket",
    "Aurora",
]

OTHER_LOCALITY = "Other"
